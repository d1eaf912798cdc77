"""
具体 placer 实现。

新增 placer：在此文件添加一个类，然后在 factory.py 注册即可。

已注册 placer：
  memory — InMemoryOrderPlacer   (进程内列表，开发和测试用)
  log    — LoggingOrderPlacer    (把序列化后的快照写进日志)
"""

import json
import logging

from ..serializers import serialize_submission
from ..types import OrderSubmission
from .base import BaseOrderPlacer

logger = logging.getLogger(__name__)


# ── InMemoryOrderPlacer ────────────────────────────────────────────────────
#
# 只把快照追加到 self.placed，不做任何投递。

class InMemoryOrderPlacer(BaseOrderPlacer):

    def __init__(self):
        self.placed: list[OrderSubmission] = []

    def place(self, submission: OrderSubmission) -> None:
        self.placed.append(submission)
        logger.info(
            "[Placement][memory] 收到订单 lab=%s case_type=%s (共 %d 单)",
            submission.lab_id, submission.case_type.value, len(self.placed),
        )


# ── LoggingOrderPlacer ─────────────────────────────────────────────────────
#
# 把 serialize_submission() 的 JSON 写到 INFO 日志。

class LoggingOrderPlacer(BaseOrderPlacer):

    def place(self, submission: OrderSubmission) -> None:
        payload = serialize_submission(submission)
        logger.info("[Placement][log] %s", json.dumps(payload, ensure_ascii=False, sort_keys=True))

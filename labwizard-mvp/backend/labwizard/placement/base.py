"""
BaseOrderPlacer — 外部下单协作方的抽象基类。

向导的职责在生成 OrderSubmission 快照后就结束了；
投递、持久化、计价都由 placer 背后的系统负责。

每个新 placer 只需：
1. 继承 BaseOrderPlacer
2. 实现 place()
3. 在 factory.py 的 _build_registry() 注册一行

store.submit() 完全不知道背后是哪种 placer。
"""

from abc import ABC, abstractmethod

from ..types import OrderSubmission


class BaseOrderPlacer(ABC):

    @abstractmethod
    def place(self, submission: OrderSubmission) -> None:
        """
        接收一份已完成的订单快照。

        Args:
            submission: 不可变的 OrderSubmission

        Raises:
            Exception: 投递失败时抛出；store 不会 reset，草稿保留以便重试
        """

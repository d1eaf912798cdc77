"""
BaseCaseSchema — 所有 case type schema 的抽象基类。

每个新 case type 只需：
1. 在 types.py 新建子记录 dataclass
2. 继承 BaseCaseSchema，声明 record_cls / required_fields，实现 summarize()
3. 在 factory.py 的 _build_registry() 注册一行

有条件分支的完成规则（例如 implant_stage、denture_type）
覆盖 missing_fields()，先 super() 再追加检查。
"""

from abc import ABC, abstractmethod

from ..teeth import all_valid
from .types import CaseType


def is_filled(value) -> bool:
    """None / "" / [] / {} / False / 0 都视为"未填"。"""
    return bool(value)


class BaseCaseSchema(ABC):
    """
    一个 case type 的子记录形状 + 完成判定 + 摘要。

    missing_fields() 返回仍未满足的字段名列表；空列表 == 第 3 步可以继续。
    校验只返回结果，不抛异常。
    """

    case_type: CaseType | None = None
    record_cls: type | None = None
    label: str = ""

    # 无论子分支如何都必须填的字段
    required_fields: tuple[str, ...] = ()

    # ── 子记录 ─────────────────────────────────────────────────────────────

    def new_record(self):
        """返回一个全新的空子记录。"""
        return self.record_cls()

    def field_names(self) -> tuple[str, ...]:
        return tuple(self.record_cls.__dataclass_fields__)

    # ── 完成判定 ───────────────────────────────────────────────────────────

    def missing_fields(self, record) -> list[str]:
        return [name for name in self.required_fields if not is_filled(getattr(record, name, None))]

    def is_complete(self, record) -> bool:
        if not isinstance(record, self.record_cls):
            return False
        return not self.missing_fields(record)

    @staticmethod
    def check_teeth(missing: list[str], name: str, teeth, minimum: int = 1) -> None:
        """至少 minimum 颗、且全部是合法 FDI 牙位码，否则把 name 记为缺失。"""
        teeth = teeth or []
        if len(teeth) < minimum or not all_valid(teeth):
            missing.append(name)

    # ── 摘要 ───────────────────────────────────────────────────────────────

    @abstractmethod
    def summarize(self, record) -> str:
        """审核页（第 9 步）显示的一行人类可读摘要。"""

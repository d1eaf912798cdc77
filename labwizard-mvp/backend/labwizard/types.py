"""
OrderDraft / OrderSubmission dataclass —— 向导唯一认识的订单格式。

OrderDraft       向导打开时创建的可变聚合根，只能通过 OrderDraftStore 的 setter 修改。
OrderSubmission  第 9 步提交时生成的不可变快照，交给外部下单协作方。
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, make_dataclass
from datetime import date, datetime
from functools import lru_cache
from types import MappingProxyType

from .casetypes.types import CaseRecord, CaseType

PRIORITIES = ("normal", "urgent", "rush")
GENDERS = ("male", "female", "other")

IMPRESSION_MATERIALS = {
    "alginate":     "Alginate",
    "pvs":          "PVS (Addition Silicone)",
    "polyether":    "Polyether",
    "digital_scan": "Digital Scan",
}


# ── 冻结子记录 ─────────────────────────────────────────────────────────────

def _frozen_value(value):
    if isinstance(value, Mapping):
        return MappingProxyType({key: _frozen_value(item) for key, item in value.items()})
    if isinstance(value, (list, tuple, set)):
        return tuple(_frozen_value(item) for item in value)
    return value


@lru_cache(maxsize=None)
def _frozen_record_cls(record_cls):
    """每个子记录类对应一个同字段的 frozen dataclass（FrozenCrownData ...）。"""
    return make_dataclass(
        f"Frozen{record_cls.__name__}",
        [(f.name, f.type) for f in fields(record_cls)],
        frozen=True,
        namespace={"case_type": record_cls.case_type},
    )


def freeze_record(record):
    """
    子记录 → 只读副本：字段不能赋值，list 变 tuple，dict 变 MappingProxyType。
    与原记录不共享任何可变容器。
    """
    if record is None:
        return None
    frozen_cls = _frozen_record_cls(type(record))
    return frozen_cls(**{f.name: _frozen_value(getattr(record, f.name)) for f in fields(record)})


@dataclass
class OrderDraft:
    step: int = 1
    lab_id: str | None = None
    case_type: CaseType | None = None
    case_data: CaseRecord | None = None       # 只有当前 case type 的那一个子记录

    # Patient Info
    patient_name: str = ""
    patient_age: str = ""
    patient_gender: str | None = None

    # Impression & Material
    has_impression: bool = False
    impression_material: str | None = None
    has_bite_registration: bool = False
    has_opposing_model: bool = False
    material: str | None = None
    shade: str | None = None
    stump_shade: str | None = None

    # Details
    photos: list[str] = field(default_factory=list)
    instructions: str = ""
    priority: str = "normal"
    delivery_date: date | None = None


@dataclass(frozen=True)
class OrderSubmission:
    """
    提交快照。

    case_data 是 freeze_record() 生成的只读副本：placer 改不了它，
    提交后 store.reset() 或草稿的后续修改也不会影响快照。
    photos 用 tuple 保存。
    """

    lab_id: str
    case_type: CaseType
    case_data: object                         # freeze_record() 冻结后的子记录
    submitted_at: datetime
    patient_name: str = ""
    patient_age: str = ""
    patient_gender: str | None = None
    has_impression: bool = False
    impression_material: str | None = None
    has_bite_registration: bool = False
    has_opposing_model: bool = False
    material: str | None = None
    shade: str | None = None
    stump_shade: str | None = None
    photos: tuple[str, ...] = ()
    instructions: str = ""
    priority: str = "normal"
    delivery_date: date | None = None

    @classmethod
    def from_draft(cls, draft: OrderDraft, submitted_at: datetime) -> "OrderSubmission":
        return cls(
            lab_id=draft.lab_id,
            case_type=draft.case_type,
            case_data=freeze_record(draft.case_data),
            submitted_at=submitted_at,
            patient_name=draft.patient_name,
            patient_age=draft.patient_age,
            patient_gender=draft.patient_gender,
            has_impression=draft.has_impression,
            impression_material=draft.impression_material,
            has_bite_registration=draft.has_bite_registration,
            has_opposing_model=draft.has_opposing_model,
            material=draft.material,
            shade=draft.shade,
            stump_shade=draft.stump_shade,
            photos=tuple(draft.photos),
            instructions=draft.instructions,
            priority=draft.priority,
            delivery_date=draft.delivery_date,
        )

"""
工厂函数：根据 case type 返回对应 schema。

新增 case type 只需：
  1. 在 schemas.py 新建 Schema 类
  2. 在此处 _build_registry() 加一行
  不需要修改 store / validation / serializers。
"""

from ..exceptions import ValidationError
from .base import BaseCaseSchema
from .types import CaseType


# ── 注册表 ──────────────────────────────────────────────────────────────────
# key: CaseType
# value: Schema 类（未实例化）
def _build_registry() -> dict[CaseType, type[BaseCaseSchema]]:
    # 延迟导入，避免循环依赖
    from .schemas import (
        AllOnXSchema,
        BleachingTraySchema,
        BridgeSchema,
        ClearAlignerSchema,
        CrownSchema,
        DentureSchema,
        FullMouthRehabSchema,
        ImplantSchema,
        InlayOnlaySchema,
        NightGuardSchema,
        ProvisionalSchema,
        RetainerSchema,
        SportsGuardSchema,
        SurgicalGuideSchema,
        VeneerSchema,
        WaxupSchema,
    )

    return {
        CaseType.CROWN:            CrownSchema,
        CaseType.BRIDGE:           BridgeSchema,
        CaseType.DENTURE:          DentureSchema,
        CaseType.IMPLANT:          ImplantSchema,
        CaseType.VENEER:           VeneerSchema,
        CaseType.INLAY_ONLAY:      InlayOnlaySchema,
        CaseType.NIGHT_GUARD:      NightGuardSchema,
        CaseType.RETAINER:         RetainerSchema,
        CaseType.WAXUP:            WaxupSchema,
        CaseType.FULL_MOUTH_REHAB: FullMouthRehabSchema,
        CaseType.SURGICAL_GUIDE:   SurgicalGuideSchema,
        CaseType.ALL_ON_X:         AllOnXSchema,
        CaseType.BLEACHING_TRAY:   BleachingTraySchema,
        CaseType.SPORTS_GUARD:     SportsGuardSchema,
        CaseType.CLEAR_ALIGNER:    ClearAlignerSchema,
        CaseType.PROVISIONAL:      ProvisionalSchema,
    }


def get_schema(case_type) -> BaseCaseSchema:
    """
    根据 case type 返回已实例化的 schema。

    Args:
        case_type: CaseType 或其字符串值，例如 "crown"、"inlay_onlay"

    Raises:
        ValidationError: 未知的 case type
    """
    registry = _build_registry()
    schema_cls = registry.get(CaseType.coerce(case_type))

    if schema_cls is None:
        raise ValidationError(
            message=f"Unknown case type: {case_type!r}.",
            code="UNKNOWN_CASE_TYPE",
            detail={"known_case_types": [ct.value for ct in registry]},
        )

    return schema_cls()


def new_record(case_type):
    """返回该 case type 的全新空子记录。"""
    return get_schema(case_type).new_record()

"""
比色（shade）步骤是否适用 —— 全项目唯一的判断入口。

sequencer、validator、store 都调这里，不要在别处重写跳过条件。
结果不缓存：case_type / material / FMR stage 任一变化后都要重新调用。
"""

from django.conf import settings

from .casetypes.types import CaseType

# 这些 case type 没有牙色可言（护齿垫、保持器、导板……）
NO_SHADE_CASE_TYPES = frozenset({
    CaseType.NIGHT_GUARD,
    CaseType.RETAINER,
    CaseType.WAXUP,
    CaseType.SURGICAL_GUIDE,
    CaseType.BLEACHING_TRAY,
    CaseType.SPORTS_GUARD,
    CaseType.CLEAR_ALIGNER,
})

# 全口重建里还没到出牙色的阶段
NO_SHADE_FMR_STAGES = frozenset({"diagnostic", "trial_bite"})

DEFAULT_METAL_ONLY_MATERIALS = ("full-metal", "gold", "gold-inlay")


def metal_only_materials() -> frozenset[str]:
    return frozenset(getattr(settings, "LABWIZARD_METAL_ONLY_MATERIALS", DEFAULT_METAL_ONLY_MATERIALS))


def needs_shade(case_type, material=None, case_data=None) -> bool:
    """
    Returns False when:
      - case_type 在固定的无比色集合里
      - full_mouth_rehab 且 stage 为 diagnostic / trial_bite
      - material 是纯金属材料
    其他情况返回 True（包括 case type 还没选的时候）。
    """
    case_type = CaseType.coerce(case_type)

    if case_type in NO_SHADE_CASE_TYPES:
        return False

    if case_type == CaseType.FULL_MOUTH_REHAB:
        if getattr(case_data, "stage", None) in NO_SHADE_FMR_STAGES:
            return False

    if material and material in metal_only_materials():
        return False

    return True

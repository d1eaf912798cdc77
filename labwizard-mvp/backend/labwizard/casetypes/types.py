"""
病例子记录（case sub-record）dataclass —— 每种 case type 一个变体。

OrderDraft.case_data 永远只持有其中一个实例（tagged union），
tag 就是每个类上的 case_type 类属性。切换 case type 时整个实例被替换，
不需要手动清空其他变体的字段。

所有字段都是可选的、带空默认值：用户在第 3 步逐步填写。
"""

from dataclasses import dataclass, field
from enum import Enum

from ..teeth import ToothCode


class CaseType(str, Enum):
    CROWN = "crown"
    BRIDGE = "bridge"
    DENTURE = "denture"
    IMPLANT = "implant"
    VENEER = "veneer"
    INLAY_ONLAY = "inlay_onlay"
    NIGHT_GUARD = "night_guard"
    RETAINER = "retainer"
    WAXUP = "waxup"
    FULL_MOUTH_REHAB = "full_mouth_rehab"
    SURGICAL_GUIDE = "surgical_guide"
    ALL_ON_X = "all_on_x"
    BLEACHING_TRAY = "bleaching_tray"
    SPORTS_GUARD = "sports_guard"
    CLEAR_ALIGNER = "clear_aligner"
    PROVISIONAL = "provisional"

    @classmethod
    def coerce(cls, value) -> "CaseType | None":
        """字符串 / CaseType → CaseType；未知值返回 None（不抛异常）。"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# ── 取值集合（只列出校验逻辑需要分支的字段） ─────────────────────────────────

ARCHES = ("upper", "lower", "both")
DENTURE_TYPES = ("full", "partial", "immediate", "overdenture", "obturator")
IMPLANT_STAGES = ("healing", "ready", "impression_taken")
FMR_STAGES = (
    "diagnostic", "provisionals", "trial_bite", "bisque_trial",
    "final_upper", "final_lower", "final_both",
)


@dataclass
class CrownData:
    case_type = CaseType.CROWN

    selected_teeth: list[ToothCode] = field(default_factory=list)
    crown_subtype: str | None = "full"          # full / three_quarter
    margin_type: str | None = None               # shoulder / chamfer / knife_edge / feather_edge
    occlusal_reduction: str | None = None
    opposing_dentition: str | None = None
    needs_post_core: bool | None = None
    post_type: str | None = None                 # fiber / metal / cast
    splinted: bool = False                       # 只有多颗牙时才有意义


@dataclass
class BridgeData:
    case_type = CaseType.BRIDGE

    bridge_type: str | None = "conventional"     # conventional / cantilever / maryland / precision_attachment
    pontic_design: str | None = None             # ridge_lap / modified_ridge_lap / sanitary / ovate
    start_tooth: ToothCode | None = None
    end_tooth: ToothCode | None = None
    abutments: list[ToothCode] = field(default_factory=list)
    pontics: list[ToothCode] = field(default_factory=list)
    units: int = 0
    attachment_positions: list[ToothCode] = field(default_factory=list)


@dataclass
class DentureData:
    case_type = CaseType.DENTURE

    denture_type: str | None = None              # DENTURE_TYPES
    arch: str | None = None
    stage: str | None = None                     # primary_impression / custom_tray / bite_registration / wax_try_in / final_finish
    missing_teeth: list[ToothCode] = field(default_factory=list)     # partial
    clasp_design: str | None = None                                  # partial
    base_plate_type: str | None = None                               # partial
    implant_positions: list[ToothCode] = field(default_factory=list) # overdenture
    attachment_type: str | None = None                               # overdenture
    teeth_mould: str | None = None
    teeth_size: str | None = None
    obturator_type: str | None = None                                # obturator
    defect_class: str | None = None
    defect_extent: str | None = None
    retention_method: str | None = None


@dataclass
class ImplantData:
    case_type = CaseType.IMPLANT

    positions: list[ToothCode] = field(default_factory=list)
    implant_stage: str | None = None             # IMPLANT_STAGES
    implant_system: str | None = None
    platform_size: str | None = None
    implant_diameter: str | None = None
    implant_length: str | None = None
    connection_type: str | None = None
    impression_technique: str | None = None
    components_included: list[str] = field(default_factory=list)
    restoration_type: str | None = None          # screw_retained / cement_retained
    abutment_type: str | None = None
    healing_abutment_height: str | None = None
    healing_abutment_diameter: str | None = None


@dataclass
class VeneerData:
    case_type = CaseType.VENEER

    veneer_type: str | None = None
    selected_teeth: list[ToothCode] = field(default_factory=list)
    incisal_overlap: str | None = None
    contact_design: str | None = None
    needs_try_in: bool = False
    length_modification: str | None = None


@dataclass
class InlayOnlayData:
    case_type = CaseType.INLAY_ONLAY

    inlay_type: str | None = None                # inlay / onlay / overlay
    selected_teeth: list[ToothCode] = field(default_factory=list)
    # 每颗牙的牙面组合，例如 {"36": "MOD", "46": "DO"}
    surface_involvement: dict[ToothCode, str] = field(default_factory=dict)


@dataclass
class NightGuardData:
    case_type = CaseType.NIGHT_GUARD

    guard_type: str | None = None                # soft / hard / dual_laminate
    arch: str | None = None
    thickness: str | None = None
    occlusal_scheme: str | None = None
    ramp_design: str | None = None
    tmj_symptoms: list[str] = field(default_factory=list)


@dataclass
class RetainerData:
    case_type = CaseType.RETAINER

    retainer_type: str | None = None             # hawley / essix / fixed_bonded
    arch: str | None = None
    wire_type: str | None = None                 # fixed_bonded
    span: str | None = None                      # 3_3 / 4_4 / 5_5 / 6_6
    clasp_type: str | None = None                # hawley


@dataclass
class WaxupData:
    case_type = CaseType.WAXUP

    purpose: str | None = None                   # diagnostic / provisional / smile_design
    selected_teeth: list[ToothCode] = field(default_factory=list)


@dataclass
class FullMouthRehabData:
    case_type = CaseType.FULL_MOUTH_REHAB

    stage: str | None = None                     # FMR_STAGES
    ovd_change: str | None = None
    current_ovd: str | None = None               # mm
    proposed_ovd: str | None = None              # mm
    treatment_approach: str | None = None

    has_facebow_record: bool = False
    has_cr_record: bool = False
    has_diagnostic_waxup: bool = False

    upper_arch_plan: list[str] = field(default_factory=list)
    lower_arch_plan: list[str] = field(default_factory=list)
    upper_teeth: list[ToothCode] = field(default_factory=list)
    lower_teeth: list[ToothCode] = field(default_factory=list)

    guide_scheme: str | None = None              # anterior / canine / group_function
    smile_design: bool = False
    deprogrammer: bool = False

    trial_bite_arch: str | None = None
    trial_bite_ovd_verified: bool = False
    trial_bite_occlusion_verified: bool = False
    trial_bite_adjustments: str = ""

    bisque_trial_arch: str | None = None
    bisque_fit_check: bool = False
    bisque_aesthetic_check: bool = False
    bisque_occlusion_check: bool = False
    bisque_shade_verified: bool = False
    bisque_adjustments: str = ""


@dataclass
class SurgicalGuideData:
    case_type = CaseType.SURGICAL_GUIDE

    guide_type: str | None = None                # tooth_supported / mucosa_supported / bone_supported
    surgery_type: str | None = None              # pilot_drill / fully_guided / stackable
    implant_positions: list[ToothCode] = field(default_factory=list)
    implant_system: str | None = None
    sleeve_size: str | None = None
    has_digital_scan: bool = False
    has_cbct: bool = False
    needs_restriction_sleeve: bool = False


@dataclass
class AllOnXData:
    case_type = CaseType.ALL_ON_X

    arch: str | None = None
    type: str | None = None                      # all_on_4 / all_on_6 / zygomatic
    stage: str | None = None                     # conversion / immediate_load / final
    implant_system: str | None = None
    implant_positions: list[ToothCode] = field(default_factory=list)
    ti_bar_included: bool = False
    material: str | None = None                  # pmma / zirconia / titanium_acrylic / peek
    has_multi_unit_abutments: bool = False
    screw_access_position: str | None = None


@dataclass
class BleachingTrayData:
    case_type = CaseType.BLEACHING_TRAY

    arch: str | None = None
    reservoir_included: bool = True
    scalloped: bool = True
    thickness: str | None = None


@dataclass
class SportsGuardData:
    case_type = CaseType.SPORTS_GUARD

    guard_type: str | None = None
    arch: str | None = None
    thickness: str | None = None
    sport_level: str | None = None
    sport_type: str | None = None
    color: str | None = None
    has_labial_bar: bool = False


@dataclass
class ClearAlignerData:
    case_type = CaseType.CLEAR_ALIGNER

    stage: str | None = None                     # records / refinement / retainer
    arch: str | None = None
    has_cbct: bool = False
    has_digital_scan: bool = False
    has_photos: bool = False
    aligner_number: str | None = None
    total_aligners: str | None = None
    ipr: bool = False
    attachments: bool = False


@dataclass
class ProvisionalData:
    case_type = CaseType.PROVISIONAL

    type: str | None = None                      # crown / bridge / full_arch
    material: str | None = None                  # pmma / composite / bis_acrylic
    duration: str | None = None
    selected_teeth: list[ToothCode] = field(default_factory=list)
    needs_custom_staining: bool = False
    has_digital_design: bool = False


CaseRecord = (
    CrownData | BridgeData | DentureData | ImplantData | VeneerData | InlayOnlayData
    | NightGuardData | RetainerData | WaxupData | FullMouthRehabData | SurgicalGuideData
    | AllOnXData | BleachingTrayData | SportsGuardData | ClearAlignerData | ProvisionalData
)

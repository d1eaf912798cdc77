"""
具体 case type schema —— 第 3 步（Selection）的逐 case type 决策表。

新增 case type：在此文件添加一个类，然后在 factory.py 注册即可。

已注册 case type：
  crown / bridge / denture / implant / veneer / inlay_onlay / night_guard /
  retainer / waxup / full_mouth_rehab / surgical_guide / all_on_x /
  bleaching_tray / sports_guard / clear_aligner / provisional
"""

from ..teeth import is_valid_surface
from .base import BaseCaseSchema, is_filled
from .types import (
    AllOnXData,
    BleachingTrayData,
    BridgeData,
    CaseType,
    ClearAlignerData,
    CrownData,
    DentureData,
    FullMouthRehabData,
    ImplantData,
    InlayOnlayData,
    NightGuardData,
    ProvisionalData,
    RetainerData,
    SportsGuardData,
    SurgicalGuideData,
    VeneerData,
    WaxupData,
)


def _teeth_text(teeth) -> str:
    return ", ".join(sorted(teeth))


def _label(value) -> str:
    return str(value).replace("_", " ") if value else ""


# ── CrownSchema ────────────────────────────────────────────────────────────
#
# 至少一颗牙 + 边缘设计。桩核没选桩类型只是软警告（见 validation.field_warnings）。

class CrownSchema(BaseCaseSchema):
    case_type = CaseType.CROWN
    record_cls = CrownData
    label = "Crown"
    required_fields = ("margin_type",)

    def missing_fields(self, record) -> list[str]:
        missing = []
        self.check_teeth(missing, "selected_teeth", record.selected_teeth)
        return missing + super().missing_fields(record)

    def summarize(self, record) -> str:
        if not record.selected_teeth:
            return "No teeth selected"
        count = len(record.selected_teeth)
        return f"{count} crown{'s' if count > 1 else ''} ({_teeth_text(record.selected_teeth)})"


# ── BridgeSchema ───────────────────────────────────────────────────────────
#
# units >= 3 才是真正的桥（单颗不算）；有桥体牙时必须选桥体设计。

class BridgeSchema(BaseCaseSchema):
    case_type = CaseType.BRIDGE
    record_cls = BridgeData
    label = "Bridge"

    MIN_UNITS = 3

    def missing_fields(self, record) -> list[str]:
        missing = []
        if record.units < self.MIN_UNITS:
            missing.append("units")
        if record.pontics and not record.pontic_design:
            missing.append("pontic_design")
        return missing

    def summarize(self, record) -> str:
        if record.start_tooth and record.end_tooth:
            return f"{record.units}-unit bridge ({record.start_tooth}-{record.end_tooth})"
        return "No range selected"


# ── DentureSchema ──────────────────────────────────────────────────────────
#
# 先按 denture_type 二次分派，每个子类型有自己的必填子集：
#   full        → arch
#   partial     → arch + 缺失牙 + 卡环设计
#   immediate   → arch
#   overdenture → arch + 至少 2 个种植位 + 附着体类型
#   obturator   → 阻塞器类型 + 缺损分类 + 缺损范围 + 固位方式

class DentureSchema(BaseCaseSchema):
    case_type = CaseType.DENTURE
    record_cls = DentureData
    label = "Denture"
    required_fields = ("denture_type",)

    SUBTYPE_FIELDS = {
        "full":        ("arch",),
        "partial":     ("arch", "clasp_design"),
        "immediate":   ("arch",),
        "overdenture": ("arch", "attachment_type"),
        "obturator":   ("obturator_type", "defect_class", "defect_extent", "retention_method"),
    }

    def missing_fields(self, record) -> list[str]:
        missing = super().missing_fields(record)
        if missing:
            return missing

        fields = self.SUBTYPE_FIELDS.get(record.denture_type)
        if fields is None:
            return ["denture_type"]

        missing += [name for name in fields if not is_filled(getattr(record, name))]
        if record.denture_type == "partial":
            self.check_teeth(missing, "missing_teeth", record.missing_teeth)
        elif record.denture_type == "overdenture":
            self.check_teeth(missing, "implant_positions", record.implant_positions, minimum=2)
        return missing

    def summarize(self, record) -> str:
        arch = record.arch or ""
        if record.denture_type == "full":
            return f"Full {arch} denture".replace("  ", " ")
        elif record.denture_type == "partial":
            return f"Partial denture ({len(record.missing_teeth)} teeth)"
        elif record.denture_type == "immediate":
            return f"Immediate denture - {arch}".rstrip(" -")
        elif record.denture_type == "overdenture":
            return f"Overdenture - {len(record.implant_positions)} implants"
        elif record.denture_type == "obturator":
            return f"Obturator - {arch}".rstrip(" -")
        return "Not configured"


# ── ImplantSchema ──────────────────────────────────────────────────────────
#
# implant_stage == healing 时只需要种植位；
# ready / impression_taken 需要完整的系统、平台、连接、取模、修复、基台信息。

class ImplantSchema(BaseCaseSchema):
    case_type = CaseType.IMPLANT
    record_cls = ImplantData
    label = "Implant"

    DETAIL_FIELDS = (
        "implant_stage",
        "implant_system",
        "platform_size",
        "connection_type",
        "impression_technique",
        "restoration_type",
        "abutment_type",
    )

    def missing_fields(self, record) -> list[str]:
        missing = []
        self.check_teeth(missing, "positions", record.positions)
        if record.implant_stage == "healing":
            return missing
        missing += [name for name in self.DETAIL_FIELDS if not is_filled(getattr(record, name))]
        return missing

    def summarize(self, record) -> str:
        count = len(record.positions)
        if not count:
            return "No positions selected"
        return f"{count} implant position{'s' if count > 1 else ''}"


# ── VeneerSchema ───────────────────────────────────────────────────────────

class VeneerSchema(BaseCaseSchema):
    case_type = CaseType.VENEER
    record_cls = VeneerData
    label = "Veneer"
    required_fields = ("veneer_type",)

    def missing_fields(self, record) -> list[str]:
        missing = []
        self.check_teeth(missing, "selected_teeth", record.selected_teeth)
        return missing + super().missing_fields(record)

    def summarize(self, record) -> str:
        if not record.selected_teeth:
            return "No teeth selected"
        prefix = f"{_label(record.veneer_type).capitalize()} veneers" if record.veneer_type else "Veneers"
        return f"{prefix} ({_teeth_text(record.selected_teeth)})"


# ── InlayOnlaySchema ───────────────────────────────────────────────────────
#
# 每颗选中的牙都必须有合法且非空的牙面组合。

class InlayOnlaySchema(BaseCaseSchema):
    case_type = CaseType.INLAY_ONLAY
    record_cls = InlayOnlayData
    label = "Inlay / Onlay"

    def missing_fields(self, record) -> list[str]:
        missing = []
        self.check_teeth(missing, "selected_teeth", record.selected_teeth)
        for tooth in record.selected_teeth:
            if not is_valid_surface(record.surface_involvement.get(tooth)):
                missing.append(f"surface_involvement[{tooth}]")
        return missing

    def summarize(self, record) -> str:
        if not record.selected_teeth:
            return "No teeth selected"
        parts = [
            f"{tooth} {record.surface_involvement[tooth]}" if record.surface_involvement.get(tooth) else tooth
            for tooth in sorted(record.selected_teeth)
        ]
        prefix = _label(record.inlay_type).capitalize() or "Inlay/Onlay"
        return f"{prefix}: {', '.join(parts)}"


# ── NightGuardSchema ───────────────────────────────────────────────────────

class NightGuardSchema(BaseCaseSchema):
    case_type = CaseType.NIGHT_GUARD
    record_cls = NightGuardData
    label = "Night Guard"
    required_fields = ("guard_type", "arch")

    def summarize(self, record) -> str:
        guard = _label(record.guard_type).capitalize()
        name = f"{guard} night guard" if guard else "Night guard"
        return f"{name} - {record.arch or ''}".strip(" -")


# ── RetainerSchema ─────────────────────────────────────────────────────────
#
# 固定舌侧保持器额外需要弓丝类型和跨度。

class RetainerSchema(BaseCaseSchema):
    case_type = CaseType.RETAINER
    record_cls = RetainerData
    label = "Retainer"
    required_fields = ("retainer_type", "arch")

    def missing_fields(self, record) -> list[str]:
        missing = super().missing_fields(record)
        if record.retainer_type == "fixed_bonded":
            missing += [name for name in ("wire_type", "span") if not is_filled(getattr(record, name))]
        return missing

    def summarize(self, record) -> str:
        retainer = _label(record.retainer_type).capitalize() or "Retainer"
        return f"{retainer} retainer - {record.arch or ''}".strip(" -")


# ── WaxupSchema ────────────────────────────────────────────────────────────

class WaxupSchema(BaseCaseSchema):
    case_type = CaseType.WAXUP
    record_cls = WaxupData
    label = "Wax-up"
    required_fields = ("purpose",)

    def missing_fields(self, record) -> list[str]:
        missing = super().missing_fields(record)
        self.check_teeth(missing, "selected_teeth", record.selected_teeth)
        return missing

    def summarize(self, record) -> str:
        if not record.selected_teeth:
            return "Not configured"
        return f"{_label(record.purpose).capitalize() or 'Wax-up'}: {_teeth_text(record.selected_teeth)}"


# ── FullMouthRehabSchema ───────────────────────────────────────────────────
#
# 按 stage 决定必填项：
#   diagnostic    → OVD 变化 + 治疗方式
#   trial_bite    → 试咬合牙弓 + 两个核对项之一
#   bisque_trial  → 素烧试戴牙弓 + 四个检查项之一
#   其余阶段      → OVD + 治疗方式 + 引导方式 + 至少一颗牙

class FullMouthRehabSchema(BaseCaseSchema):
    case_type = CaseType.FULL_MOUTH_REHAB
    record_cls = FullMouthRehabData
    label = "Full Mouth Rehab"

    PLANNING_FIELDS = ("ovd_change", "treatment_approach")
    TRIAL_BITE_FLAGS = ("trial_bite_ovd_verified", "trial_bite_occlusion_verified")
    BISQUE_FLAGS = (
        "bisque_fit_check",
        "bisque_aesthetic_check",
        "bisque_occlusion_check",
        "bisque_shade_verified",
    )

    def missing_fields(self, record) -> list[str]:
        def unfilled(*names):
            return [name for name in names if not is_filled(getattr(record, name))]

        if record.stage == "diagnostic":
            return unfilled(*self.PLANNING_FIELDS)

        if record.stage == "trial_bite":
            missing = unfilled("trial_bite_arch")
            if not any(getattr(record, name) for name in self.TRIAL_BITE_FLAGS):
                missing.append("trial_bite_verification")
            return missing

        if record.stage == "bisque_trial":
            missing = unfilled("bisque_trial_arch")
            if not any(getattr(record, name) for name in self.BISQUE_FLAGS):
                missing.append("bisque_checklist")
            return missing

        if record.stage in ("provisionals", "final_upper", "final_lower", "final_both"):
            missing = unfilled(*self.PLANNING_FIELDS, "guide_scheme")
            self.check_teeth(missing, "teeth", [*record.upper_teeth, *record.lower_teeth])
            return missing

        # 未选阶段（或未知阶段）
        return ["stage"]

    def summarize(self, record) -> str:
        total = len(record.upper_teeth) + len(record.lower_teeth)
        if total:
            return f"FMR: {total} teeth, {_label(record.stage) or 'planning'}"
        if record.stage:
            return f"Full Mouth Rehabilitation - {_label(record.stage)}"
        return "Full Mouth Rehabilitation"


# ── SurgicalGuideSchema ────────────────────────────────────────────────────
#
# CBCT 和口扫两者缺一不可。

class SurgicalGuideSchema(BaseCaseSchema):
    case_type = CaseType.SURGICAL_GUIDE
    record_cls = SurgicalGuideData
    label = "Surgical Guide"
    required_fields = ("guide_type", "surgery_type", "has_cbct", "has_digital_scan")

    def missing_fields(self, record) -> list[str]:
        missing = super().missing_fields(record)
        self.check_teeth(missing, "implant_positions", record.implant_positions)
        return missing

    def summarize(self, record) -> str:
        if record.implant_positions:
            return f"Guide: {', '.join(record.implant_positions)}"
        return "Surgical Guide"


# ── AllOnXSchema ───────────────────────────────────────────────────────────

class AllOnXSchema(BaseCaseSchema):
    case_type = CaseType.ALL_ON_X
    record_cls = AllOnXData
    label = "All-on-X"
    required_fields = ("arch", "type", "stage", "material")

    def summarize(self, record) -> str:
        count = record.type.replace("all_on_", "") if record.type and record.type.startswith("all_on_") else None
        name = f"All-on-{count}" if count else ("Zygomatic" if record.type == "zygomatic" else "All-on-X")
        return f"{name} - {record.arch or ''}".strip(" -")


# ── BleachingTraySchema ────────────────────────────────────────────────────

class BleachingTraySchema(BaseCaseSchema):
    case_type = CaseType.BLEACHING_TRAY
    record_cls = BleachingTrayData
    label = "Bleaching Tray"
    required_fields = ("arch",)

    def summarize(self, record) -> str:
        return f"Bleaching Tray - {record.arch or ''}".strip(" -")


# ── SportsGuardSchema ──────────────────────────────────────────────────────

class SportsGuardSchema(BaseCaseSchema):
    case_type = CaseType.SPORTS_GUARD
    record_cls = SportsGuardData
    label = "Sports Guard"
    required_fields = ("guard_type", "arch")

    def summarize(self, record) -> str:
        detail = record.sport_type or _label(record.sport_level)
        return f"Sports Guard - {detail}".strip(" -")


# ── ClearAlignerSchema ─────────────────────────────────────────────────────

class ClearAlignerSchema(BaseCaseSchema):
    case_type = CaseType.CLEAR_ALIGNER
    record_cls = ClearAlignerData
    label = "Clear Aligner"
    required_fields = ("stage", "arch")

    def summarize(self, record) -> str:
        return f"Aligners - {_label(record.stage)}".strip(" -")


# ── ProvisionalSchema ──────────────────────────────────────────────────────

class ProvisionalSchema(BaseCaseSchema):
    case_type = CaseType.PROVISIONAL
    record_cls = ProvisionalData
    label = "Provisional"
    required_fields = ("type", "material")

    def missing_fields(self, record) -> list[str]:
        missing = super().missing_fields(record)
        self.check_teeth(missing, "selected_teeth", record.selected_teeth)
        return missing

    def summarize(self, record) -> str:
        if record.selected_teeth:
            return f"Provisional: {_teeth_text(record.selected_teeth)}"
        return "Provisional Restoration"

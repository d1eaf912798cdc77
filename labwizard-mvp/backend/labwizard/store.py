"""
OrderDraftStore —— 下单向导的可变聚合。

一个向导会话持有一个 store 实例（由调用方创建、传递、负责 reset），没有模块级全局状态。
用户离开向导而没有取消时，草稿会一直保留，调用方需要自己调用 reset()。

所有 setter 都是全函数：
  - 不认识的值照样存下来，只是永远满足不了 can_proceed()
  - 给非当前 case type 的 setter 传数据 → 记日志，什么也不做
  - 不存在的字段名 → 丢弃并记 warning
只有 submit() 会抛异常（草稿不完整 / 需要确认）。
"""

import copy
import dataclasses
import logging
from collections.abc import Mapping

from django.utils import timezone

from . import serializers, steps, validation
from .casetypes import CaseType, get_schema
from .casetypes.types import (
    AllOnXData,
    BleachingTrayData,
    BridgeData,
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
from .exceptions import BlockError, WarningError
from .placement import BaseOrderPlacer, get_order_placer
from .shade import needs_shade
from .teeth import ToothCode, as_teeth, derive_range, toggle_member
from .types import OrderDraft, OrderSubmission

logger = logging.getLogger(__name__)

# 子记录里存放牙位列表 / 单个牙位的字段，写入时统一转成 ToothCode
TOOTH_LIST_FIELDS = frozenset({
    "selected_teeth", "abutments", "pontics", "attachment_positions", "missing_teeth",
    "positions", "implant_positions", "upper_teeth", "lower_teeth",
})
TOOTH_FIELDS = frozenset({"start_tooth", "end_tooth"})

# 哪些子记录有"种植位"列表，toggle_implant_position() 用
IMPLANT_POSITION_FIELD = {
    ImplantData: "positions",
    DentureData: "implant_positions",
    SurgicalGuideData: "implant_positions",
    AllOnXData: "implant_positions",
}

UPPER_QUADRANTS = (1, 2)


def _normalize_change(name, value):
    if name in TOOTH_LIST_FIELDS:
        return as_teeth(value)
    if name in TOOTH_FIELDS:
        return ToothCode(value) if value else None
    if name == "surface_involvement":
        if not isinstance(value, Mapping):
            return {}
        return {ToothCode(tooth): pattern for tooth, pattern in value.items()}
    return value


class OrderDraftStore:

    def __init__(self, placer: BaseOrderPlacer | None = None):
        self.placer = placer
        self.draft = OrderDraft()

    # ── 导航 ───────────────────────────────────────────────────────────────

    def set_step(self, step) -> None:
        self.draft.step = steps.clamp_step(step)

    def next_step(self) -> int:
        """当前步骤满足 can_proceed() 才前进；跳过比色由 sequencer 决定。"""
        if not self.can_proceed():
            logger.debug("[Wizard] step %d 未完成，缺少 %s", self.draft.step, self.missing_fields())
            return self.draft.step
        self.draft.step = steps.next_step(self.draft.step, self.needs_shade())
        return self.draft.step

    def prev_step(self) -> int:
        self.draft.step = steps.prev_step(self.draft.step, self.needs_shade())
        return self.draft.step

    def reset(self) -> None:
        self.draft = OrderDraft()

    # ── Lab / Case Type ────────────────────────────────────────────────────

    def set_lab(self, lab_id) -> None:
        self.draft.lab_id = lab_id or None

    def set_case_type(self, case_type) -> None:
        """
        切换 case type：整个子记录替换成新变体的空实例，旧 case 的数据全部丢弃。
        未知的 case type → 保持未选状态。
        """
        coerced = CaseType.coerce(case_type)
        if coerced is None:
            if case_type is not None:
                logger.warning("[Wizard] 未知 case type %r，保持未选状态", case_type)
            self.draft.case_type = None
            self.draft.case_data = None
            return

        self.draft.case_type = coerced
        self.draft.case_data = get_schema(coerced).new_record()
        logger.info("[Wizard] case type → %s", coerced.value)

    # ── Patient Info ───────────────────────────────────────────────────────

    def set_patient_info(self, name, age, gender) -> None:
        self.set_patient_name(name)
        self.set_patient_age(age)
        self.set_patient_gender(gender)

    def set_patient_name(self, name) -> None:
        self.draft.patient_name = "" if name is None else str(name).strip()

    def set_patient_age(self, age) -> None:
        self.draft.patient_age = "" if age is None else str(age).strip()

    def set_patient_gender(self, gender) -> None:
        self.draft.patient_gender = gender or None

    # ── Impression / Material / Shade ──────────────────────────────────────

    def set_has_impression(self, has_impression: bool) -> None:
        self.draft.has_impression = bool(has_impression)
        if not self.draft.has_impression:
            self.draft.impression_material = None

    def set_impression_material(self, material) -> None:
        self.draft.impression_material = material or None

    def set_has_bite_registration(self, has: bool) -> None:
        self.draft.has_bite_registration = bool(has)

    def set_has_opposing_model(self, has: bool) -> None:
        self.draft.has_opposing_model = bool(has)

    def set_material(self, material) -> None:
        self.draft.material = material or None

    def set_shade(self, shade) -> None:
        self.draft.shade = shade or None

    def set_stump_shade(self, shade) -> None:
        self.draft.stump_shade = shade or None

    # ── Details ────────────────────────────────────────────────────────────

    def add_photo(self, photo) -> None:
        if photo:
            self.draft.photos.append(photo)

    def remove_photo(self, index: int) -> None:
        if isinstance(index, int) and 0 <= index < len(self.draft.photos):
            del self.draft.photos[index]

    def set_instructions(self, instructions) -> None:
        self.draft.instructions = instructions or ""

    def set_priority(self, priority) -> None:
        self.draft.priority = priority or "normal"

    def set_delivery_date(self, delivery_date) -> None:
        self.draft.delivery_date = delivery_date

    # ── Case data（部分更新） ─────────────────────────────────────────────

    def set_case_data(self, **changes) -> None:
        """对当前子记录做部分更新。"""
        if self.draft.case_data is None:
            logger.debug("[Wizard] 还没选 case type，忽略 %s", sorted(changes))
            return
        self._update_case(type(self.draft.case_data), changes)

    def _update_case(self, record_cls, changes: dict) -> None:
        record = self.draft.case_data
        if not isinstance(record, record_cls):
            logger.debug(
                "[Wizard] 当前 case 是 %s，忽略 %s 的更新",
                type(record).__name__ if record is not None else None, record_cls.__name__,
            )
            return

        known = {f.name for f in dataclasses.fields(record_cls)}
        unknown = sorted(set(changes) - known)
        if unknown:
            logger.warning("[Wizard] %s 没有字段 %s，已丢弃", record_cls.__name__, unknown)

        updates = {name: _normalize_change(name, value) for name, value in changes.items() if name in known}
        record = dataclasses.replace(record, **updates)

        if isinstance(record, InlayOnlayData) and "selected_teeth" in updates:
            record.surface_involvement = {
                tooth: pattern for tooth, pattern in record.surface_involvement.items()
                if tooth in record.selected_teeth
            }

        # 基牙 / 桥体牙列表始终按牙位升序
        if isinstance(record, BridgeData):
            if "abutments" in updates:
                record.abutments = sorted(record.abutments)
            if "pontics" in updates:
                record.pontics = sorted(record.pontics)
        self.draft.case_data = record

    def set_crown_data(self, **changes) -> None:
        self._update_case(CrownData, changes)

    def set_bridge_data(self, **changes) -> None:
        self._update_case(BridgeData, changes)

    def set_denture_data(self, **changes) -> None:
        self._update_case(DentureData, changes)

    def set_implant_data(self, **changes) -> None:
        self._update_case(ImplantData, changes)

    def set_veneer_data(self, **changes) -> None:
        self._update_case(VeneerData, changes)

    def set_inlay_onlay_data(self, **changes) -> None:
        self._update_case(InlayOnlayData, changes)

    def set_night_guard_data(self, **changes) -> None:
        self._update_case(NightGuardData, changes)

    def set_retainer_data(self, **changes) -> None:
        self._update_case(RetainerData, changes)

    def set_waxup_data(self, **changes) -> None:
        self._update_case(WaxupData, changes)

    def set_fmr_data(self, **changes) -> None:
        self._update_case(FullMouthRehabData, changes)

    def set_surgical_guide_data(self, **changes) -> None:
        self._update_case(SurgicalGuideData, changes)

    def set_all_on_x_data(self, **changes) -> None:
        self._update_case(AllOnXData, changes)

    def set_bleaching_tray_data(self, **changes) -> None:
        self._update_case(BleachingTrayData, changes)

    def set_sports_guard_data(self, **changes) -> None:
        self._update_case(SportsGuardData, changes)

    def set_clear_aligner_data(self, **changes) -> None:
        self._update_case(ClearAlignerData, changes)

    def set_provisional_data(self, **changes) -> None:
        self._update_case(ProvisionalData, changes)

    # ── 牙位操作 ───────────────────────────────────────────────────────────

    def set_selected_teeth(self, teeth) -> None:
        if not hasattr(self.draft.case_data, "selected_teeth"):
            logger.debug("[Wizard] 当前 case 没有 selected_teeth")
            return
        self.set_case_data(selected_teeth=teeth)

    def toggle_tooth(self, tooth) -> None:
        """当前 case 的 selected_teeth 做对称差切换（crown / veneer / inlay_onlay / waxup / provisional）。"""
        record = self.draft.case_data
        if not hasattr(record, "selected_teeth"):
            logger.debug("[Wizard] 当前 case 没有 selected_teeth，忽略 toggle %r", tooth)
            return
        self.set_case_data(selected_teeth=toggle_member(record.selected_teeth, ToothCode(tooth)))

    def toggle_missing_tooth(self, tooth) -> None:
        """局部义齿的缺失牙切换。"""
        record = self.draft.case_data
        if isinstance(record, DentureData):
            self.set_denture_data(missing_teeth=toggle_member(record.missing_teeth, ToothCode(tooth)))

    def toggle_fmr_tooth(self, tooth) -> None:
        """全口重建：按象限放进 upper_teeth（1/2 象限）或 lower_teeth（3/4 象限）。"""
        record = self.draft.case_data
        tooth = ToothCode(tooth)
        if not isinstance(record, FullMouthRehabData) or not tooth.is_valid:
            logger.debug("[Wizard] 忽略全口重建牙位 %r", tooth)
            return
        if tooth.quadrant in UPPER_QUADRANTS:
            self.set_fmr_data(upper_teeth=toggle_member(record.upper_teeth, tooth))
        else:
            self.set_fmr_data(lower_teeth=toggle_member(record.lower_teeth, tooth))

    def set_surface(self, tooth, pattern) -> None:
        """嵌体/高嵌体：设置某颗牙的牙面组合。空 pattern == 清除。"""
        record = self.draft.case_data
        if not isinstance(record, InlayOnlayData):
            return
        surfaces = dict(record.surface_involvement)
        tooth = ToothCode(tooth)
        if pattern:
            surfaces[tooth] = str(pattern).upper()
        else:
            surfaces.pop(tooth, None)
        self.set_inlay_onlay_data(surface_involvement=surfaces)

    def toggle_implant_position(self, position) -> None:
        record = self.draft.case_data
        field_name = IMPLANT_POSITION_FIELD.get(type(record))
        if field_name is None:
            logger.debug("[Wizard] 当前 case 没有种植位，忽略 toggle %r", position)
            return
        current = getattr(record, field_name)
        self._update_case(type(record), {field_name: toggle_member(current, ToothCode(position))})

    def set_bridge_range(self, start, end) -> None:
        """
        设置桥体起止牙。任一端为空 → 桥体子记录整体重置。
        默认划分：首尾基牙、中间桥体牙（见 teeth.derive_range）。
        """
        if not isinstance(self.draft.case_data, BridgeData):
            return
        if not start or not end:
            self.draft.case_data = BridgeData()
            return

        span = derive_range(start, end)
        self.set_bridge_data(
            start_tooth=start,
            end_tooth=end,
            units=span.units,
            abutments=span.abutments,
            pontics=span.pontics,
        )

    def toggle_abutment(self, tooth) -> None:
        """在基牙和桥体牙之间移动一颗牙；两边都没有 → no-op。"""
        record = self.draft.case_data
        if not isinstance(record, BridgeData):
            return
        tooth = ToothCode(tooth)
        if tooth in record.abutments:
            self.set_bridge_data(
                abutments=[t for t in record.abutments if t != tooth],
                pontics=sorted([*record.pontics, tooth]),
            )
        elif tooth in record.pontics:
            self.set_bridge_data(
                pontics=[t for t in record.pontics if t != tooth],
                abutments=sorted([*record.abutments, tooth]),
            )

    # ── 派生读取 ───────────────────────────────────────────────────────────

    def snapshot(self) -> OrderDraft:
        return copy.deepcopy(self.draft)

    def needs_shade(self) -> bool:
        return needs_shade(self.draft.case_type, self.draft.material, self.draft.case_data)

    def can_proceed(self) -> bool:
        return validation.can_proceed(self.draft)

    def missing_fields(self) -> list[str]:
        return validation.missing_fields(self.draft)

    def field_warnings(self) -> list[dict]:
        return validation.field_warnings(self.draft)

    def display_step(self) -> int:
        return steps.display_step(self.draft.step, self.needs_shade())

    def display_total(self) -> int:
        return steps.display_total(self.needs_shade())

    def step_title(self) -> str:
        return steps.step_title(self.draft.step)

    def get_summary(self) -> str:
        return serializers.get_summary(self.draft)

    def review(self) -> dict:
        return serializers.serialize_review(self.draft)

    # ── 提交 ───────────────────────────────────────────────────────────────

    def submit(self, placer: BaseOrderPlacer | None = None, confirm: bool = False) -> OrderSubmission:
        """
        第 9 步提交：生成不可变快照 → 交给 placer → reset。

        Raises:
            BlockError:   不在第 9 步，或 1..8 步有未完成的
            WarningError: 有软警告且 confirm=False
        """
        incomplete = validation.incomplete_steps(self.draft)
        if self.draft.step != steps.Step.REVIEW or incomplete:
            raise BlockError(
                message="Order draft is not complete.",
                code='ORDER_INCOMPLETE',
                detail={'step': self.draft.step, 'incomplete_steps': incomplete},
            )

        warnings = self.field_warnings()
        if warnings and not confirm:
            raise WarningError(
                message="Order has warnings; resubmit with confirm=True to place it anyway.",
                detail={'warnings': warnings},
            )

        submission = OrderSubmission.from_draft(self.draft, timezone.now())
        placer = placer or self.placer or get_order_placer()
        placer.place(submission)

        logger.info(
            "[Wizard] 订单已提交 lab=%s case_type=%s (%s)",
            submission.lab_id, submission.case_type.value, self.get_summary(),
        )
        self.reset()
        return submission

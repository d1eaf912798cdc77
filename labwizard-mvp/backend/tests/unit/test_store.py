"""
测试 OrderDraftStore 的 setter 和导航：
- case type 切换会整体替换子记录
- 非当前 case 的 setter / 未知字段 → no-op
- toggle_tooth / toggle_implant_position / toggle_abutment
- set_bridge_range / set_surface
- next_step 只有 can_proceed 时才前进，跳过比色
- 共享字段 setter（照片、印模、患者信息）
"""

import pytest

from labwizard.casetypes import CaseType
from labwizard.casetypes.types import (
    AllOnXData,
    BridgeData,
    CrownData,
    DentureData,
    ImplantData,
    InlayOnlayData,
    SurgicalGuideData,
)
from labwizard.steps import Step
from labwizard.store import OrderDraftStore


# ── Case type ──────────────────────────────────────────────────────────────

class TestSetCaseType:

    def test_fresh_store_is_empty(self, store):
        assert store.draft.step == 1
        assert store.draft.case_type is None
        assert store.draft.case_data is None

    def test_sets_fresh_record(self, store):
        store.set_case_type("crown")
        assert store.draft.case_type == CaseType.CROWN
        assert store.draft.case_data == CrownData()

    def test_switching_discards_previous_case_data(self, store):
        store.set_case_type("crown")
        store.toggle_tooth("36")
        store.set_crown_data(margin_type="chamfer")

        store.set_case_type("implant")
        assert isinstance(store.draft.case_data, ImplantData)

        store.set_case_type("crown")
        assert store.draft.case_data.selected_teeth == []
        assert store.draft.case_data.margin_type is None

    def test_reselecting_same_type_resets(self, store):
        store.set_case_type("crown")
        store.toggle_tooth("36")
        store.set_case_type("crown")
        assert store.draft.case_data.selected_teeth == []

    def test_unknown_case_type_leaves_unset(self, store, caplog):
        store.set_case_type("crown")
        store.set_case_type("spaceship")
        assert store.draft.case_type is None
        assert store.draft.case_data is None
        assert "spaceship" in caplog.text

    def test_other_fields_survive_case_switch(self, store):
        store.set_lab("lab-1")
        store.set_material("zirconia")
        store.set_case_type("veneer")
        assert store.draft.lab_id == "lab-1"
        assert store.draft.material == "zirconia"


# ── Partial setters ────────────────────────────────────────────────────────

class TestCaseDataSetters:

    def test_partial_update_keeps_other_fields(self, store):
        store.set_case_type("crown")
        store.set_crown_data(margin_type="shoulder")
        store.set_crown_data(needs_post_core=True)
        assert store.draft.case_data.margin_type == "shoulder"
        assert store.draft.case_data.needs_post_core is True

    def test_setter_for_inactive_variant_is_noop(self, store):
        store.set_case_type("crown")
        store.set_implant_data(implant_system="nobel")
        assert store.draft.case_data == CrownData()

    def test_setter_without_case_type_is_noop(self, store):
        store.set_denture_data(denture_type="full")
        store.set_case_data(arch="upper")
        assert store.draft.case_data is None

    def test_unknown_field_is_dropped(self, store, caplog):
        store.set_case_type("night_guard")
        store.set_night_guard_data(arch="upper", colour="blue")
        assert store.draft.case_data.arch == "upper"
        assert not hasattr(store.draft.case_data, "colour")
        assert "colour" in caplog.text

    def test_tooth_lists_are_normalized(self, store):
        store.set_case_type("denture")
        store.set_denture_data(missing_teeth=[36, "37", 36])
        assert store.draft.case_data.missing_teeth == ["36", "37"]

    @pytest.mark.parametrize("case_type, setter, field", [
        ("crown", "set_crown_data", "margin_type"),
        ("bridge", "set_bridge_data", "pontic_design"),
        ("denture", "set_denture_data", "arch"),
        ("implant", "set_implant_data", "implant_system"),
        ("veneer", "set_veneer_data", "veneer_type"),
        ("inlay_onlay", "set_inlay_onlay_data", "inlay_type"),
        ("night_guard", "set_night_guard_data", "guard_type"),
        ("retainer", "set_retainer_data", "retainer_type"),
        ("waxup", "set_waxup_data", "purpose"),
        ("full_mouth_rehab", "set_fmr_data", "stage"),
        ("surgical_guide", "set_surgical_guide_data", "guide_type"),
        ("all_on_x", "set_all_on_x_data", "material"),
        ("bleaching_tray", "set_bleaching_tray_data", "arch"),
        ("sports_guard", "set_sports_guard_data", "sport_type"),
        ("clear_aligner", "set_clear_aligner_data", "stage"),
        ("provisional", "set_provisional_data", "material"),
    ])
    def test_named_setter_per_case_type(self, store, case_type, setter, field):
        store.set_case_type(case_type)
        getattr(store, setter)(**{field: "x"})
        assert getattr(store.draft.case_data, field) == "x"


# ── 牙位 ───────────────────────────────────────────────────────────────────

class TestToggleTooth:

    def test_toggle_is_involutive(self, store):
        store.set_case_type("crown")
        store.toggle_tooth("36")
        store.toggle_tooth("11")
        before = set(store.draft.case_data.selected_teeth)

        store.toggle_tooth("21")
        store.toggle_tooth("21")
        assert set(store.draft.case_data.selected_teeth) == before

        store.toggle_tooth("36")
        store.toggle_tooth("36")
        assert set(store.draft.case_data.selected_teeth) == before

    def test_malformed_tooth_is_stored(self, store):
        store.set_case_type("crown")
        store.toggle_tooth("99")
        assert store.draft.case_data.selected_teeth == ["99"]

    def test_noop_for_case_without_teeth(self, store):
        store.set_case_type("night_guard")
        store.toggle_tooth("11")
        assert not hasattr(store.draft.case_data, "selected_teeth")

    def test_inlay_removal_drops_surface(self, store):
        store.set_case_type("inlay_onlay")
        store.toggle_tooth("26")
        store.set_surface("26", "MOD")
        store.toggle_tooth("26")
        assert store.draft.case_data == InlayOnlayData()

    def test_set_selected_teeth_prunes_surfaces(self, store):
        store.set_case_type("inlay_onlay")
        store.set_selected_teeth(["26", "27"])
        store.set_surface("26", "MO")
        store.set_surface("27", "DO")
        store.set_selected_teeth(["27"])
        assert store.draft.case_data.surface_involvement == {"27": "DO"}

    def test_empty_surface_clears(self, store):
        store.set_case_type("inlay_onlay")
        store.toggle_tooth("26")
        store.set_surface("26", "mo")
        assert store.draft.case_data.surface_involvement == {"26": "MO"}
        store.set_surface("26", "")
        assert store.draft.case_data.surface_involvement == {}

    def test_missing_tooth_toggle(self, store):
        store.set_case_type("denture")
        store.toggle_missing_tooth("46")
        assert store.draft.case_data.missing_teeth == ["46"]

    def test_fmr_tooth_goes_to_its_arch(self, store):
        store.set_case_type("full_mouth_rehab")
        store.toggle_fmr_tooth("21")
        store.toggle_fmr_tooth("46")
        store.toggle_fmr_tooth("99")
        assert store.draft.case_data.upper_teeth == ["21"]
        assert store.draft.case_data.lower_teeth == ["46"]


class TestToggleImplantPosition:

    @pytest.mark.parametrize("case_type, record_cls, field", [
        ("implant", ImplantData, "positions"),
        ("denture", DentureData, "implant_positions"),
        ("surgical_guide", SurgicalGuideData, "implant_positions"),
        ("all_on_x", AllOnXData, "implant_positions"),
    ])
    def test_toggles_positions(self, store, case_type, record_cls, field):
        store.set_case_type(case_type)
        store.toggle_implant_position("36")
        store.toggle_implant_position("46")
        assert getattr(store.draft.case_data, field) == ["36", "46"]
        store.toggle_implant_position("36")
        assert getattr(store.draft.case_data, field) == ["46"]

    def test_noop_for_crown(self, store):
        store.set_case_type("crown")
        store.toggle_implant_position("36")
        assert store.draft.case_data == CrownData()


# ── Bridge ─────────────────────────────────────────────────────────────────

class TestBridge:

    def test_set_range_derives_partition(self, store):
        store.set_case_type("bridge")
        store.set_bridge_range("35", "37")
        data = store.draft.case_data
        assert (data.start_tooth, data.end_tooth) == ("35", "37")
        assert data.units == 3
        assert data.abutments == ["35", "37"]
        assert data.pontics == ["36"]

    def test_cross_quadrant_range_is_empty(self, store):
        store.set_case_type("bridge")
        store.set_bridge_range("11", "21")
        assert store.draft.case_data.units == 0
        assert store.draft.case_data.abutments == []

    def test_empty_argument_resets_bridge(self, store):
        store.set_case_type("bridge")
        store.set_bridge_data(pontic_design="ovate")
        store.set_bridge_range("35", "37")
        store.set_bridge_range("35", None)
        assert store.draft.case_data == BridgeData()

    def test_toggle_abutment_moves_between_lists(self, store):
        store.set_case_type("bridge")
        store.set_bridge_range("34", "37")
        store.toggle_abutment("36")
        assert store.draft.case_data.abutments == ["34", "36", "37"]
        assert store.draft.case_data.pontics == ["35"]

    def test_toggle_abutment_is_involutive(self, store):
        store.set_case_type("bridge")
        store.set_bridge_range("34", "37")
        before = store.snapshot().case_data
        store.toggle_abutment("35")
        store.toggle_abutment("35")
        assert store.draft.case_data == before

    def test_toggle_abutment_outside_span_is_noop(self, store):
        store.set_case_type("bridge")
        store.set_bridge_range("35", "37")
        before = store.snapshot().case_data
        store.toggle_abutment("46")
        assert store.draft.case_data == before

    def test_abutments_and_pontics_stay_disjoint(self, store):
        store.set_case_type("bridge")
        store.set_bridge_range("41", "45")
        for tooth in ["42", "44", "41", "43"]:
            store.toggle_abutment(tooth)
        data = store.draft.case_data
        assert not set(data.abutments) & set(data.pontics)
        assert sorted([*data.abutments, *data.pontics]) == ["41", "42", "43", "44", "45"]

    def test_range_on_non_bridge_is_noop(self, store):
        store.set_case_type("crown")
        store.set_bridge_range("35", "37")
        assert store.draft.case_data == CrownData()

    def test_unsorted_lists_are_sorted_on_set(self, store):
        store.set_case_type("bridge")
        store.set_bridge_data(abutments=["37", "35"], pontics=["36"])
        assert store.draft.case_data.abutments == ["35", "37"]

    def test_toggle_abutment_is_involutive_after_unsorted_set(self, store):
        store.set_case_type("bridge")
        store.set_bridge_data(abutments=["37", "35"], pontics=["36"])
        before = store.snapshot().case_data
        store.toggle_abutment("35")
        store.toggle_abutment("35")
        assert store.draft.case_data == before


# ── 导航 ───────────────────────────────────────────────────────────────────

class TestNavigation:

    def test_next_blocked_until_step_complete(self, store):
        assert store.next_step() == Step.LAB
        store.set_lab("lab-1")
        assert store.next_step() == Step.CASE_TYPE

    def test_shade_skipped_for_night_guard(self, store):
        store.set_lab("lab-1")
        store.next_step()
        store.set_case_type("night_guard")
        store.next_step()
        store.set_night_guard_data(guard_type="hard", arch="upper")
        store.next_step()
        store.next_step()
        store.set_material("acrylic")
        assert store.next_step() == Step.PATIENT_INFO
        assert store.display_step() == 6
        assert store.display_total() == 8
        assert store.prev_step() == Step.MATERIAL

    def test_shade_step_for_crown(self, store):
        store.set_step(Step.MATERIAL)
        store.set_case_type("crown")
        store.set_material("emax")
        assert store.next_step() == Step.SHADE
        assert store.next_step() == Step.SHADE
        store.set_shade("A2")
        assert store.next_step() == Step.PATIENT_INFO
        assert store.display_total() == 9

    def test_switching_to_metal_skips_shade(self, store):
        store.set_case_type("crown")
        store.set_step(Step.MATERIAL)
        store.set_material("gold")
        assert store.next_step() == Step.PATIENT_INFO

    def test_set_step_is_clamped(self, store):
        store.set_step(0)
        assert store.draft.step == 1
        store.set_step(99)
        assert store.draft.step == 9

    def test_optional_steps_always_proceed(self, store):
        store.set_step(Step.PATIENT_INFO)
        assert store.can_proceed()
        assert store.next_step() == Step.DETAILS

    def test_reset(self, ready_store):
        ready_store.reset()
        assert ready_store.draft.step == 1
        assert ready_store.draft.lab_id is None
        assert ready_store.draft.case_data is None

    def test_step_title(self, store):
        store.set_step(Step.IMPRESSION)
        assert store.step_title() == "Impression"


# ── 共享字段 ───────────────────────────────────────────────────────────────

class TestSharedSetters:

    def test_impression_false_clears_material(self, store):
        store.set_has_impression(True)
        store.set_impression_material("pvs")
        store.set_has_impression(False)
        assert store.draft.impression_material is None

    def test_photos(self, store):
        store.add_photo("a.jpg")
        store.add_photo("b.jpg")
        store.remove_photo(5)
        store.remove_photo(-1)
        assert store.draft.photos == ["a.jpg", "b.jpg"]
        store.remove_photo(0)
        assert store.draft.photos == ["b.jpg"]

    def test_patient_info(self, store):
        store.set_patient_info(" Alice ", 42, "female")
        assert store.draft.patient_name == "Alice"
        assert store.draft.patient_age == "42"
        assert store.draft.patient_gender == "female"

    def test_malformed_age_is_stored(self, store):
        store.set_patient_age("forty")
        assert store.draft.patient_age == "forty"

    def test_priority_defaults_to_normal(self, store):
        store.set_priority("rush")
        store.set_priority(None)
        assert store.draft.priority == "normal"

    def test_snapshot_is_independent(self, store):
        store.set_case_type("crown")
        snap = store.snapshot()
        store.toggle_tooth("11")
        assert snap.case_data.selected_teeth == []

    def test_stores_are_independent(self):
        first, second = OrderDraftStore(), OrderDraftStore()
        first.set_lab("lab-1")
        assert second.draft.lab_id is None


# ── 非法输入 ───────────────────────────────────────────────────────────────

class TestMalformedInput:

    def test_surface_involvement_string_becomes_empty(self, store):
        store.set_case_type("inlay_onlay")
        store.set_inlay_onlay_data(surface_involvement="MOD")
        assert store.draft.case_data.surface_involvement == {}

    @pytest.mark.parametrize("teeth", [36, "36"])
    def test_single_tooth_value_is_one_tooth(self, store, teeth):
        store.set_case_type("crown")
        store.set_crown_data(selected_teeth=teeth)
        assert store.draft.case_data.selected_teeth == ["36"]

    def test_non_string_patient_name_is_stringified(self, store):
        store.set_patient_name(42)
        assert store.draft.patient_name == "42"

    def test_non_int_photo_index_is_noop(self, store):
        store.add_photo("a.jpg")
        store.remove_photo("a")
        assert store.draft.photos == ["a.jpg"]

"""
Shared fixtures for all tests.

factory-boy factories live here so both unit/ and integration/ can import them.
子记录都是普通 dataclass，所以用 factory.Factory 而不是 DjangoModelFactory。
"""
import pytest

import factory
from labwizard.casetypes import CaseType
from labwizard.casetypes.types import (
    BridgeData,
    CrownData,
    DentureData,
    FullMouthRehabData,
    ImplantData,
    InlayOnlayData,
    NightGuardData,
)
from labwizard.placement.services import InMemoryOrderPlacer
from labwizard.store import OrderDraftStore
from labwizard.teeth import ToothCode
from labwizard.types import OrderDraft


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class CrownDataFactory(factory.Factory):
    class Meta:
        model = CrownData

    selected_teeth = factory.LazyFunction(lambda: [ToothCode("36")])
    margin_type = 'chamfer'


class BridgeDataFactory(factory.Factory):
    class Meta:
        model = BridgeData

    start_tooth = ToothCode("35")
    end_tooth = ToothCode("37")
    abutments = factory.LazyFunction(lambda: [ToothCode("35"), ToothCode("37")])
    pontics = factory.LazyFunction(lambda: [ToothCode("36")])
    units = 3
    pontic_design = 'modified_ridge_lap'


class DentureDataFactory(factory.Factory):
    class Meta:
        model = DentureData

    denture_type = 'full'
    arch = 'upper'


class ImplantDataFactory(factory.Factory):
    class Meta:
        model = ImplantData

    positions = factory.LazyFunction(lambda: [ToothCode("46")])
    implant_stage = 'ready'
    implant_system = 'straumann'
    platform_size = 'regular'
    connection_type = 'internal_hex'
    impression_technique = 'open_tray'
    restoration_type = 'screw_retained'
    abutment_type = 'stock'


class InlayOnlayDataFactory(factory.Factory):
    class Meta:
        model = InlayOnlayData

    inlay_type = 'onlay'
    selected_teeth = factory.LazyFunction(lambda: [ToothCode("26")])
    surface_involvement = factory.LazyFunction(lambda: {ToothCode("26"): "MOD"})


class NightGuardDataFactory(factory.Factory):
    class Meta:
        model = NightGuardData

    guard_type = 'hard'
    arch = 'upper'


class FullMouthRehabDataFactory(factory.Factory):
    class Meta:
        model = FullMouthRehabData

    stage = 'diagnostic'
    ovd_change = 'increase'
    treatment_approach = 'staged'


class OrderDraftFactory(factory.Factory):
    """第 1..8 步都已完成、停在第 9 步的 crown 草稿。"""

    class Meta:
        model = OrderDraft

    step = 9
    lab_id = factory.Sequence(lambda n: f'lab-{n}')
    case_type = CaseType.CROWN
    case_data = factory.SubFactory(CrownDataFactory)
    material = 'zirconia'
    shade = 'A2'
    patient_name = 'Alice Wang'
    patient_age = '42'
    patient_gender = 'female'


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def placer():
    return InMemoryOrderPlacer()


@pytest.fixture
def store(placer):
    """空白向导会话，提交走进程内 placer。"""
    return OrderDraftStore(placer=placer)


@pytest.fixture
def ready_store(store):
    """已经填到第 9 步、可以直接提交的 crown 订单。"""
    store.draft = OrderDraftFactory()
    return store

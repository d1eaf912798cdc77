"""
输出格式化 —— OrderDraft / OrderSubmission → 人类可读字符串或 JSON-able dict。

只负责「输出格式化」，不做任何校验，也不修改 draft。
"""

from collections.abc import Mapping
from dataclasses import fields

from .casetypes import get_schema
from .casetypes.types import BridgeData, CaseType, ImplantData
from .types import IMPRESSION_MATERIALS, OrderDraft, OrderSubmission


def get_summary(draft: OrderDraft) -> str:
    """第 9 步的 case 摘要，例如 "3-unit bridge (35-37)"、"Full upper denture"。"""
    case_type = CaseType.coerce(draft.case_type)
    if case_type is None or draft.case_data is None:
        return ""

    schema = get_schema(case_type)
    if not isinstance(draft.case_data, schema.record_cls):
        return ""
    return schema.summarize(draft.case_data)


def _impression_label(has_impression, impression_material) -> str:
    if not has_impression:
        return "Will take later"
    return IMPRESSION_MATERIALS.get(impression_material, impression_material or "-")


def serialize_review(draft: OrderDraft) -> dict:
    """Serialize the review card shown at step 9."""
    case_type = CaseType.coerce(draft.case_type)
    response = {
        'lab_id': draft.lab_id,
        'case_type': case_type.value if case_type else None,
        'case_label': get_schema(case_type).label if case_type else None,
        'selection': get_summary(draft) or '-',
        'impression': _impression_label(draft.has_impression, draft.impression_material),
        'material': draft.material,
        'shade': draft.shade,
        'priority': draft.priority,
        'patient': {
            'name': draft.patient_name,
            'age': draft.patient_age,
            'gender': draft.patient_gender,
        },
    }

    # case 专属的附加行
    if isinstance(draft.case_data, BridgeData):
        response['abutments'] = list(draft.case_data.abutments)
        response['pontics'] = list(draft.case_data.pontics)
    elif isinstance(draft.case_data, ImplantData) and draft.case_data.implant_system:
        response['implant_system'] = draft.case_data.implant_system

    if draft.stump_shade:
        response['stump_shade'] = draft.stump_shade
    if draft.delivery_date:
        response['delivery_date'] = _date_text(draft.delivery_date)

    return response


def _date_text(value) -> str:
    """date 用 ISO 格式；setter 不做类型检查，其他值原样转成字符串。"""
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _plain(value):
    """ToothCode / tuple / 只读 mapping → 普通 str / list / dict。"""
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, str):
        return str(value)
    return value


def serialize_submission(submission: OrderSubmission) -> dict:
    """Serialize the submission snapshot for the order-placement collaborator."""
    return {
        'lab_id': submission.lab_id,
        'case_type': submission.case_type.value,
        'case_data': {f.name: _plain(getattr(submission.case_data, f.name)) for f in fields(submission.case_data)},
        'submitted_at': submission.submitted_at.isoformat(),
        'impression': {
            'has_impression': submission.has_impression,
            'material': submission.impression_material,
            'has_bite_registration': submission.has_bite_registration,
            'has_opposing_model': submission.has_opposing_model,
        },
        'material': submission.material,
        'shade': submission.shade,
        'stump_shade': submission.stump_shade,
        'patient': {
            'name': submission.patient_name,
            'age': submission.patient_age,
            'gender': submission.patient_gender,
        },
        'priority': submission.priority,
        'instructions': submission.instructions,
        'photos': list(submission.photos),
        'delivery_date': _date_text(submission.delivery_date) if submission.delivery_date else None,
    }

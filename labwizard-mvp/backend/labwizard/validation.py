"""
Step validator —— 决定"继续"按钮能不能点。

纯函数：(draft, step) → bool，不修改 draft，不抛异常。
不完整 == can_proceed() 返回 False，用户补充输入后自然恢复，没有任何重试流程。

field_warnings() 是另一回事：格式不对但不挡路的软警告（例如年龄不是数字），
只在提交时要求确认，不影响导航。
"""

import re

from .casetypes import get_schema
from .casetypes.types import CaseType, CrownData
from .shade import needs_shade
from .steps import LAST_STEP, Step
from .types import GENDERS, PRIORITIES, OrderDraft

AGE_RE = re.compile(r"^\d{1,3}$")
MAX_PATIENT_AGE = 120


def _selection_missing(draft: OrderDraft) -> list[str]:
    case_type = CaseType.coerce(draft.case_type)
    if case_type is None or draft.case_data is None:
        return ["case_type"]

    schema = get_schema(case_type)
    if not isinstance(draft.case_data, schema.record_cls):
        return ["case_data"]
    return schema.missing_fields(draft.case_data)


def missing_fields(draft: OrderDraft, step=None) -> list[str]:
    """当前（或指定）步骤仍未满足的字段名。UI 用来做字段级提示。"""
    step = draft.step if step is None else step

    if step == Step.LAB:
        return [] if draft.lab_id else ["lab_id"]
    if step == Step.CASE_TYPE:
        return [] if CaseType.coerce(draft.case_type) else ["case_type"]
    if step == Step.SELECTION:
        return _selection_missing(draft)
    if step == Step.IMPRESSION:
        if draft.has_impression and not draft.impression_material:
            return ["impression_material"]
        return []
    if step == Step.MATERIAL:
        return [] if draft.material else ["material"]
    if step == Step.SHADE:
        if needs_shade(draft.case_type, draft.material, draft.case_data) and not draft.shade:
            return ["shade"]
        return []
    # 7 / 8 / 9：全是可选字段
    return []


def can_proceed(draft: OrderDraft, step=None) -> bool:
    return not missing_fields(draft, step)


def incomplete_steps(draft: OrderDraft) -> list[int]:
    """提交前检查：1..8 中哪些步骤还不满足。"""
    return [step for step in range(Step.LAB, LAST_STEP) if not can_proceed(draft, step)]


def field_warnings(draft: OrderDraft) -> list[dict]:
    """
    软校验：返回 [{'field', 'code', 'message'}, ...]。

    这些问题不挡导航（can_proceed 不看它们），只在 submit() 时要求 confirm。
    """
    warnings = []

    age = (draft.patient_age or "").strip()
    if age and not (AGE_RE.match(age) and 0 < int(age) <= MAX_PATIENT_AGE):
        warnings.append({
            'field': 'patient_age',
            'code': 'INVALID_PATIENT_AGE',
            'message': f"Patient age {age!r} is not a whole number between 1 and {MAX_PATIENT_AGE}.",
        })

    if draft.patient_gender is not None and draft.patient_gender not in GENDERS:
        warnings.append({
            'field': 'patient_gender',
            'code': 'UNKNOWN_PATIENT_GENDER',
            'message': f"Unknown patient gender {draft.patient_gender!r}.",
        })

    if draft.priority not in PRIORITIES:
        warnings.append({
            'field': 'priority',
            'code': 'UNKNOWN_PRIORITY',
            'message': f"Unknown priority {draft.priority!r}; expected one of {list(PRIORITIES)}.",
        })

    if isinstance(draft.case_data, CrownData):
        if draft.case_data.splinted and len(draft.case_data.selected_teeth) < 2:
            warnings.append({
                'field': 'case_data.splinted',
                'code': 'SPLINT_SINGLE_TOOTH',
                'message': "Splinting only applies when more than one tooth is selected.",
            })
        if draft.case_data.needs_post_core and not draft.case_data.post_type:
            warnings.append({
                'field': 'case_data.post_type',
                'code': 'POST_TYPE_MISSING',
                'message': "Post and core requested but no post type selected.",
            })

    return warnings

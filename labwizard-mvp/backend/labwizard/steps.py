"""
Step sequencer.

内部步骤号固定为 1..9，永远不重新编号；跳过比色时只改变"显示"用的步骤号和总数。
"""

from enum import IntEnum


class Step(IntEnum):
    LAB = 1
    CASE_TYPE = 2
    SELECTION = 3
    IMPRESSION = 4
    MATERIAL = 5
    SHADE = 6
    PATIENT_INFO = 7
    DETAILS = 8
    REVIEW = 9


FIRST_STEP = Step.LAB
LAST_STEP = Step.REVIEW

STEP_TITLES = {
    Step.LAB:          "Select Lab",
    Step.CASE_TYPE:    "Case Type",
    Step.SELECTION:    "Selection",
    Step.IMPRESSION:   "Impression",
    Step.MATERIAL:     "Material",
    Step.SHADE:        "Shade",
    Step.PATIENT_INFO: "Patient Info",
    Step.DETAILS:      "Details",
    Step.REVIEW:       "Review",
}


def clamp_step(step) -> int:
    try:
        step = int(step)
    except (TypeError, ValueError):
        return int(FIRST_STEP)
    return max(int(FIRST_STEP), min(step, int(LAST_STEP)))


def next_step(step: int, shade_needed: bool) -> int:
    if step == Step.MATERIAL and not shade_needed:
        return int(Step.PATIENT_INFO)
    return clamp_step(step + 1)


def prev_step(step: int, shade_needed: bool) -> int:
    if step == Step.PATIENT_INFO and not shade_needed:
        return int(Step.MATERIAL)
    return clamp_step(step - 1)


def display_total(shade_needed: bool) -> int:
    return int(LAST_STEP) if shade_needed else int(LAST_STEP) - 1


def display_step(step: int, shade_needed: bool) -> int:
    """进度条显示用：跳过比色时 6 之后的步骤号减一。结果总在 [1, display_total] 内。"""
    step = clamp_step(step)
    if not shade_needed and step > Step.SHADE:
        step -= 1
    return max(1, min(step, display_total(shade_needed)))


def step_title(step: int) -> str:
    return STEP_TITLES[Step(clamp_step(step))]

"""
Lesson gate: which of the four lesson steps a student may open.

The gate is derived from a progress snapshot alone, so it can be evaluated on
every page load without extra queries.
"""
from typing import Dict, List, Optional

from app.schemas.progress import ProgressSnapshot, StepInfo, StepState

STEP_INITIAL_TEST = 1
STEP_LECTURES = 2
STEP_SITUATIONAL = 3
STEP_FINAL_TEST = 4

STEP_LABELS = {
    STEP_INITIAL_TEST: "Initial Test",
    STEP_LECTURES: "Lectures",
    STEP_SITUATIONAL: "Situational Q&A",
    STEP_FINAL_TEST: "Final Test",
}
STEPS = tuple(STEP_LABELS)


def step_state(snapshot: ProgressSnapshot, step: int) -> StepState:
    """
    State of one step for a progress snapshot.

    A completed lesson has no locked content. A lesson that was never started
    (current step 0) still lets the student open step 1.
    """
    if snapshot.completed_at is not None:
        return "completed"
    current = max(snapshot.current_step, STEP_INITIAL_TEST)
    if step < current:
        return "completed"
    if step == current:
        return "current"
    return "locked"


def step_states(snapshot: ProgressSnapshot) -> Dict[int, StepState]:
    return {step: step_state(snapshot, step) for step in STEPS}


def describe_steps(snapshot: ProgressSnapshot) -> List[StepInfo]:
    return [
        StepInfo(step=step, label=STEP_LABELS[step], state=step_state(snapshot, step))
        for step in STEPS
    ]


def can_access(snapshot: ProgressSnapshot, step: int) -> bool:
    return step_state(snapshot, step) != "locked"


def redirect_step(snapshot: ProgressSnapshot, step: int) -> Optional[int]:
    """Prerequisite step to send the student to when ``step`` is locked."""
    if can_access(snapshot, step):
        return None
    return step - 1


def resume_step(snapshot: ProgressSnapshot) -> int:
    """Step the student should open next."""
    if snapshot.completed_at is not None:
        return STEP_FINAL_TEST
    return max(snapshot.current_step, STEP_INITIAL_TEST)

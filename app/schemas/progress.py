"""
Pydantic schemas for submissions and progression state.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

StepState = Literal["completed", "current", "locked"]


class ProgressSnapshot(BaseModel):
    """A student's position in a lesson. Defaults are the not-started state."""

    model_config = ConfigDict(from_attributes=True)

    current_step: int = 0
    completed_at: Optional[datetime] = None


class TestSubmit(BaseModel):
    """Schema for submitting a complete test."""

    test_id: int
    lesson_id: int
    answers: List[int]


class TestSubmitResult(BaseModel):
    """Schema for the graded submission."""

    result_id: int
    score: float
    correct_count: int
    total_questions: int


class SituationalSubmit(BaseModel):
    """Schema for answering one situational question."""

    situational_question_id: int
    lesson_id: int
    selected_answer_index: int
    score: int


class StepAdvance(BaseModel):
    """Schema for advancing a student after lectures or situational Q&A."""

    lesson_id: int
    current_step: int


class StepAdvanceResult(BaseModel):
    success: bool = True
    advanced: bool
    current_step: int


class StepInfo(BaseModel):
    step: int
    label: str
    state: StepState


class LessonGate(BaseModel):
    """Per-step states of a lesson for the current student."""

    lesson_id: int
    current_step: int
    completed_at: Optional[datetime] = None
    resume_step: int
    steps: List[StepInfo]


class StepAccess(BaseModel):
    step: int
    allowed: bool
    redirect_step: Optional[int] = None

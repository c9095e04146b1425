"""
Pydantic schemas for lesson results and the student dashboard.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from app.schemas.lesson import SituationalAnswer
from app.schemas.progress import ProgressSnapshot


class QuestionBreakdown(BaseModel):
    """Per-question outcome, graded against the current answer key."""

    question: str
    options: List[str]
    correct_answer: int
    user_answer: int
    is_correct: bool


class TestResultSummary(BaseModel):
    """The most recent submission of one lesson test."""

    result_id: int
    score: float
    answers: List[int]
    completed_at: Optional[datetime] = None
    total_questions: int
    correct_count: int
    question_breakdown: List[QuestionBreakdown]


class SituationalResultItem(BaseModel):
    id: int
    question: str
    answers: List[SituationalAnswer]
    order: int
    selected_answer_index: Optional[int] = None
    score: Optional[int] = None


class SituationalSummary(BaseModel):
    total_score: int
    max_score: int
    answered_count: int
    items: List[SituationalResultItem]


class LessonHeader(BaseModel):
    id: int
    title: str
    description: str


class LessonResults(BaseModel):
    """Initial vs final comparison plus situational answers for one lesson."""

    lesson: LessonHeader
    progress: ProgressSnapshot
    initial_result: Optional[TestResultSummary] = None
    final_result: Optional[TestResultSummary] = None
    improvement: Optional[float] = None
    situational: SituationalSummary


# ============= Dashboard =============

class DashboardStats(BaseModel):
    completed_count: int
    in_progress_count: int
    avg_score: Optional[float] = None
    total_lessons_attempted: int


class RecentLesson(BaseModel):
    id: int
    title: str
    completed_at: Optional[datetime] = None
    initial_score: Optional[float] = None
    final_score: Optional[float] = None


class NextLesson(BaseModel):
    id: int
    title: str
    current_step: int


class Achievement(BaseModel):
    id: str
    label: str


class Dashboard(BaseModel):
    stats: DashboardStats
    recent_lessons: List[RecentLesson]
    next_lesson: Optional[NextLesson] = None
    achievements: List[Achievement]

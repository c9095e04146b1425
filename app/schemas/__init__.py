"""Schemas module - Import all schemas."""
from app.schemas.user import User, UserCreate, Token
from app.schemas.lesson import (
    TestQuestion,
    SituationalAnswer,
    LessonCreate,
    LessonUpdate,
    Lesson,
    LessonSummary,
    TestSave,
    TestOut,
    StudentTest,
    LectureIn,
    LecturesSave,
    Lecture,
    SituationalQuestionIn,
    SituationalQuestionsSave,
    SituationalQuestion,
    StudentSituationalQuestion,
    StudentLesson,
)
from app.schemas.progress import (
    ProgressSnapshot,
    TestSubmit,
    TestSubmitResult,
    SituationalSubmit,
    StepAdvance,
    StepAdvanceResult,
    LessonGate,
    StepAccess,
)
from app.schemas.results import LessonResults, Dashboard
from app.schemas.common import ErrorResponse, SuccessResponse

__all__ = [
    "User",
    "UserCreate",
    "Token",
    "TestQuestion",
    "SituationalAnswer",
    "LessonCreate",
    "LessonUpdate",
    "Lesson",
    "LessonSummary",
    "TestSave",
    "TestOut",
    "StudentTest",
    "LectureIn",
    "LecturesSave",
    "Lecture",
    "SituationalQuestionIn",
    "SituationalQuestionsSave",
    "SituationalQuestion",
    "StudentSituationalQuestion",
    "StudentLesson",
    "ProgressSnapshot",
    "TestSubmit",
    "TestSubmitResult",
    "SituationalSubmit",
    "StepAdvance",
    "StepAdvanceResult",
    "LessonGate",
    "StepAccess",
    "LessonResults",
    "Dashboard",
    "ErrorResponse",
    "SuccessResponse",
]

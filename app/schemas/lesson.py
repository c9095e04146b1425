"""
Pydantic schemas for lesson content: lessons, tests, lectures, situational questions.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TEST_OPTION_COUNT = 4
SITUATIONAL_MAX_SCORE = 5


# ============= Stored JSON shapes =============

class TestQuestion(BaseModel):
    """One multiple-choice question as stored in ``Test.questions``."""

    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=TEST_OPTION_COUNT, max_length=TEST_OPTION_COUNT)
    correct_answer: int = Field(..., ge=0, le=TEST_OPTION_COUNT - 1)

    @field_validator("question", mode="before")
    @classmethod
    def strip_question(cls, v):
        return v.strip() if isinstance(v, str) else v


class SituationalAnswer(BaseModel):
    """One weighted answer option as stored in ``SituationalQuestion.answers``."""

    text: str = Field(..., min_length=5)
    conclusion: str = Field(..., min_length=10)
    score: int = Field(..., ge=0, le=SITUATIONAL_MAX_SCORE)

    @field_validator("text", "conclusion", mode="before")
    @classmethod
    def strip_text(cls, v):
        # Length limits apply to the trimmed text
        return v.strip() if isinstance(v, str) else v


# ============= Lessons =============

class LessonCreate(BaseModel):
    """Schema for creating a lesson."""

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class LessonUpdate(BaseModel):
    """Schema for updating a lesson."""

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class Lesson(BaseModel):
    """Schema for lesson response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class LessonSummary(Lesson):
    """Lesson with authored part counts, for the admin list."""

    lecture_count: int
    situational_count: int
    test_count: int
    is_published: bool


# ============= Tests =============

class TestSave(BaseModel):
    """Schema for saving (creating or replacing) a lesson test."""

    questions: List[TestQuestion] = Field(..., min_length=1)


class TestOut(BaseModel):
    """Schema for a test with its answer key (admin view)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    lesson_id: int
    type: str
    questions: List[TestQuestion]


class StudentTestQuestion(BaseModel):
    """A test question without its correct answer."""

    question: str
    options: List[str]


class StudentTest(BaseModel):
    """Schema for a test as shown to a student."""

    id: int
    lesson_id: int
    type: str
    questions: List[StudentTestQuestion]


# ============= Lectures =============

class LectureIn(BaseModel):
    """Schema for a lecture in a save request. Entries without ``id`` are created."""

    id: Optional[int] = None
    title: str = Field(..., min_length=1)
    description: str = ""
    video_url: Optional[str] = None
    file_path: Optional[str] = None
    order: Optional[int] = None


class LecturesSave(BaseModel):
    lectures: List[LectureIn]


class Lecture(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lesson_id: int
    title: str
    description: str
    video_url: Optional[str] = None
    file_path: Optional[str] = None
    order: int


# ============= Situational questions =============

class SituationalQuestionIn(BaseModel):
    """Schema for a situational question in a save request."""

    id: Optional[int] = None
    question: str = Field(..., min_length=10)
    answers: List[SituationalAnswer] = Field(..., min_length=2, max_length=6)
    order: Optional[int] = None

    @field_validator("question", mode="before")
    @classmethod
    def strip_question(cls, v):
        return v.strip() if isinstance(v, str) else v


class SituationalQuestionsSave(BaseModel):
    questions: List[SituationalQuestionIn]


class SituationalQuestion(BaseModel):
    """Schema for a situational question with answer weights (admin view)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    lesson_id: int
    question: str
    answers: List[SituationalAnswer]
    order: int


class StudentSituationalAnswer(BaseModel):
    text: str
    conclusion: str


class StudentSituationalQuestion(BaseModel):
    """A situational question as shown to a student, weights hidden."""

    id: int
    question: str
    answers: List[StudentSituationalAnswer]
    order: int


class StudentLesson(BaseModel):
    """A published lesson in the student list, with the student's position."""

    id: int
    title: str
    description: str
    lecture_count: int
    qa_count: int
    current_step: int
    completed_at: Optional[datetime] = None


class TestKind(str, Enum):
    """Path segment naming one of the two lesson tests."""

    initial = "initial"
    final = "final"

    @property
    def test_type(self) -> str:
        return self.value.upper()

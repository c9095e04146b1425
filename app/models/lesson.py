"""
Lesson content models: lessons, lectures, tests and situational questions.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base

TEST_TYPE_INITIAL = "INITIAL"
TEST_TYPE_FINAL = "FINAL"
TEST_TYPES = (TEST_TYPE_INITIAL, TEST_TYPE_FINAL)


class Lesson(Base):
    """Lesson model - a unit of instructional content authored by an admin."""

    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    created_by = relationship("User", back_populates="lessons")
    lectures = relationship(
        "Lecture", back_populates="lesson", cascade="all, delete-orphan", order_by="Lecture.order"
    )
    tests = relationship("Test", back_populates="lesson", cascade="all, delete-orphan")
    situational_questions = relationship(
        "SituationalQuestion",
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="SituationalQuestion.order",
    )
    progress = relationship("StudentProgress", back_populates="lesson", cascade="all, delete-orphan")

    def get_test(self, test_type: str):
        """Return the lesson's test of the given type, or None."""
        return next((t for t in self.tests if t.type == test_type), None)

    @property
    def is_published(self) -> bool:
        """Visible to students once every part of the lesson is authored."""
        return (
            len(self.lectures) > 0
            and len(self.situational_questions) > 0
            and self.get_test(TEST_TYPE_INITIAL) is not None
            and self.get_test(TEST_TYPE_FINAL) is not None
        )


class Lecture(Base):
    """Lecture model - ordered reading/video material of a lesson."""

    __tablename__ = "lectures"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    video_url = Column(String, nullable=True)
    file_path = Column(String, nullable=True)  # object storage key of an attached file
    order = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    lesson = relationship("Lesson", back_populates="lectures")


class Test(Base):
    """Test model - the INITIAL or FINAL multiple-choice test of a lesson."""

    __tablename__ = "tests"
    __table_args__ = (UniqueConstraint("lesson_id", "type", name="uq_tests_lesson_type"),)

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    type = Column(String, nullable=False)  # INITIAL, FINAL
    questions = Column(JSON, nullable=False)  # [{question, options[4], correct_answer}]
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    lesson = relationship("Lesson", back_populates="tests")
    results = relationship("TestResult", back_populates="test", cascade="all, delete-orphan")


class SituationalQuestion(Base):
    """Situational question - a scenario with weighted answer options."""

    __tablename__ = "situational_questions"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    question = Column(Text, nullable=False)
    answers = Column(JSON, nullable=False)  # [{text, conclusion, score}]
    order = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    lesson = relationship("Lesson", back_populates="situational_questions")
    results = relationship(
        "SituationalQAResult", back_populates="situational_question", cascade="all, delete-orphan"
    )

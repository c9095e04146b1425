"""
Models for recorded student answers: test results and situational answers.
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Float, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class TestResult(Base):
    """Test result model - one submission of one test. Rows are never updated."""

    __tablename__ = "test_results"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False, index=True)
    answers = Column(JSON, nullable=False)  # Submitted option indices, one per question
    score = Column(Float, nullable=False)  # Percentage score, unrounded
    correct_count = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    completed_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="test_results")
    test = relationship("Test", back_populates="results")


class SituationalQAResult(Base):
    """Situational answer model - the latest chosen option per user and question."""

    __tablename__ = "situational_qa_results"
    __table_args__ = (
        UniqueConstraint("user_id", "situational_question_id", name="uq_situational_result_user_question"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    situational_question_id = Column(
        Integer, ForeignKey("situational_questions.id", ondelete="CASCADE"), nullable=False
    )
    selected_answer_index = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)  # 0-5, copied from the chosen answer
    answered_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="situational_results")
    situational_question = relationship("SituationalQuestion", back_populates="results")

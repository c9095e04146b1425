"""Models module - Import all models here for Alembic."""
from app.db.base import Base
from app.models.user import User
from app.models.lesson import Lesson, Lecture, Test, SituationalQuestion
from app.models.result import TestResult, SituationalQAResult
from app.models.progress import StudentProgress

__all__ = ["Base", "User", "Lesson", "Lecture", "Test", "SituationalQuestion", "TestResult", "SituationalQAResult", "StudentProgress"]

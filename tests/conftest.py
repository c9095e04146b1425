"""Pytest configuration."""
import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENFORCE_STEP_ORDER"] = "false"

from fastapi.testclient import TestClient

from app.core.security import create_access_token, get_password_hash
from app.db.base import Base, SessionLocal, engine
from app.main import app
from app.models.user import User
from app.schemas.lesson import (
    LectureIn,
    LessonCreate,
    SituationalAnswer,
    SituationalQuestionIn,
    TestQuestion as QuestionIn,
)
from app.services import lesson_service

PASSWORD = "secret123"

# Correct answers: initial [0, 1, 3], final [2, 2, 0]
INITIAL_QUESTIONS = [
    QuestionIn(question="What does HTML stand for?", options=["HyperText Markup Language", "B", "C", "D"], correct_answer=0),
    QuestionIn(question="Which language styles pages?", options=["Python", "CSS", "SQL", "Bash"], correct_answer=1),
    QuestionIn(question="Which tag makes a link?", options=["<p>", "<div>", "<img>", "<a>"], correct_answer=3),
]
FINAL_QUESTIONS = [
    QuestionIn(question="Which method creates data?", options=["GET", "HEAD", "POST", "OPTIONS"], correct_answer=2),
    QuestionIn(question="Which status means not found?", options=["200", "301", "404", "500"], correct_answer=2),
    QuestionIn(question="Which property sets text colour?", options=["color", "font", "margin", "border"], correct_answer=0),
]


def make_user(db, email, role="student", username=None):
    user = User(
        email=email,
        username=username,
        full_name=email.split("@")[0].title(),
        hashed_password=get_password_hash(PASSWORD),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token(subject=str(user.id), extra_claims={"role": user.role})
    return {"Authorization": f"Bearer {token}"}


def author_lesson(db, admin, title="Web Basics"):
    """Create a lesson with both tests, two lectures and two situational questions."""
    lesson = lesson_service.create_lesson(
        db, LessonCreate(title=title, description="HTML, CSS and HTTP."), admin
    )
    lesson_service.save_test(db, lesson.id, "INITIAL", INITIAL_QUESTIONS)
    lesson_service.save_test(db, lesson.id, "FINAL", FINAL_QUESTIONS)
    lesson_service.save_lectures(
        db,
        lesson.id,
        [
            LectureIn(title="How the web works", description="<p>Clients and servers.</p>"),
            LectureIn(title="Styling", description="<p>Selectors.</p>"),
        ],
    )
    lesson_service.save_situational_questions(
        db,
        lesson.id,
        [
            SituationalQuestionIn(
                question="The page is broken on phones. What first?",
                answers=[
                    SituationalAnswer(text="Check the viewport", conclusion="Correct, start there.", score=5),
                    SituationalAnswer(text="Rewrite everything", conclusion="Far too drastic a step.", score=1),
                ],
            ),
            SituationalQuestionIn(
                question="A form submits twice. What do you check?",
                answers=[
                    SituationalAnswer(text="Ignore the issue", conclusion="Users will notice this.", score=0),
                    SituationalAnswer(text="Inspect the handlers", conclusion="Good, look for duplicates.", score=4),
                    SituationalAnswer(text="Restart the server", conclusion="Does not address the cause.", score=2),
                ],
            ),
        ],
    )
    db.refresh(lesson)
    return lesson


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def admin(db):
    return make_user(db, "admin@school.uz", role="admin", username="admin")


@pytest.fixture
def student(db):
    return make_user(db, "student@school.uz", username="student")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def student_headers(student):
    return auth_headers(student)


@pytest.fixture
def lesson(db, admin):
    return author_lesson(db, admin)


@pytest.fixture
def initial_test(lesson):
    return lesson.get_test("INITIAL")


@pytest.fixture
def final_test(lesson):
    return lesson.get_test("FINAL")


@pytest.fixture
def enforce_order(monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "ENFORCE_STEP_ORDER", True)

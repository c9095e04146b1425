"""
Database initialization and seeding.
"""
import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import get_password_hash
from app.db.base import commit
from app.models.lesson import Lesson, TEST_TYPE_FINAL, TEST_TYPE_INITIAL
from app.models.user import User
from app.schemas.lesson import (
    LectureIn,
    LessonCreate,
    SituationalAnswer,
    SituationalQuestionIn,
    TestQuestion,
)
from app.services import lesson_service

logger = logging.getLogger(__name__)

DEMO_LESSON_TITLE = "Web Development Basics"

DEMO_QUESTIONS = [
    TestQuestion(
        question="What does HTML stand for?",
        options=[
            "HyperText Markup Language",
            "High Transfer Machine Language",
            "Hyperlink Text Management Language",
            "Home Tool Markup Language",
        ],
        correct_answer=0,
    ),
    TestQuestion(
        question="Which language styles web pages?",
        options=["Python", "CSS", "SQL", "Bash"],
        correct_answer=1,
    ),
    TestQuestion(
        question="Which HTTP method is used to submit a form that creates data?",
        options=["GET", "HEAD", "POST", "OPTIONS"],
        correct_answer=2,
    ),
]


def init_db(db: Session) -> None:
    """
    Initialize database with default data.

    Args:
        db: Database session
    """
    # Check if admin user exists
    admin = db.query(User).filter(User.email == settings.FIRST_ADMIN_EMAIL).first()
    if not admin:
        admin = User(
            email=settings.FIRST_ADMIN_EMAIL,
            username="admin",
            full_name="System Administrator",
            hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            role="admin",
            is_active=True,
        )
        db.add(admin)
        commit(db, "create admin user")
        db.refresh(admin)
        logger.info("Admin user created successfully")

    if not db.query(Lesson).filter(Lesson.title == DEMO_LESSON_TITLE).first():
        seed_demo_lesson(db, admin)


def seed_demo_lesson(db: Session, admin: User) -> Lesson:
    """Create a fully authored (published) lesson for trying the student flow."""
    lesson = lesson_service.create_lesson(
        db,
        LessonCreate(title=DEMO_LESSON_TITLE, description="HTML, CSS and HTTP in one short lesson."),
        admin,
    )
    lesson_service.save_test(db, lesson.id, TEST_TYPE_INITIAL, DEMO_QUESTIONS)  # type: ignore
    lesson_service.save_test(db, lesson.id, TEST_TYPE_FINAL, DEMO_QUESTIONS)  # type: ignore
    lesson_service.save_lectures(
        db,
        lesson.id,  # type: ignore
        [
            LectureIn(title="How the web works", description="<p>Clients, servers and HTTP.</p>"),
            LectureIn(title="HTML and CSS", description="<p>Structure and presentation.</p>"),
        ],
    )
    lesson_service.save_situational_questions(
        db,
        lesson.id,  # type: ignore
        [
            SituationalQuestionIn(
                question="Your page looks broken on mobile phones. What do you do first?",
                answers=[
                    SituationalAnswer(
                        text="Add a viewport meta tag and check media queries",
                        conclusion="Right: responsive layout starts with the viewport.",
                        score=5,
                    ),
                    SituationalAnswer(
                        text="Rewrite the site in a new framework",
                        conclusion="Too drastic: the problem is usually configuration.",
                        score=1,
                    ),
                    SituationalAnswer(
                        text="Ignore it, most users are on desktop",
                        conclusion="Risky: a large share of traffic is mobile.",
                        score=0,
                    ),
                ],
            ),
        ],
    )
    logger.info(f"Demo lesson {lesson.id} created")
    return lesson

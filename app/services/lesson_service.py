"""
Lesson authoring (admin) and student-facing lesson reads.
"""
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.db.base import commit
from app.models.lesson import (
    Lecture,
    Lesson,
    SituationalQuestion,
    Test,
    TEST_TYPE_FINAL,
    TEST_TYPE_INITIAL,
)
from app.models.progress import StudentProgress
from app.models.user import User
from app.schemas.lesson import (
    LectureIn,
    LessonCreate,
    LessonSummary,
    LessonUpdate,
    SituationalQuestionIn,
    StudentLesson,
    StudentSituationalAnswer,
    StudentSituationalQuestion,
    StudentTest,
    StudentTestQuestion,
    TestQuestion,
)
from app.services.progress_tracker import load_situational_answers, load_test_questions

logger = logging.getLogger(__name__)


# ============= Lessons =============

def get_lesson(db: Session, lesson_id: int) -> Lesson:
    lesson = db.query(Lesson).filter(Lesson.id == lesson_id).first()
    if not lesson:
        raise NotFoundError("Lesson not found")
    return lesson


def list_lessons(db: Session) -> List[LessonSummary]:
    """All lessons, newest first, with counts of their authored parts."""
    lessons = db.query(Lesson).order_by(Lesson.created_at.desc(), Lesson.id.desc()).all()
    return [
        LessonSummary(
            id=lesson.id,  # type: ignore
            title=lesson.title,  # type: ignore
            description=lesson.description,  # type: ignore
            created_by_id=lesson.created_by_id,  # type: ignore
            created_at=lesson.created_at,  # type: ignore
            updated_at=lesson.updated_at,  # type: ignore
            lecture_count=len(lesson.lectures),
            situational_count=len(lesson.situational_questions),
            test_count=len(lesson.tests),
            is_published=lesson.is_published,
        )
        for lesson in lessons
    ]


def create_lesson(db: Session, data: LessonCreate, creator: User) -> Lesson:
    lesson = Lesson(title=data.title, description=data.description, created_by_id=creator.id)
    db.add(lesson)
    commit(db, "create lesson")
    db.refresh(lesson)
    logger.info(f"Admin {creator.id} created lesson {lesson.id}")
    return lesson


def update_lesson(db: Session, lesson_id: int, data: LessonUpdate) -> Lesson:
    lesson = get_lesson(db, lesson_id)
    if data.title is not None:
        lesson.title = data.title  # type: ignore
    if data.description is not None:
        lesson.description = data.description  # type: ignore
    commit(db, f"update lesson {lesson_id}")
    db.refresh(lesson)
    return lesson


def delete_lesson(db: Session, lesson_id: int) -> None:
    """Delete a lesson with its content and every student's results and progress."""
    lesson = get_lesson(db, lesson_id)
    db.delete(lesson)
    commit(db, f"delete lesson {lesson_id}")
    logger.info(f"Deleted lesson {lesson_id}")


# ============= Tests =============

def get_test(db: Session, lesson_id: int, test_type: str) -> Test:
    test = db.query(Test).filter(Test.lesson_id == lesson_id, Test.type == test_type).first()
    if not test:
        raise NotFoundError(f"{test_type.capitalize()} test not found")
    return test


def save_test(db: Session, lesson_id: int, test_type: str, questions: Sequence[TestQuestion]) -> Test:
    """
    Create or replace the lesson's test of ``test_type``.

    Existing results keep their raw answers and are graded against the new
    questions when displayed.
    """
    get_lesson(db, lesson_id)
    payload = [q.model_dump() for q in questions]

    test = db.query(Test).filter(Test.lesson_id == lesson_id, Test.type == test_type).first()
    if test is None:
        test = Test(lesson_id=lesson_id, type=test_type, questions=payload)
        db.add(test)
    else:
        test.questions = payload  # type: ignore

    commit(db, f"save {test_type} test of lesson {lesson_id}")
    db.refresh(test)
    logger.info(f"Saved {test_type} test of lesson {lesson_id} with {len(payload)} questions")
    return test


# ============= Lectures =============

def list_lectures(db: Session, lesson_id: int) -> List[Lecture]:
    return (
        db.query(Lecture)
        .filter(Lecture.lesson_id == lesson_id)
        .order_by(Lecture.order.asc(), Lecture.id.asc())
        .all()
    )


def save_lectures(db: Session, lesson_id: int, lectures: Sequence[LectureIn]) -> List[Lecture]:
    """
    Replace the lesson's lecture list.

    Lectures missing from ``lectures`` are deleted, entries with a known ``id``
    are updated and the rest are created.
    """
    get_lesson(db, lesson_id)
    existing: Dict[int, Lecture] = {lecture.id: lecture for lecture in list_lectures(db, lesson_id)}  # type: ignore
    incoming_ids = {lecture.id for lecture in lectures if lecture.id is not None}

    for lecture_id, lecture in existing.items():
        if lecture_id not in incoming_ids:
            db.delete(lecture)

    for index, item in enumerate(lectures):
        values = dict(
            title=item.title,
            description=item.description or "",
            video_url=item.video_url or None,
            file_path=item.file_path or None,
            order=item.order if item.order is not None else index + 1,
        )
        lecture = existing.get(item.id) if item.id is not None else None
        if lecture is None:
            db.add(Lecture(lesson_id=lesson_id, **values))
        else:
            for key, value in values.items():
                setattr(lecture, key, value)

    commit(db, f"save lectures of lesson {lesson_id}")
    return list_lectures(db, lesson_id)


# ============= Situational questions =============

def list_situational_questions(db: Session, lesson_id: int) -> List[SituationalQuestion]:
    return (
        db.query(SituationalQuestion)
        .filter(SituationalQuestion.lesson_id == lesson_id)
        .order_by(SituationalQuestion.order.asc(), SituationalQuestion.id.asc())
        .all()
    )


def save_situational_questions(
    db: Session, lesson_id: int, questions: Sequence[SituationalQuestionIn]
) -> List[SituationalQuestion]:
    """
    Replace the lesson's situational questions.

    Removing a question also removes the answers students gave to it.
    """
    get_lesson(db, lesson_id)
    existing: Dict[int, SituationalQuestion] = {
        q.id: q for q in list_situational_questions(db, lesson_id)  # type: ignore
    }
    incoming_ids = {q.id for q in questions if q.id is not None}

    for question_id, question in existing.items():
        if question_id not in incoming_ids:
            db.delete(question)

    for index, item in enumerate(questions):
        values = dict(
            question=item.question,
            answers=[a.model_dump() for a in item.answers],
            order=item.order if item.order is not None else index + 1,
        )
        question = existing.get(item.id) if item.id is not None else None
        if question is None:
            db.add(SituationalQuestion(lesson_id=lesson_id, **values))
        else:
            for key, value in values.items():
                setattr(question, key, value)

    commit(db, f"save situational questions of lesson {lesson_id}")
    return list_situational_questions(db, lesson_id)


# ============= Student reads =============

def list_published_lessons(db: Session, user_id: int) -> List[StudentLesson]:
    """Lessons with every part authored, newest first, with the student's position."""
    lessons = (
        db.query(Lesson)
        .filter(
            Lesson.lectures.any(),
            Lesson.situational_questions.any(),
            Lesson.tests.any(Test.type == TEST_TYPE_INITIAL),
            Lesson.tests.any(Test.type == TEST_TYPE_FINAL),
        )
        .order_by(Lesson.created_at.desc(), Lesson.id.desc())
        .all()
    )
    progress = {
        p.lesson_id: p
        for p in db.query(StudentProgress).filter(StudentProgress.user_id == user_id)
    }
    items = []
    for lesson in lessons:
        row: Optional[StudentProgress] = progress.get(lesson.id)
        items.append(
            StudentLesson(
                id=lesson.id,  # type: ignore
                title=lesson.title,  # type: ignore
                description=lesson.description,  # type: ignore
                lecture_count=len(lesson.lectures),
                qa_count=len(lesson.situational_questions),
                current_step=row.current_step if row else 0,  # type: ignore
                completed_at=row.completed_at if row else None,  # type: ignore
            )
        )
    return items


def get_published_lesson(db: Session, lesson_id: int) -> Lesson:
    """A lesson visible to students; unpublished lessons are reported as missing."""
    lesson = get_lesson(db, lesson_id)
    if not lesson.is_published:
        raise NotFoundError("Lesson not found")
    return lesson


def student_test(db: Session, lesson_id: int, test_type: str) -> StudentTest:
    """The lesson's test with the answer key removed."""
    lesson = get_published_lesson(db, lesson_id)
    test = lesson.get_test(test_type)
    return StudentTest(
        id=test.id,
        lesson_id=lesson.id,  # type: ignore
        type=test.type,
        questions=[
            StudentTestQuestion(question=q.question, options=q.options)
            for q in load_test_questions(test)
        ],
    )


def student_lectures(db: Session, lesson_id: int) -> List[Lecture]:
    get_published_lesson(db, lesson_id)
    return list_lectures(db, lesson_id)


def student_situational_questions(db: Session, lesson_id: int) -> List[StudentSituationalQuestion]:
    """The lesson's situational questions with answer weights removed."""
    get_published_lesson(db, lesson_id)
    return [
        StudentSituationalQuestion(
            id=q.id,  # type: ignore
            question=q.question,  # type: ignore
            order=q.order,  # type: ignore
            answers=[
                StudentSituationalAnswer(text=a.text, conclusion=a.conclusion)
                for a in load_situational_answers(q)
            ],
        )
        for q in list_situational_questions(db, lesson_id)
    ]

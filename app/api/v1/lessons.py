"""
Lesson authoring endpoints (admin only).
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_admin, get_db
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.lesson import (
    Lecture,
    LecturesSave,
    Lesson,
    LessonCreate,
    LessonSummary,
    LessonUpdate,
    SituationalQuestion,
    SituationalQuestionsSave,
    TestKind,
    TestOut,
    TestSave,
)
from app.services import lesson_service

router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("", response_model=List[LessonSummary])
def list_lessons(db: Session = Depends(get_db)) -> Any:
    """
    List all lessons, newest first.
    """
    return lesson_service.list_lessons(db)


@router.post("", response_model=Lesson, status_code=status.HTTP_201_CREATED)
def create_lesson(
    lesson_in: LessonCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """
    Create an empty lesson owned by the current admin.
    """
    return lesson_service.create_lesson(db, lesson_in, current_user)


@router.get("/{lesson_id}", response_model=Lesson)
def get_lesson(lesson_id: int, db: Session = Depends(get_db)) -> Any:
    return lesson_service.get_lesson(db, lesson_id)


@router.put("/{lesson_id}", response_model=Lesson)
def update_lesson(lesson_id: int, lesson_in: LessonUpdate, db: Session = Depends(get_db)) -> Any:
    return lesson_service.update_lesson(db, lesson_id, lesson_in)


@router.delete("/{lesson_id}", response_model=SuccessResponse)
def delete_lesson(lesson_id: int, db: Session = Depends(get_db)) -> Any:
    """
    Delete a lesson together with all student results and progress for it.
    """
    lesson_service.delete_lesson(db, lesson_id)
    return SuccessResponse()


# ============= Tests =============

@router.get("/{lesson_id}/tests/{kind}", response_model=TestOut)
def get_test(lesson_id: int, kind: TestKind, db: Session = Depends(get_db)) -> Any:
    """
    Get a lesson test with its answer key.
    """
    return lesson_service.get_test(db, lesson_id, kind.test_type)


@router.put("/{lesson_id}/tests/{kind}", response_model=TestOut)
def save_test(lesson_id: int, kind: TestKind, test_in: TestSave, db: Session = Depends(get_db)) -> Any:
    """
    Create or replace the initial or final test of a lesson.

    Each question needs 4 options and a correct answer index from 0 to 3.
    """
    return lesson_service.save_test(db, lesson_id, kind.test_type, test_in.questions)


# ============= Lectures =============

@router.get("/{lesson_id}/lectures", response_model=List[Lecture])
def list_lectures(lesson_id: int, db: Session = Depends(get_db)) -> Any:
    lesson_service.get_lesson(db, lesson_id)
    return lesson_service.list_lectures(db, lesson_id)


@router.put("/{lesson_id}/lectures", response_model=List[Lecture])
def save_lectures(lesson_id: int, lectures_in: LecturesSave, db: Session = Depends(get_db)) -> Any:
    """
    Replace the lecture list; lectures left out of the request are deleted.
    """
    return lesson_service.save_lectures(db, lesson_id, lectures_in.lectures)


# ============= Situational questions =============

@router.get("/{lesson_id}/situational", response_model=List[SituationalQuestion])
def list_situational_questions(lesson_id: int, db: Session = Depends(get_db)) -> Any:
    lesson_service.get_lesson(db, lesson_id)
    return lesson_service.list_situational_questions(db, lesson_id)


@router.put("/{lesson_id}/situational", response_model=List[SituationalQuestion])
def save_situational_questions(
    lesson_id: int,
    questions_in: SituationalQuestionsSave,
    db: Session = Depends(get_db),
) -> Any:
    """
    Replace the situational questions; each answer carries a score from 0 to 5.
    """
    return lesson_service.save_situational_questions(db, lesson_id, questions_in.questions)

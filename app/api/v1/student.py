"""
Student endpoints: lesson access, submissions, progress, results and dashboard.

The acting student is always the authenticated caller.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_active_user, get_db
from app.core.exceptions import ValidationError
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.lesson import Lecture, StudentLesson, StudentSituationalQuestion, StudentTest, TestKind
from app.schemas.progress import (
    LessonGate,
    ProgressSnapshot,
    SituationalSubmit,
    StepAccess,
    StepAdvance,
    StepAdvanceResult,
    TestSubmit,
    TestSubmitResult,
)
from app.schemas.results import Dashboard, LessonResults
from app.services import dashboard, lesson_gate, lesson_service, progress_tracker, results

router = APIRouter()


# ============= Lessons =============

@router.get("/lessons", response_model=List[StudentLesson])
def list_lessons(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    List published lessons with the student's current step in each.
    """
    return lesson_service.list_published_lessons(db, current_user.id)  # type: ignore


@router.get("/lessons/{lesson_id}/tests/{kind}", response_model=StudentTest)
def get_test(
    lesson_id: int,
    kind: TestKind,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get the initial or final test of a lesson, without the answer key.
    """
    return lesson_service.student_test(db, lesson_id, kind.test_type)


@router.get("/lessons/{lesson_id}/lectures", response_model=List[Lecture])
def get_lectures(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return lesson_service.student_lectures(db, lesson_id)


@router.get("/lessons/{lesson_id}/situational", response_model=List[StudentSituationalQuestion])
def get_situational_questions(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get the situational questions of a lesson, without answer scores.
    """
    return lesson_service.student_situational_questions(db, lesson_id)


# ============= Progress =============

@router.get("/lessons/{lesson_id}/progress", response_model=ProgressSnapshot)
def get_progress(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get the student's progress; a lesson never started reports step 0.
    """
    return progress_tracker.get_progress(db, current_user.id, lesson_id)  # type: ignore


@router.get("/lessons/{lesson_id}/gate", response_model=LessonGate)
def get_gate(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get the completed/current/locked state of each lesson step.
    """
    snapshot = progress_tracker.get_progress(db, current_user.id, lesson_id)  # type: ignore
    return LessonGate(
        lesson_id=lesson_id,
        current_step=snapshot.current_step,
        completed_at=snapshot.completed_at,
        resume_step=lesson_gate.resume_step(snapshot),
        steps=lesson_gate.describe_steps(snapshot),
    )


@router.get("/lessons/{lesson_id}/steps/{step}/access", response_model=StepAccess)
def check_step_access(
    lesson_id: int,
    step: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Check whether a step page may be shown, and where to redirect if not.
    """
    if step not in lesson_gate.STEPS:
        raise ValidationError("step must be between 1 and 4")
    snapshot = progress_tracker.get_progress(db, current_user.id, lesson_id)  # type: ignore
    return StepAccess(
        step=step,
        allowed=lesson_gate.can_access(snapshot, step),
        redirect_step=lesson_gate.redirect_step(snapshot, step),
    )


@router.post("/progress/update", response_model=StepAdvanceResult)
def advance_step(
    advance_in: StepAdvance,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Advance the student to step 3 (after lectures) or 4 (after situational Q&A).

    Requests that would move the student backwards succeed without changes.
    """
    return progress_tracker.record_step_advance(
        db, current_user.id, advance_in.lesson_id, advance_in.current_step  # type: ignore
    )


@router.delete("/lessons/{lesson_id}/restart", response_model=SuccessResponse)
def restart_lesson(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Clear the student's results and progress for a lesson.
    """
    progress_tracker.restart_lesson(db, current_user.id, lesson_id)  # type: ignore
    return SuccessResponse()


# ============= Submissions =============

@router.post("/tests/submit", response_model=TestSubmitResult, status_code=status.HTTP_201_CREATED)
def submit_test(
    test_data: TestSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Submit test answers, get the score and advance the lesson.

    Args:
        test_data: Test id, lesson id and one answer index per question
        db: Database session
        current_user: Current authenticated user

    Returns:
        Score, correct count and number of questions
    """
    return progress_tracker.record_test_submission(
        db, current_user.id, test_data.test_id, test_data.lesson_id, test_data.answers  # type: ignore
    )


@router.post("/situational/submit", response_model=SuccessResponse)
def submit_situational_answer(
    answer_in: SituationalSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Record the chosen answer for a situational question; answering again replaces it.
    """
    progress_tracker.record_situational_answer(
        db,
        current_user.id,  # type: ignore
        answer_in.lesson_id,
        answer_in.situational_question_id,
        answer_in.selected_answer_index,
        answer_in.score,
    )
    return SuccessResponse()


# ============= Results =============

@router.get("/lessons/{lesson_id}/results", response_model=LessonResults)
def get_results(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Compare initial and final test results and list situational answers.
    """
    return results.build_lesson_results(db, current_user.id, lesson_id)  # type: ignore


@router.get("/dashboard", response_model=Dashboard)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return dashboard.build_dashboard(db, current_user.id)  # type: ignore

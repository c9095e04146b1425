"""
Progress tracking for the four-step lesson sequence.

Owns the per-student, per-lesson ``StudentProgress`` row and the result rows
that move it forward: test submissions, situational answers, explicit step
advances and lesson restarts. Every function that writes commits exactly once,
so result rows and progress never disagree after a failure.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError, PersistenceError, StepLockedError, ValidationError
from app.db.base import commit, upsert
from app.models.lesson import Lesson, SituationalQuestion, Test, TEST_TYPE_FINAL
from app.models.progress import StudentProgress
from app.models.result import SituationalQAResult, TestResult
from app.schemas.lesson import SituationalAnswer, TestQuestion
from app.schemas.progress import ProgressSnapshot, StepAdvanceResult, TestSubmitResult
from app.services import lesson_gate
from app.services.scoring import score_situational, score_test, validate_situational_score

logger = logging.getLogger(__name__)

ADVANCEABLE_STEPS = (
    lesson_gate.STEP_LECTURES,
    lesson_gate.STEP_SITUATIONAL,
    lesson_gate.STEP_FINAL_TEST,
)


def load_test_questions(test: Test) -> List[TestQuestion]:
    return [TestQuestion.model_validate(q) for q in test.questions or []]


def load_situational_answers(question: SituationalQuestion) -> List[SituationalAnswer]:
    return [SituationalAnswer.model_validate(a) for a in question.answers or []]


def _get_progress_row(db: Session, user_id: int, lesson_id: int) -> Optional[StudentProgress]:
    return (
        db.query(StudentProgress)
        .filter(StudentProgress.user_id == user_id, StudentProgress.lesson_id == lesson_id)
        .first()
    )


def _snapshot(progress: Optional[StudentProgress]) -> ProgressSnapshot:
    if progress is None:
        return ProgressSnapshot()
    return ProgressSnapshot.model_validate(progress)


def _ensure_step_open(progress: Optional[StudentProgress], step: int) -> None:
    """Reject work on a locked step when step order is enforced server-side."""
    if not settings.ENFORCE_STEP_ORDER:
        return
    snapshot = _snapshot(progress)
    if not lesson_gate.can_access(snapshot, step):
        raise StepLockedError(
            f"Step {step} is locked; complete step {lesson_gate.redirect_step(snapshot, step)} first"
        )


def _ensure_step_reached(progress: Optional[StudentProgress], step: int) -> None:
    """
    Reject an advance whose prerequisite step was never recorded.

    Unlike the gate, a missing progress row does not count as being on step 1:
    the initial test has to be submitted before any advance.
    """
    if not settings.ENFORCE_STEP_ORDER:
        return
    if progress is None:
        raise StepLockedError(f"Step {lesson_gate.STEP_INITIAL_TEST} has not been completed")
    if progress.completed_at is None and progress.current_step < step:  # type: ignore
        raise StepLockedError(f"Step {step} has not been reached yet")


def get_progress(db: Session, user_id: int, lesson_id: int) -> ProgressSnapshot:
    """
    Current progress of a student in a lesson.

    A missing row is the not-started state ``{current_step: 0, completed_at: None}``,
    never an error.
    """
    return _snapshot(_get_progress_row(db, user_id, lesson_id))


def record_test_submission(
    db: Session,
    user_id: int,
    test_id: int,
    lesson_id: int,
    answers: Sequence[int],
) -> TestSubmitResult:
    """
    Grade a test submission, store it and move the student's progress.

    An INITIAL test puts the student on step 2; a FINAL test puts them on step 4
    and marks the lesson completed. The step is overwritten unconditionally, so
    resubmitting the initial test after finishing moves the student back to 2.

    Args:
        db: Database session
        user_id: Submitting student
        test_id: Test being answered
        lesson_id: Lesson the test belongs to
        answers: Chosen option index per question

    Returns:
        Score, correct count and question count of this submission

    Raises:
        NotFoundError: If the test does not exist in the lesson
        ValidationError: If the answer count does not match the question count
        StepLockedError: If step order is enforced and the step is locked
        PersistenceError: If the transaction fails; nothing is written
    """
    test = db.query(Test).filter(Test.id == test_id).first()
    if not test or test.lesson_id != lesson_id:
        raise NotFoundError("Test not found")

    graded = score_test(answers, load_test_questions(test))

    is_final = test.type == TEST_TYPE_FINAL
    progress = _get_progress_row(db, user_id, lesson_id)
    _ensure_step_open(
        progress,
        lesson_gate.STEP_FINAL_TEST if is_final else lesson_gate.STEP_INITIAL_TEST,
    )

    now = datetime.now(timezone.utc)
    result = TestResult(
        user_id=user_id,
        test_id=test.id,
        answers=list(answers),
        score=graded.score,
        correct_count=graded.correct_count,
        total_questions=graded.total_questions,
        completed_at=now,
    )
    db.add(result)

    next_step = lesson_gate.STEP_FINAL_TEST if is_final else lesson_gate.STEP_LECTURES
    changes = {"current_step": next_step, "updated_at": func.now()}
    if is_final:
        changes["completed_at"] = now
    upsert(
        db,
        StudentProgress,
        ["user_id", "lesson_id"],
        {
            "user_id": user_id,
            "lesson_id": lesson_id,
            "current_step": next_step,
            "completed_at": now if is_final else None,
        },
        changes,
    )

    commit(db, f"submit test {test.id} for user {user_id}")
    db.refresh(result)

    logger.info(
        f"User {user_id} submitted {test.type} test {test.id} of lesson {lesson_id}: "
        f"{graded.correct_count}/{graded.total_questions} ({graded.score:.1f}%)"
    )
    return TestSubmitResult(
        result_id=result.id,  # type: ignore
        score=graded.score,
        correct_count=graded.correct_count,
        total_questions=graded.total_questions,
    )


def record_step_advance(db: Session, user_id: int, lesson_id: int, step: int) -> StepAdvanceResult:
    """
    Move a student forward after lectures (step 3) or situational Q&A (step 4).

    Advancing never goes backwards: when the student is already at or past
    ``step`` nothing is written.

    Raises:
        ValidationError: If ``step`` is not 2, 3 or 4
        NotFoundError: If the lesson does not exist
    """
    if step not in ADVANCEABLE_STEPS:
        raise ValidationError("current_step must be 2, 3, or 4")

    if not db.query(Lesson.id).filter(Lesson.id == lesson_id).first():
        raise NotFoundError("Lesson not found")

    progress = _get_progress_row(db, user_id, lesson_id)
    if progress is not None and progress.current_step >= step:  # type: ignore
        logger.info(
            f"User {user_id} already at step {progress.current_step} of lesson {lesson_id}, "
            f"ignoring advance to {step}"
        )
        return StepAdvanceResult(advanced=False, current_step=progress.current_step)  # type: ignore

    # Reaching ``step`` means the previous step was just finished.
    _ensure_step_reached(progress, step - 1)

    # A concurrent advance may have moved further; keep the larger step.
    upsert(
        db,
        StudentProgress,
        ["user_id", "lesson_id"],
        {"user_id": user_id, "lesson_id": lesson_id, "current_step": step},
        {
            "current_step": case(
                (StudentProgress.current_step < step, step), else_=StudentProgress.current_step
            ),
            "updated_at": func.now(),
        },
    )

    commit(db, f"advance user {user_id} to step {step} of lesson {lesson_id}")
    stored_step = (
        db.query(StudentProgress.current_step)
        .filter(StudentProgress.user_id == user_id, StudentProgress.lesson_id == lesson_id)
        .scalar()
    )
    logger.info(f"User {user_id} advanced to step {stored_step} of lesson {lesson_id}")
    return StepAdvanceResult(advanced=True, current_step=stored_step)


def record_situational_answer(
    db: Session,
    user_id: int,
    lesson_id: int,
    question_id: int,
    selected_index: int,
    score: int,
) -> SituationalQAResult:
    """
    Store the student's chosen answer for one situational question.

    The stored score is the weight the admin gave the chosen option, so a client
    cannot award itself points. Answering again replaces the earlier choice.
    Progress is not advanced here; the client calls ``record_step_advance`` once
    every question is answered.

    Raises:
        ValidationError: If ``score`` is outside 0..5 or the index has no option
        NotFoundError: If the question does not exist in the lesson
    """
    validate_situational_score(score)

    question = db.query(SituationalQuestion).filter(SituationalQuestion.id == question_id).first()
    if not question or question.lesson_id != lesson_id:
        raise NotFoundError("Situational question not found")

    weight = score_situational(load_situational_answers(question), selected_index)
    if weight != score:
        logger.warning(
            f"User {user_id} sent score {score} for option {selected_index} of situational "
            f"question {question_id}; storing configured weight {weight}"
        )

    _ensure_step_open(_get_progress_row(db, user_id, lesson_id), lesson_gate.STEP_SITUATIONAL)

    now = datetime.now(timezone.utc)
    upsert(
        db,
        SituationalQAResult,
        ["user_id", "situational_question_id"],
        {
            "user_id": user_id,
            "lesson_id": lesson_id,
            "situational_question_id": question_id,
            "selected_answer_index": selected_index,
            "score": weight,
            "answered_at": now,
        },
        {"selected_answer_index": selected_index, "score": weight, "answered_at": now},
    )
    commit(db, f"save situational answer {question_id} for user {user_id}")

    return (
        db.query(SituationalQAResult)
        .filter(
            SituationalQAResult.user_id == user_id,
            SituationalQAResult.situational_question_id == question_id,
        )
        .one()
    )


def restart_lesson(db: Session, user_id: int, lesson_id: int) -> None:
    """
    Return a lesson to the not-started state for one student.

    Deletes the student's test results for the lesson's tests, their situational
    answers and their progress row in a single transaction.
    """
    test_ids = [row.id for row in db.query(Test.id).filter(Test.lesson_id == lesson_id).all()]

    try:
        if test_ids:
            db.query(TestResult).filter(
                TestResult.user_id == user_id,
                TestResult.test_id.in_(test_ids),
            ).delete(synchronize_session=False)
        db.query(SituationalQAResult).filter(
            SituationalQAResult.user_id == user_id,
            SituationalQAResult.lesson_id == lesson_id,
        ).delete(synchronize_session=False)
        db.query(StudentProgress).filter(
            StudentProgress.user_id == user_id,
            StudentProgress.lesson_id == lesson_id,
        ).delete(synchronize_session=False)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to restart lesson {lesson_id} for user {user_id}: {e}")
        raise PersistenceError() from e

    commit(db, f"restart lesson {lesson_id} for user {user_id}")
    db.expire_all()
    logger.info(f"User {user_id} restarted lesson {lesson_id}")

"""
Read-side composition of a student's results for one lesson.

Test breakdowns are graded against the answer key as it is now, not as it was
at submission time: results store raw option indices, so editing a question's
correct answer changes how past submissions are displayed. Score, correct count
and question count always come from the stored row, as awarded on submission.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.lesson import Lesson, Test, TEST_TYPE_FINAL, TEST_TYPE_INITIAL
from app.models.result import SituationalQAResult, TestResult
from app.schemas.lesson import TestQuestion
from app.schemas.results import (
    LessonHeader,
    LessonResults,
    QuestionBreakdown,
    SituationalResultItem,
    SituationalSummary,
    TestResultSummary,
)
from app.services.progress_tracker import get_progress, load_situational_answers, load_test_questions
from app.services.scoring import round_score, situational_max_score


def latest_test_result(db: Session, user_id: int, test_id: int) -> Optional[TestResult]:
    """Most recent submission of a test by a user."""
    return (
        db.query(TestResult)
        .filter(TestResult.user_id == user_id, TestResult.test_id == test_id)
        .order_by(TestResult.completed_at.desc(), TestResult.id.desc())
        .first()
    )


def build_question_breakdown(questions: List[TestQuestion], answers: List[int]) -> List[QuestionBreakdown]:
    breakdown = []
    for i, question in enumerate(questions):
        user_answer = answers[i] if i < len(answers) else -1
        breakdown.append(
            QuestionBreakdown(
                question=question.question,
                options=question.options,
                correct_answer=question.correct_answer,
                user_answer=user_answer,
                is_correct=user_answer == question.correct_answer,
            )
        )
    return breakdown


def _summarize(test: Optional[Test], result: Optional[TestResult]) -> Optional[TestResultSummary]:
    if test is None or result is None:
        return None
    questions = load_test_questions(test)
    answers = list(result.answers or [])
    return TestResultSummary(
        result_id=result.id,  # type: ignore
        score=result.score,  # type: ignore
        answers=answers,
        completed_at=result.completed_at,  # type: ignore
        total_questions=result.total_questions,  # type: ignore
        correct_count=result.correct_count,  # type: ignore
        question_breakdown=build_question_breakdown(questions, answers),
    )


def build_lesson_results(db: Session, user_id: int, lesson_id: int) -> LessonResults:
    """
    Initial vs final test comparison plus situational answers for one lesson.

    Raises:
        NotFoundError: If the lesson does not exist
    """
    lesson = db.query(Lesson).filter(Lesson.id == lesson_id).first()
    if not lesson:
        raise NotFoundError("Lesson not found")

    initial_test = lesson.get_test(TEST_TYPE_INITIAL)
    final_test = lesson.get_test(TEST_TYPE_FINAL)
    initial = _summarize(
        initial_test, latest_test_result(db, user_id, initial_test.id) if initial_test else None
    )
    final = _summarize(
        final_test, latest_test_result(db, user_id, final_test.id) if final_test else None
    )

    improvement = None
    if initial is not None and final is not None:
        improvement = round_score(final.score - initial.score)

    stored = {
        r.situational_question_id: r
        for r in db.query(SituationalQAResult).filter(
            SituationalQAResult.user_id == user_id,
            SituationalQAResult.lesson_id == lesson_id,
        )
    }
    items = []
    for question in lesson.situational_questions:
        answer = stored.get(question.id)
        items.append(
            SituationalResultItem(
                id=question.id,  # type: ignore
                question=question.question,  # type: ignore
                answers=load_situational_answers(question),
                order=question.order,  # type: ignore
                selected_answer_index=answer.selected_answer_index if answer else None,  # type: ignore
                score=answer.score if answer else None,  # type: ignore
            )
        )

    return LessonResults(
        lesson=LessonHeader(id=lesson.id, title=lesson.title, description=lesson.description),  # type: ignore
        progress=get_progress(db, user_id, lesson_id),
        initial_result=initial,
        final_result=final,
        improvement=improvement,
        situational=SituationalSummary(
            total_score=sum(item.score for item in items if item.score is not None),
            max_score=situational_max_score(len(items)),
            answered_count=sum(1 for item in items if item.score is not None),
            items=items,
        ),
    )

"""
Score calculation for multiple-choice tests and situational questions.

These functions are pure: they never touch the database. Scores are returned
unrounded; use ``round_score`` only when presenting or aggregating.
"""
from dataclasses import dataclass
from typing import Sequence

from app.core.exceptions import ValidationError
from app.schemas.lesson import SITUATIONAL_MAX_SCORE, SituationalAnswer, TestQuestion


@dataclass(frozen=True)
class TestScore:
    """Outcome of grading one test submission."""

    correct_count: int
    total_questions: int
    score: float


def score_test(submitted: Sequence[int], questions: Sequence[TestQuestion]) -> TestScore:
    """
    Grade a multiple-choice submission against the answer key.

    Args:
        submitted: Chosen option index per question, in question order
        questions: Question definitions with their correct answer index

    Returns:
        Correct count, question count and percentage score (0-100)

    Raises:
        ValidationError: If the test has no questions or the answer count differs
    """
    if not questions:
        raise ValidationError("Test has no questions")
    if len(submitted) != len(questions):
        raise ValidationError("Number of answers must match number of questions")

    correct_count = sum(
        1 for answer, question in zip(submitted, questions) if answer == question.correct_answer
    )
    total = len(questions)
    return TestScore(
        correct_count=correct_count,
        total_questions=total,
        score=(correct_count / total) * 100,
    )


def score_situational(answers: Sequence[SituationalAnswer], selected_index: int) -> int:
    """Return the weight of the chosen answer option (0-5)."""
    if selected_index < 0 or selected_index >= len(answers):
        raise ValidationError(
            f"Selected answer index must be between 0 and {len(answers) - 1}"
        )
    return answers[selected_index].score


def validate_situational_score(score: int) -> None:
    """Reject a situational score outside 0..5."""
    if score < 0 or score > SITUATIONAL_MAX_SCORE:
        raise ValidationError(f"Score must be between 0 and {SITUATIONAL_MAX_SCORE}")


def situational_max_score(question_count: int) -> int:
    return question_count * SITUATIONAL_MAX_SCORE


def round_score(value: float) -> float:
    """Round a percentage to one decimal place for display."""
    return round(value, 1)

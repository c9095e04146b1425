"""
Student dashboard: completion counts, recent scores and the lesson to resume.
"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.models.lesson import TEST_TYPE_FINAL, TEST_TYPE_INITIAL
from app.models.progress import StudentProgress
from app.models.result import TestResult
from app.schemas.results import Achievement, Dashboard, DashboardStats, NextLesson, RecentLesson
from app.services.scoring import round_score

RECENT_LESSONS_LIMIT = 5
HIGH_SCORE_THRESHOLD = 80

# (completed lessons needed, id, label)
COMPLETION_ACHIEVEMENTS = [
    (1, "first", "First lesson"),
    (5, "five", "5 lessons"),
    (10, "ten", "10 lessons"),
]


def _latest_scores(results: List[TestResult]) -> Dict[Tuple[int, str], float]:
    """Most recent score per (lesson, test type); ``results`` must be oldest first."""
    latest: Dict[Tuple[int, str], float] = {}
    for result in results:
        latest[(result.test.lesson_id, result.test.type)] = result.score  # type: ignore
    return latest


def build_dashboard(db: Session, user_id: int) -> Dashboard:
    all_progress = (
        db.query(StudentProgress)
        .options(joinedload(StudentProgress.lesson))
        .filter(StudentProgress.user_id == user_id)
        .all()
    )
    results = (
        db.query(TestResult)
        .options(joinedload(TestResult.test))
        .filter(TestResult.user_id == user_id)
        .order_by(TestResult.completed_at.asc(), TestResult.id.asc())
        .all()
    )

    completed = sorted(
        (p for p in all_progress if p.completed_at is not None),
        key=lambda p: p.completed_at,
        reverse=True,
    )
    in_progress = [p for p in all_progress if p.completed_at is None and p.current_step > 0]

    avg_score: Optional[float] = None
    if results:
        avg_score = round_score(sum(r.score for r in results) / len(results))

    latest = _latest_scores(results)
    recent_lessons = [
        RecentLesson(
            id=p.lesson_id,  # type: ignore
            title=p.lesson.title,
            completed_at=p.completed_at,  # type: ignore
            initial_score=latest.get((p.lesson_id, TEST_TYPE_INITIAL)),  # type: ignore
            final_score=latest.get((p.lesson_id, TEST_TYPE_FINAL)),  # type: ignore
        )
        for p in completed[:RECENT_LESSONS_LIMIT]
    ]

    next_lesson = None
    if in_progress:
        furthest = max(in_progress, key=lambda p: p.current_step)
        next_lesson = NextLesson(
            id=furthest.lesson_id,  # type: ignore
            title=furthest.lesson.title,
            current_step=furthest.current_step,  # type: ignore
        )

    achievements = [
        Achievement(id=achievement_id, label=label)
        for needed, achievement_id, label in COMPLETION_ACHIEVEMENTS
        if len(completed) >= needed
    ]
    if avg_score is not None and avg_score >= HIGH_SCORE_THRESHOLD:
        achievements.append(Achievement(id="highscore", label="High score"))

    return Dashboard(
        stats=DashboardStats(
            completed_count=len(completed),
            in_progress_count=len(in_progress),
            avg_score=avg_score,
            total_lessons_attempted=len(all_progress),
        ),
        recent_lessons=recent_lessons,
        next_lesson=next_lesson,
        achievements=achievements,
    )

"""Progress tracker tests."""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import NotFoundError, PersistenceError, StepLockedError, ValidationError
from app.models.progress import StudentProgress
from app.models.result import SituationalQAResult, TestResult as ResultRow
from app.services import progress_tracker


def _situational(lesson):
    return lesson.situational_questions


class TestGetProgress:
    def test_not_started_is_step_zero(self, db, student, lesson):
        snapshot = progress_tracker.get_progress(db, student.id, lesson.id)
        assert snapshot.current_step == 0
        assert snapshot.completed_at is None

    def test_unknown_lesson_is_not_an_error(self, db, student):
        assert progress_tracker.get_progress(db, student.id, 999).current_step == 0


class TestRecordTestSubmission:
    def test_initial_test_moves_to_lectures(self, db, student, lesson, initial_test):
        result = progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 2, 3])

        assert result.correct_count == 2
        assert result.total_questions == 3
        assert result.score == pytest.approx(200 / 3)

        snapshot = progress_tracker.get_progress(db, student.id, lesson.id)
        assert snapshot.current_step == 2
        assert snapshot.completed_at is None

        row = db.query(ResultRow).filter(ResultRow.id == result.result_id).one()
        assert row.answers == [0, 2, 3]
        assert row.correct_count == 2

    def test_final_test_completes_lesson(self, db, student, lesson, final_test):
        result = progress_tracker.record_test_submission(db, student.id, final_test.id, lesson.id, [2, 2, 0])

        assert result.score == 100
        snapshot = progress_tracker.get_progress(db, student.id, lesson.id)
        assert snapshot.current_step == 4
        assert snapshot.completed_at is not None

    def test_resubmission_appends_result_rows(self, db, student, lesson, initial_test):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 0, 0])
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])

        rows = db.query(ResultRow).filter(ResultRow.user_id == student.id).all()
        assert len(rows) == 2
        assert db.query(StudentProgress).filter(StudentProgress.user_id == student.id).count() == 1

    def test_initial_resubmission_after_completion_overwrites_step(
        self, db, student, lesson, initial_test, final_test
    ):
        progress_tracker.record_test_submission(db, student.id, final_test.id, lesson.id, [2, 2, 0])
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])

        snapshot = progress_tracker.get_progress(db, student.id, lesson.id)
        assert snapshot.current_step == 2
        assert snapshot.completed_at is not None

    def test_wrong_answer_count_writes_nothing(self, db, student, lesson, initial_test):
        with pytest.raises(ValidationError):
            progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1])

        assert db.query(ResultRow).count() == 0
        assert progress_tracker.get_progress(db, student.id, lesson.id).current_step == 0

    def test_unknown_test(self, db, student, lesson):
        with pytest.raises(NotFoundError):
            progress_tracker.record_test_submission(db, student.id, 999, lesson.id, [0, 1, 3])

    def test_test_from_other_lesson(self, db, student, lesson, initial_test):
        with pytest.raises(NotFoundError):
            progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id + 1, [0, 1, 3])

    def test_failed_commit_leaves_no_partial_state(self, db, student, lesson, initial_test, monkeypatch):
        def fail_commit():
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(db, "commit", fail_commit)
        with pytest.raises(PersistenceError):
            progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])
        monkeypatch.undo()

        assert db.query(ResultRow).count() == 0
        assert db.query(StudentProgress).count() == 0

    def test_locked_final_test_rejected_when_enforced(self, db, student, lesson, final_test, enforce_order):
        with pytest.raises(StepLockedError):
            progress_tracker.record_test_submission(db, student.id, final_test.id, lesson.id, [2, 2, 0])
        assert db.query(ResultRow).count() == 0

    def test_concurrent_first_submissions_both_succeed(self, db, student, lesson, initial_test, monkeypatch):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 0, 0])
        # Second request read before the first one committed
        monkeypatch.setattr(progress_tracker, "_get_progress_row", lambda *args: None)

        result = progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])
        monkeypatch.undo()

        assert result.score == 100
        assert db.query(ResultRow).filter(ResultRow.user_id == student.id).count() == 2
        rows = db.query(StudentProgress).filter(StudentProgress.user_id == student.id).all()
        assert [row.current_step for row in rows] == [2]

    def test_concurrent_final_submission_completes_lesson(self, db, student, lesson, initial_test, final_test, monkeypatch):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])
        monkeypatch.setattr(progress_tracker, "_get_progress_row", lambda *args: None)

        progress_tracker.record_test_submission(db, student.id, final_test.id, lesson.id, [2, 2, 0])
        monkeypatch.undo()

        snapshot = progress_tracker.get_progress(db, student.id, lesson.id)
        assert snapshot.current_step == 4
        assert snapshot.completed_at is not None

    def test_locked_final_test_accepted_by_default(self, db, student, lesson, final_test):
        progress_tracker.record_test_submission(db, student.id, final_test.id, lesson.id, [2, 2, 0])
        assert progress_tracker.get_progress(db, student.id, lesson.id).current_step == 4


class TestRecordStepAdvance:
    def test_advances_forward(self, db, student, lesson, initial_test):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])

        result = progress_tracker.record_step_advance(db, student.id, lesson.id, 3)

        assert result.advanced is True
        assert result.current_step == 3
        assert progress_tracker.get_progress(db, student.id, lesson.id).current_step == 3

    def test_never_moves_backwards(self, db, student, lesson):
        progress_tracker.record_step_advance(db, student.id, lesson.id, 4)

        result = progress_tracker.record_step_advance(db, student.id, lesson.id, 3)

        assert result.advanced is False
        assert result.current_step == 4
        assert progress_tracker.get_progress(db, student.id, lesson.id).current_step == 4

    def test_same_step_is_a_no_op(self, db, student, lesson):
        progress_tracker.record_step_advance(db, student.id, lesson.id, 3)
        assert progress_tracker.record_step_advance(db, student.id, lesson.id, 3).advanced is False

    def test_creates_progress_row(self, db, student, lesson):
        progress_tracker.record_step_advance(db, student.id, lesson.id, 2)
        assert db.query(StudentProgress).filter(StudentProgress.user_id == student.id).one().current_step == 2

    @pytest.mark.parametrize("step", [0, 1, 5])
    def test_invalid_step(self, db, student, lesson, step):
        with pytest.raises(ValidationError):
            progress_tracker.record_step_advance(db, student.id, lesson.id, step)

    def test_unknown_lesson(self, db, student):
        with pytest.raises(NotFoundError):
            progress_tracker.record_step_advance(db, student.id, 999, 3)

    def test_concurrent_advance_keeps_furthest_step(self, db, student, lesson, monkeypatch):
        progress_tracker.record_step_advance(db, student.id, lesson.id, 4)
        monkeypatch.setattr(progress_tracker, "_get_progress_row", lambda *args: None)

        result = progress_tracker.record_step_advance(db, student.id, lesson.id, 3)
        monkeypatch.undo()

        assert result.current_step == 4
        assert progress_tracker.get_progress(db, student.id, lesson.id).current_step == 4

    def test_advance_without_initial_test_rejected_when_enforced(self, db, student, lesson, enforce_order):
        with pytest.raises(StepLockedError):
            progress_tracker.record_step_advance(db, student.id, lesson.id, 2)
        assert db.query(StudentProgress).count() == 0

    def test_final_test_unreachable_without_initial_when_enforced(
        self, db, student, lesson, final_test, enforce_order
    ):
        for step in (2, 3, 4):
            with pytest.raises(StepLockedError):
                progress_tracker.record_step_advance(db, student.id, lesson.id, step)
        with pytest.raises(StepLockedError):
            progress_tracker.record_test_submission(db, student.id, final_test.id, lesson.id, [2, 2, 0])
        assert progress_tracker.get_progress(db, student.id, lesson.id).completed_at is None

    def test_ordered_walkthrough_allowed_when_enforced(
        self, db, student, lesson, initial_test, final_test, enforce_order
    ):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])
        progress_tracker.record_step_advance(db, student.id, lesson.id, 3)
        progress_tracker.record_step_advance(db, student.id, lesson.id, 4)
        progress_tracker.record_test_submission(db, student.id, final_test.id, lesson.id, [2, 2, 0])

        assert progress_tracker.get_progress(db, student.id, lesson.id).completed_at is not None

    def test_skipping_rejected_when_enforced(self, db, student, lesson, enforce_order):
        with pytest.raises(StepLockedError):
            progress_tracker.record_step_advance(db, student.id, lesson.id, 3)


class TestRecordSituationalAnswer:
    def test_stores_configured_weight(self, db, student, lesson):
        question = _situational(lesson)[1]

        row = progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 1, 4)

        assert row.score == 4
        assert row.selected_answer_index == 1

    def test_client_score_is_not_trusted(self, db, student, lesson):
        question = _situational(lesson)[1]

        row = progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 0, 5)

        assert row.score == 0

    def test_answering_again_replaces(self, db, student, lesson):
        question = _situational(lesson)[0]
        progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 1, 1)
        progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 0, 5)

        rows = db.query(SituationalQAResult).filter(SituationalQAResult.user_id == student.id).all()
        assert len(rows) == 1
        assert rows[0].selected_answer_index == 0
        assert rows[0].score == 5

    def test_does_not_advance_progress(self, db, student, lesson):
        question = _situational(lesson)[0]
        progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 0, 5)
        assert progress_tracker.get_progress(db, student.id, lesson.id).current_step == 0

    @pytest.mark.parametrize("score", [-1, 6])
    def test_score_out_of_range(self, db, student, lesson, score):
        question = _situational(lesson)[0]
        with pytest.raises(ValidationError):
            progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 0, score)

    def test_index_out_of_range(self, db, student, lesson):
        question = _situational(lesson)[0]
        with pytest.raises(ValidationError):
            progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 2, 0)

    def test_unknown_question(self, db, student, lesson):
        with pytest.raises(NotFoundError):
            progress_tracker.record_situational_answer(db, student.id, lesson.id, 999, 0, 5)

    def test_locked_step_rejected_when_enforced(self, db, student, lesson, enforce_order):
        question = _situational(lesson)[0]
        with pytest.raises(StepLockedError):
            progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 0, 5)


class TestRestartLesson:
    def test_clears_results_and_progress(self, db, student, lesson, initial_test, final_test):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])
        question = _situational(lesson)[0]
        progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 0, 5)
        progress_tracker.record_test_submission(db, student.id, final_test.id, lesson.id, [2, 2, 0])

        progress_tracker.restart_lesson(db, student.id, lesson.id)

        assert db.query(ResultRow).filter(ResultRow.user_id == student.id).count() == 0
        assert db.query(SituationalQAResult).filter(SituationalQAResult.user_id == student.id).count() == 0
        snapshot = progress_tracker.get_progress(db, student.id, lesson.id)
        assert snapshot.current_step == 0
        assert snapshot.completed_at is None

    def test_other_students_untouched(self, db, student, admin, lesson, initial_test):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])
        progress_tracker.record_test_submission(db, admin.id, initial_test.id, lesson.id, [0, 1, 3])

        progress_tracker.restart_lesson(db, student.id, lesson.id)

        assert db.query(ResultRow).filter(ResultRow.user_id == admin.id).count() == 1
        assert progress_tracker.get_progress(db, admin.id, lesson.id).current_step == 2

    def test_restart_when_not_started(self, db, student, lesson):
        progress_tracker.restart_lesson(db, student.id, lesson.id)
        assert progress_tracker.get_progress(db, student.id, lesson.id).current_step == 0

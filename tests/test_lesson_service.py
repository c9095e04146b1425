"""Lesson authoring and student read tests."""
import pytest

from app.core.exceptions import NotFoundError
from app.models.progress import StudentProgress
from app.models.result import SituationalQAResult, TestResult as ResultRow
from app.schemas.lesson import LectureIn, LessonCreate, LessonUpdate, SituationalQuestionIn
from app.services import lesson_service, progress_tracker


class TestLessons:
    def test_create_records_creator(self, db, admin):
        lesson = lesson_service.create_lesson(db, LessonCreate(title="  Git  ", description="Branches"), admin)
        assert lesson.title == "Git"
        assert lesson.created_by_id == admin.id

    def test_update(self, db, lesson):
        updated = lesson_service.update_lesson(db, lesson.id, LessonUpdate(title="Renamed"))
        assert updated.title == "Renamed"
        assert updated.description == "HTML, CSS and HTTP."

    def test_list_reports_published(self, db, admin, lesson):
        lesson_service.create_lesson(db, LessonCreate(title="Draft", description="Empty"), admin)

        summaries = {s.title: s for s in lesson_service.list_lessons(db)}

        assert summaries["Web Basics"].is_published is True
        assert summaries["Web Basics"].lecture_count == 2
        assert summaries["Web Basics"].test_count == 2
        assert summaries["Draft"].is_published is False

    def test_delete_removes_student_data(self, db, student, lesson, initial_test):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])
        question = lesson.situational_questions[0]
        progress_tracker.record_situational_answer(db, student.id, lesson.id, question.id, 0, 5)

        lesson_service.delete_lesson(db, lesson.id)

        assert db.query(ResultRow).count() == 0
        assert db.query(SituationalQAResult).count() == 0
        assert db.query(StudentProgress).count() == 0
        with pytest.raises(NotFoundError):
            lesson_service.get_lesson(db, lesson.id)


class TestContent:
    def test_save_test_replaces_questions(self, db, lesson, initial_test):
        questions = progress_tracker.load_test_questions(initial_test)[:1]

        saved = lesson_service.save_test(db, lesson.id, "INITIAL", questions)

        assert saved.id == initial_test.id
        assert len(saved.questions) == 1

    def test_get_missing_test(self, db, admin):
        draft = lesson_service.create_lesson(db, LessonCreate(title="Draft", description="Empty"), admin)
        with pytest.raises(NotFoundError):
            lesson_service.get_test(db, draft.id, "FINAL")

    def test_save_lectures_syncs_list(self, db, lesson):
        first_id, second_id = [lecture.id for lecture in lesson_service.list_lectures(db, lesson.id)]

        saved = lesson_service.save_lectures(
            db,
            lesson.id,
            [
                LectureIn(id=second_id, title="Styling, revised", description="<p>Boxes.</p>"),
                LectureIn(title="Forms", description="<p>Inputs.</p>", video_url="https://videos.school.uz/forms"),
            ],
        )

        assert [lecture.title for lecture in saved] == ["Styling, revised", "Forms"]
        assert saved[0].id == second_id
        assert [lecture.order for lecture in saved] == [1, 2]
        assert first_id not in {lecture.id for lecture in saved}

    def test_removing_situational_question_removes_answers(self, db, student, lesson):
        first, second = lesson_service.list_situational_questions(db, lesson.id)
        progress_tracker.record_situational_answer(db, student.id, lesson.id, first.id, 0, 5)

        lesson_service.save_situational_questions(
            db,
            lesson.id,
            [SituationalQuestionIn(id=second.id, question=second.question, answers=second.answers)],
        )

        assert [q.id for q in lesson_service.list_situational_questions(db, lesson.id)] == [second.id]
        assert db.query(SituationalQAResult).count() == 0


class TestStudentReads:
    def test_only_published_lessons_listed(self, db, admin, student, lesson):
        lesson_service.create_lesson(db, LessonCreate(title="Draft", description="Empty"), admin)

        listed = lesson_service.list_published_lessons(db, student.id)

        assert [item.id for item in listed] == [lesson.id]
        assert listed[0].current_step == 0
        assert listed[0].qa_count == 2

    def test_list_shows_student_progress(self, db, student, lesson, initial_test):
        progress_tracker.record_test_submission(db, student.id, initial_test.id, lesson.id, [0, 1, 3])
        assert lesson_service.list_published_lessons(db, student.id)[0].current_step == 2

    def test_student_test_hides_answer_key(self, db, lesson):
        test = lesson_service.student_test(db, lesson.id, "INITIAL")
        assert len(test.questions) == 3
        assert "correct_answer" not in test.questions[0].model_dump()

    def test_student_situational_hides_scores(self, db, lesson):
        questions = lesson_service.student_situational_questions(db, lesson.id)
        assert "score" not in questions[0].answers[0].model_dump()

    def test_unpublished_lesson_is_hidden(self, db, admin):
        draft = lesson_service.create_lesson(db, LessonCreate(title="Draft", description="Empty"), admin)
        with pytest.raises(NotFoundError):
            lesson_service.student_lectures(db, draft.id)

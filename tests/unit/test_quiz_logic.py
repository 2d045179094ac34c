import pytest
import time
from app.models.quiz_state import (
    AttemptState,
    AttemptStore,
    QuizConfig,
    config_errors,
    student_view,
)
from app.utils.scoring import calculate_score, count_correct, is_answer_correct


def make_question(qid, correct=("a",), option_ids=("a", "b", "c", "d")):
    return {
        "id": qid,
        "question_text": f"Question {qid}",
        "question_image_url": None,
        "options": [
            {"id": f"{qid}-{oid}", "option_text": oid.upper(), "option_image_url": None,
             "is_correct": oid in correct, "option_order": index + 1}
            for index, oid in enumerate(option_ids)
        ],
    }


def make_state(count=3):
    return AttemptState(
        attempt={"id": "attempt-1"},
        user_id="student-1",
        questions=[make_question(f"q{i}") for i in range(1, count + 1)],
    )


class TestScoreCalculation:
    """Score is correct answers over questions served, as a percentage"""

    def test_all_correct(self):
        assert calculate_score(10, 10) == 100

    def test_partial(self):
        assert calculate_score(7, 20) == pytest.approx(35.0)

    def test_none_correct(self):
        assert calculate_score(0, 10) == 0

    def test_no_questions(self):
        assert calculate_score(0, 0) == 0.0

    def test_count_correct_ignores_unknown_questions(self):
        questions = [make_question("q1"), make_question("q2")]
        answers = {"q1": "q1-a", "q2": "q2-b", "q9": "q9-a"}
        assert count_correct(questions, answers) == 1

    def test_any_correct_option_counts(self):
        question = make_question("q1", correct=("a", "c"))
        assert is_answer_correct(question, "q1-c")
        assert is_answer_correct(question, "q1-a")
        assert not is_answer_correct(question, "q1-b")
        assert not is_answer_correct(question, None)


class TestAttemptState:
    """In-memory quiz session state"""

    def test_navigation_is_clamped(self):
        state = make_state(3)
        assert state.current_index == 0
        assert state.has_previous is False

        state.previous_question()
        assert state.current_index == 0

        state.next_question()
        state.next_question()
        state.next_question()
        assert state.current_index == 2
        assert state.has_next is False
        assert state.has_previous is True

    def test_progress(self):
        state = make_state(4)
        assert state.progress == 25
        state.next_question()
        assert state.progress == 50

    def test_progress_without_questions(self):
        state = AttemptState(attempt={"id": "a"}, user_id="u")
        assert state.progress == 0
        assert state.current_question is None
        assert state.snapshot()["current_question"] is None

    def test_record_answer_replaces_previous_choice(self):
        state = make_state(2)
        state.record_answer("q1", "q1-b", 4)
        state.record_answer("q1", "q1-a", 9)
        assert len(state.answers) == 1
        assert state.answers["q1"].selected_option_id == "q1-a"
        assert state.answers["q1"].time_taken_seconds == 9

    def test_record_answer_rejects_foreign_option(self):
        state = make_state(2)
        with pytest.raises(ValueError):
            state.record_answer("q1", "q2-a", 1)
        with pytest.raises(ValueError):
            state.record_answer("q7", "q7-a", 1)

    def test_score_counts_unanswered_as_wrong(self):
        state = make_state(4)
        state.record_answer("q1", "q1-a", 3)
        state.record_answer("q2", "q2-a", 3)
        state.record_answer("q3", "q3-d", 3)
        assert state.correct_count() == 2
        assert state.score() == 50

    def test_answer_rows(self):
        state = make_state(2)
        state.record_answer("q2", "q2-c", 12)
        assert state.answer_rows() == [{
            "attempt_id": "attempt-1",
            "question_id": "q2",
            "selected_option_id": "q2-c",
            "time_taken_seconds": 12,
        }]

    def test_snapshot_hides_correct_flags(self):
        state = make_state(1)
        snapshot = state.snapshot()
        options = snapshot["current_question"]["options"]
        assert [opt["option_order"] for opt in options] == [1, 2, 3, 4]
        assert all("is_correct" not in opt for opt in options)

    def test_student_view_orders_options(self):
        question = make_question("q1")
        question["options"].reverse()
        view = student_view(question)
        assert [opt["option_text"] for opt in view["options"]] == ["A", "B", "C", "D"]


class TestAttemptStore:

    def test_add_get_remove(self):
        store = AttemptStore()
        state = store.add(make_state())
        assert store.get("attempt-1") is state
        store.remove("attempt-1")
        assert store.get("attempt-1") is None

    def test_cleanup_stale(self):
        store = AttemptStore()
        old = make_state()
        old.created_at = time.time() - 3 * 3600
        fresh = AttemptState(attempt={"id": "attempt-2"}, user_id="student-1")
        store.add(old)
        store.add(fresh)

        removed = store.cleanup_stale(max_age_hours=2)

        assert removed == 1
        assert store.get("attempt-1") is None
        assert store.get("attempt-2") is fresh


class TestQuizConfig:

    def test_valid_chapter_config(self, quiz_config):
        config = QuizConfig.model_validate(quiz_config)
        assert config.class_ == 7
        assert config.scope_value == "Light"
        assert config_errors(quiz_config) == {}

    def test_valid_topic_config(self):
        config = QuizConfig.model_validate({
            "class": 9, "subject": "Mathematics", "mode": "topic",
            "topic": "Fractions", "question_count": 20
        })
        assert config.scope_value == "Fractions"

    def test_chapter_mode_requires_chapter_only(self, quiz_config):
        quiz_config["topic"] = "Reflection"
        errors = config_errors(quiz_config)
        assert "scope" in errors

        quiz_config.pop("topic")
        quiz_config.pop("chapter")
        assert "scope" in config_errors(quiz_config)

    def test_class_out_of_range(self, quiz_config):
        quiz_config["class"] = 11
        assert "class" in config_errors(quiz_config)

    def test_question_count_choices(self, quiz_config):
        quiz_config["question_count"] = 15
        assert "question_count" in config_errors(quiz_config)

    def test_unknown_mode(self, quiz_config):
        quiz_config["mode"] = "subtopic"
        assert "mode" in config_errors(quiz_config)

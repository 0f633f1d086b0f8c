# tests/test_quiz.py
from civique_prep.bank import QuestionBank, QuestionBankError
from civique_prep.models import Choice, Question
from civique_prep.progress import UserProgressStore
from civique_prep.quiz import TopicQuiz
from civique_prep.topic_progress import TopicProgressStore


class StubBank:
    def __init__(self, questions=None, error=None):
        self.questions = questions or []
        self.error = error

    def load_topic(self, topic_id):
        if self.error:
            raise QuestionBankError(self.error)
        return list(self.questions)


def two_questions():
    return [
        Question(id="q1", stem="Question 1", analysis="Analysis 1", choices=[
            Choice(id="c1", text="Choice 1", is_correct=True),
            Choice(id="c2", text="Choice 2", is_correct=False),
        ]),
        Question(id="q2", stem="Question 2", analysis="Analysis 2", choices=[
            Choice(id="c3", text="Choice 3", is_correct=True),
            Choice(id="c4", text="Choice 4", is_correct=False),
        ]),
    ]


def make_quiz(store=None, tracker=None, questions=None):
    quiz = TopicQuiz(
        "values", StubBank(questions or two_questions()), store or UserProgressStore(),
        tracker=tracker, random_fn=lambda: 0.5,
    )
    return quiz


def test_loads_questions():
    quiz = make_quiz()
    assert quiz.status == "loading"
    assert quiz.load() is True
    assert quiz.status == "ready"
    assert len(quiz.questions) == 2
    assert quiz.current_question.id == "q1"


def test_scenario_score_and_finish():
    store = UserProgressStore()
    quiz = make_quiz(store)
    quiz.load()
    assert quiz.submit_answer("c1") is True
    assert quiz.status == "answered"
    quiz.next_question()
    assert quiz.status == "answering"
    assert quiz.submit_answer("c2") is False
    assert quiz.score == 1
    assert quiz.user_answers == {"q1": "c1", "q2": "c2"}
    assert not quiz.is_finished
    quiz.next_question()
    assert quiz.is_finished is True
    assert quiz.status == "finished"


def test_wrong_answer_records_mistake_once():
    store = UserProgressStore()
    quiz = make_quiz(store)
    quiz.load()
    quiz.submit_answer("c2")
    quiz.submit_answer("c2")
    quiz.submit_answer("c1")
    assert store.get_mistake("q1").count == 1
    assert store.get_mistake("q1").topic_id == "values"
    assert quiz.score == 0
    assert quiz.user_answers == {"q1": "c2"}


def test_reentrant_submission_records_once():
    class ReentrantStore(UserProgressStore):
        def add_mistake(self, question, topic_id):
            record = super().add_mistake(question, topic_id)
            quiz.submit_answer("c2")
            return record

    store = ReentrantStore()
    quiz = make_quiz(store)
    quiz.load()
    quiz.submit_answer("c2")
    assert store.get_mistake("q1").count == 1


def test_correct_answer_records_no_mistake():
    store = UserProgressStore()
    quiz = make_quiz(store)
    quiz.load()
    quiz.submit_answer("c1")
    assert store.mistakes == {}


def test_unknown_choice_counts_as_wrong():
    store = UserProgressStore()
    quiz = make_quiz(store)
    quiz.load()
    assert quiz.submit_answer("zzz") is False
    assert store.is_mistake("q1")


def test_no_answers_after_finish():
    quiz = make_quiz()
    quiz.load()
    quiz.next_question()
    quiz.next_question()
    assert quiz.is_finished
    assert quiz.submit_answer("c3") is None
    quiz.next_question()
    assert quiz.is_finished


def test_tracker_receives_answers():
    tracker = TopicProgressStore()
    quiz = make_quiz(tracker=tracker)
    quiz.load()
    quiz.submit_answer("c1")
    quiz.next_question()
    quiz.submit_answer("c4")
    record = tracker.get_topic_progress("values")
    assert record.total_answered == 2
    assert record.correct_count == 1


def test_restart_resets_state():
    quiz = make_quiz()
    quiz.load()
    quiz.submit_answer("c1")
    quiz.next_question()
    quiz.next_question()
    quiz.restart()
    assert quiz.current_index == 0
    assert quiz.user_answers == {}
    assert quiz.score == 0
    assert quiz.is_finished is False
    assert sorted(q.id for q in quiz.questions) == ["q1", "q2"]


def test_load_failure_sets_error():
    quiz = TopicQuiz("values", StubBank(error="Failed to load topic data"), UserProgressStore())
    assert quiz.load() is False
    assert quiz.status == "error"
    assert quiz.error == "Failed to load topic data"
    assert quiz.submit_answer("c1") is None


def test_empty_bank_is_a_load_failure():
    quiz = TopicQuiz("values", StubBank([]), UserProgressStore())
    assert quiz.load() is False
    assert "No questions" in quiz.error


def test_quiz_over_bundled_bank():
    store = UserProgressStore()
    quiz = TopicQuiz("history", QuestionBank(), store)
    assert quiz.load()
    wrong = 0
    while not quiz.is_finished:
        question = quiz.current_question
        choice = next(c for c in question.choices if not c.is_correct)
        quiz.submit_answer(choice.id)
        wrong += 1
        quiz.next_question()
    assert quiz.score == 0
    assert len(store.mistakes) == wrong

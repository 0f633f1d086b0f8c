"""Topic quiz engine: one topic's questions, shuffled, answered in sequence."""
import logging
import random
from typing import Callable, Optional

from civique_prep.bank import QuestionBank, QuestionBankError
from civique_prep.mistakes import shuffle
from civique_prep.models import Question
from civique_prep.progress import UserProgressStore
from civique_prep.topic_progress import TopicProgressStore

logger = logging.getLogger(__name__)


class TopicQuiz:
    """Quiz session over a single topic.

    Status goes loading -> ready -> (answering <-> answered)* -> finished, or
    loading -> error when the bank can't be read. Answers are locked on first
    submission; only restart() leaves the finished state.
    """

    def __init__(
        self,
        topic_id: str,
        bank: QuestionBank,
        store: UserProgressStore,
        tracker: Optional[TopicProgressStore] = None,
        random_fn: Callable[[], float] = random.random,
    ):
        self.topic_id = topic_id
        self.bank = bank
        self.store = store
        self.tracker = tracker
        self.random_fn = random_fn
        self.questions: list[Question] = []
        self.current_index = 0
        self.user_answers: dict[str, str] = {}
        self.score = 0
        self.is_finished = False
        self.loading = True
        self.error: Optional[str] = None

    def load(self) -> bool:
        """Fetch and shuffle the topic's questions. Returns False on load failure."""
        self.loading = True
        self.error = None
        try:
            questions = self.bank.load_topic(self.topic_id)
            if not questions:
                raise QuestionBankError(f"No questions available for topic '{self.topic_id}'")
        except QuestionBankError as e:
            logger.warning("Could not load topic %s: %s", self.topic_id, e)
            self.error = str(e)
            self.loading = False
            return False
        self.questions = shuffle(questions, self.random_fn)
        self.current_index = 0
        self.user_answers = {}
        self.score = 0
        self.is_finished = False
        self.loading = False
        return True

    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        if self.error:
            return "error"
        if self.is_finished:
            return "finished"
        question = self.current_question
        if question is not None and question.id in self.user_answers:
            return "answered"
        if not self.user_answers and self.current_index == 0:
            return "ready"
        return "answering"

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    def submit_answer(self, choice_id: str) -> Optional[bool]:
        """Lock in an answer for the current question.

        Returns whether it was correct, or None when the call is a no-op
        (nothing loaded, quiz finished, or question already answered).
        """
        question = self.current_question
        if question is None or self.is_finished or question.id in self.user_answers:
            return None

        is_correct = question.is_correct(choice_id)
        # Recorded before any side effect so a reentrant call sees it answered.
        self.user_answers[question.id] = choice_id
        if is_correct:
            self.score += 1
        else:
            self.store.add_mistake(question, self.topic_id)
        if self.tracker is not None:
            self.tracker.record_answer(self.topic_id, is_correct)
        return is_correct

    def next_question(self) -> None:
        if self.is_finished or not self.questions:
            return
        if self.current_index + 1 >= len(self.questions):
            self.is_finished = True
        else:
            self.current_index += 1

    def restart(self) -> None:
        self.questions = shuffle(self.questions, self.random_fn)
        self.current_index = 0
        self.user_answers = {}
        self.score = 0
        self.is_finished = False

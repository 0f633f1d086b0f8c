"""Timed mock exam: assembly, countdown, scoring, and mistake feedback.

A session moves idle -> loading -> in_progress -> finished, and back to idle
through reset_exam(). The countdown is driven by tick() messages, one per
second, which call finish_exam() when time runs out so that a timeout is
scored exactly like a manual submission.
"""
import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from civique_prep.bank import QuestionBank, QuestionBankError
from civique_prep.mistakes import SITUATION_TOPIC, shuffle
from civique_prep.models import ExamQuestion, ExamResult, TopicScore, WrongQuestion
from civique_prep.progress import UserProgressStore

logger = logging.getLogger(__name__)

EXAM_DURATION_SECONDS = 45 * 60
TOPIC_QUESTION_COUNT = 28
SITUATION_QUESTION_COUNT = 12
TOPIC_IDS = ("values", "institutions", "rights", "history", "society")

IDLE = "idle"
LOADING = "loading"
IN_PROGRESS = "in_progress"
FINISHED = "finished"

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass
class ExamState:
    status: str = IDLE
    questions: list[ExamQuestion] = field(default_factory=list)
    current_index: int = 0
    user_answers: dict[str, str] = field(default_factory=dict)
    time_remaining: int = EXAM_DURATION_SECONDS
    result: Optional[ExamResult] = None
    error: Optional[str] = None
    started_at: float = 0.0
    ticks_applied: int = 0
    timer_running: bool = False
    mistakes_recorded: bool = False  # one-shot latch, cleared only by reset


def score_exam(
    questions: list[ExamQuestion],
    user_answers: dict[str, str],
    exam_id: str,
    date: str,
    duration: int,
) -> ExamResult:
    """Score every question; a missing answer counts as wrong."""
    counts: dict[str, list[int]] = {}  # topic -> [correct, total]
    wrong_questions = []
    score = 0
    for item in questions:
        topic_counts = counts.setdefault(item.topic_id, [0, 0])
        topic_counts[1] += 1
        user_answer = user_answers.get(item.id, "")
        correct = item.question.correct_choice()
        if correct is not None and user_answer == correct.id:
            score += 1
            topic_counts[0] += 1
        else:
            wrong_questions.append(WrongQuestion(
                question=item.question,
                user_answer=user_answer,
                correct_answer=correct.id if correct else "",
                topic_id=item.topic_id,
            ))
    return ExamResult(
        id=exam_id,
        date=date,
        score=score,
        total=len(questions),
        duration=duration,
        topic_scores={
            topic_id: TopicScore(correct=c, total=t) for topic_id, (c, t) in counts.items()
        },
        wrong_questions=tuple(wrong_questions),
    )


class ExamSession:
    def __init__(
        self,
        bank: QuestionBank,
        store: UserProgressStore,
        random_fn: Callable[[], float] = random.random,
        clock: Callable[[], float] = time.time,
    ):
        self.bank = bank
        self.store = store
        self.random_fn = random_fn
        self.clock = clock
        self.state = ExamState()

    # Views

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def questions(self) -> list[ExamQuestion]:
        return self.state.questions

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def user_answers(self) -> dict[str, str]:
        return self.state.user_answers

    @property
    def time_remaining(self) -> int:
        return self.state.time_remaining

    @property
    def result(self) -> Optional[ExamResult]:
        return self.state.result

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    @property
    def timer_running(self) -> bool:
        return self.state.timer_running

    @property
    def current_question(self) -> Optional[ExamQuestion]:
        if 0 <= self.state.current_index < len(self.state.questions):
            return self.state.questions[self.state.current_index]
        return None

    @property
    def total_questions(self) -> int:
        return len(self.state.questions)

    @property
    def answered_count(self) -> int:
        return len(self.state.user_answers)

    @property
    def progress(self) -> int:
        if not self.state.questions:
            return 0
        return round(self.answered_count / len(self.state.questions) * 100)

    # Assembly

    def _load_pools(self) -> tuple[list[ExamQuestion], list[ExamQuestion]]:
        topical = []
        for topic_id in TOPIC_IDS:
            try:
                questions = self.bank.load_topic(topic_id)
            except QuestionBankError as e:
                logger.warning("Skipping topic %s in exam: %s", topic_id, e)
                continue
            topical.extend(ExamQuestion(question=q, topic_id=topic_id) for q in questions)
        situation = [
            ExamQuestion(question=q, topic_id=SITUATION_TOPIC)
            for q in self.bank.load_situation()
        ]
        return topical, situation

    def start_exam(self) -> bool:
        """Assemble a fresh exam and start the clock. Returns False on load failure."""
        self.state.status = LOADING
        self.state.error = None
        try:
            topical, situation = self._load_pools()
            selected = (
                shuffle(topical, self.random_fn)[:TOPIC_QUESTION_COUNT]
                + shuffle(situation, self.random_fn)[:SITUATION_QUESTION_COUNT]
            )
            questions = shuffle(selected, self.random_fn)
            if not questions:
                raise QuestionBankError("Unable to load the question bank")
        except QuestionBankError as e:
            logger.warning("Exam could not start: %s", e)
            self.state.status = IDLE
            self.state.error = str(e)
            return False

        self.state = ExamState(
            status=IN_PROGRESS,
            questions=questions,
            started_at=self.clock(),
            timer_running=True,
        )
        logger.info(
            "Exam started with %d questions (%d situational)",
            len(questions), sum(1 for q in questions if q.topic_id == SITUATION_TOPIC),
        )
        return True

    # Answering and navigation

    def select_answer(self, question_id: str, choice_id: str) -> None:
        if self.state.status != IN_PROGRESS:
            return
        if not any(item.id == question_id for item in self.state.questions):
            return
        self.state.user_answers[question_id] = choice_id

    def go_to_question(self, index: int) -> None:
        if 0 <= index < len(self.state.questions):
            self.state.current_index = index

    def next_question(self) -> None:
        if self.state.current_index < len(self.state.questions) - 1:
            self.state.current_index += 1

    def prev_question(self) -> None:
        if self.state.current_index > 0:
            self.state.current_index -= 1

    # Clock

    def tick(self) -> None:
        """Apply one second of countdown; finishes the exam when time is up."""
        if self.state.status != IN_PROGRESS or not self.state.timer_running:
            return
        self.state.ticks_applied += 1
        self.state.time_remaining = max(0, self.state.time_remaining - 1)
        if self.state.time_remaining == 0:
            logger.info("Exam time is up, submitting automatically")
            self.finish_exam()

    def sync_clock(self) -> None:
        """Issue the ticks owed since the exam started, by wall-clock time."""
        if self.state.status != IN_PROGRESS:
            return
        owed = int(self.clock() - self.state.started_at) - self.state.ticks_applied
        for _ in range(max(0, owed)):
            if self.state.status != IN_PROGRESS:
                break
            self.tick()

    # Completion

    def _generate_exam_id(self) -> str:
        suffix = "".join(
            _ID_ALPHABET[int(self.random_fn() * len(_ID_ALPHABET))] for _ in range(7)
        )
        return f"exam_{int(self.clock() * 1000)}_{suffix}"

    def finish_exam(self) -> Optional[ExamResult]:
        """Score the exam and record its mistakes. Only valid while in progress."""
        if self.state.status != IN_PROGRESS:
            return None
        now = self.clock()
        result = score_exam(
            self.state.questions,
            self.state.user_answers,
            exam_id=self._generate_exam_id(),
            date=datetime.fromtimestamp(now).isoformat(),
            duration=round(now - self.state.started_at),
        )
        self.state.timer_running = False
        self.state.result = result
        self.state.status = FINISHED
        logger.info("Exam finished: %d/%d in %ds", result.score, result.total, result.duration)
        self.record_mistakes()
        return result

    def record_mistakes(self) -> bool:
        """Push the finished exam's wrong questions to the store, once.

        Returns True only on the call that actually recorded them.
        """
        if self.state.status != FINISHED or self.state.result is None:
            return False
        if self.state.mistakes_recorded:
            return False
        self.state.mistakes_recorded = True
        for wrong in self.state.result.wrong_questions:
            self.store.add_mistake(wrong.question, wrong.topic_id)
        return True

    def reset_exam(self) -> None:
        self.state = ExamState()

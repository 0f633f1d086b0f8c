"""Practice session over the mistake notebook."""
import random
from typing import Callable, Optional

from civique_prep.mistakes import (
    KINDS, MODES, build_practice_queue, filter_mistakes, get_topic_options,
    is_topic_allowed_in_kind, sort_mistakes,
)
from civique_prep.models import MistakeRecord, Question
from civique_prep.progress import UserProgressStore

WRONG_COUNT_FILTERS = (1, 2, 3, 5)


class MistakePractice:
    """Flashcard-style drill of recorded mistakes.

    The queue is the mode's base queue followed by a replay queue; in sprint
    mode every wrong answer appends the card to the replay queue so it comes
    back later in the same session.
    """

    def __init__(
        self,
        store: UserProgressStore,
        mode: str = "review",
        random_fn: Callable[[], float] = random.random,
    ):
        if mode not in MODES:
            raise ValueError(f"Unknown practice mode: {mode!r}")
        self.store = store
        self.mode = mode
        self.random_fn = random_fn
        self.kind = "all"
        self.topic_id = "all"
        self.min_wrong_count = 1
        self.base_queue: list[MistakeRecord] = []
        self.replay_queue: list[str] = []
        self.current_index = 0
        self.selected_choice: Optional[str] = None
        self.show_answer = False
        self.session_answered = 0
        self.session_correct = 0
        self.rebuild()

    def filtered_records(self) -> list[MistakeRecord]:
        return filter_mistakes(
            sort_mistakes(self.store.mistakes.values()),
            kind=self.kind,
            topic_id=self.topic_id,
            min_wrong_count=self.min_wrong_count,
        )

    def topic_options(self) -> list[str]:
        return get_topic_options(
            (r.topic_id for r in sort_mistakes(self.store.mistakes.values())), self.kind
        )

    @property
    def queue(self) -> list[MistakeRecord]:
        records = {r.question_id: r for r in self.filtered_records()}
        replay = [records[qid] for qid in self.replay_queue if qid in records]
        return self.base_queue + replay

    @property
    def current_record(self) -> Optional[MistakeRecord]:
        queue = self.queue
        if not queue:
            return None
        return queue[self.current_index % len(queue)]

    @property
    def current_question(self) -> Optional[Question]:
        record = self.current_record
        return record.question if record else None

    @property
    def accuracy(self) -> int:
        if self.session_answered == 0:
            return 0
        return round(self.session_correct / self.session_answered * 100)

    def rebuild(self) -> None:
        """Rebuild the base queue from the store's current mistakes."""
        self.base_queue = build_practice_queue(self.filtered_records(), self.mode, self.random_fn)

    def _clear_card(self) -> None:
        self.selected_choice = None
        self.show_answer = False

    def reset_session(self) -> None:
        self.current_index = 0
        self._clear_card()
        self.replay_queue = []
        self.session_answered = 0
        self.session_correct = 0
        self.rebuild()

    def reshuffle(self) -> None:
        self.rebuild()
        self.current_index = 0
        self._clear_card()

    # Filters. Choosing the active value again falls back to the default.

    def set_kind(self, kind: str) -> None:
        if kind not in KINDS:
            raise ValueError(f"Unknown question kind: {kind!r}")
        self.kind = "all" if self.kind == kind else kind
        if not is_topic_allowed_in_kind(self.topic_id, self.kind):
            self.topic_id = "all"
        self.reset_session()

    def set_topic(self, topic_id: str) -> None:
        self.topic_id = "all" if self.topic_id == topic_id else topic_id
        self.reset_session()

    def set_min_wrong_count(self, value: int) -> None:
        self.min_wrong_count = 1 if self.min_wrong_count == value else value
        self.reset_session()

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown practice mode: {mode!r}")
        self.mode = mode
        self.reset_session()

    # Card actions

    def select_choice(self, choice_id: str) -> Optional[bool]:
        """Answer the current card. Returns correctness, or None if ignored."""
        record = self.current_record
        if self.show_answer or record is None:
            return None
        is_correct = record.question.is_correct(choice_id)
        self.selected_choice = choice_id
        self.show_answer = True
        self.session_answered += 1
        if is_correct:
            self.session_correct += 1
        elif self.mode == "sprint":
            self.replay_queue.append(record.question_id)
        return is_correct

    def next(self) -> None:
        queue = self.queue
        if not queue:
            return
        self.current_index = (self.current_index + 1) % len(queue)
        self._clear_card()

    def mark_mastered(self) -> None:
        """Drop the current card from the mistake notebook."""
        record = self.current_record
        if record is None:
            return
        self.store.remove_mistake(record.question_id)
        self.replay_queue = [qid for qid in self.replay_queue if qid != record.question_id]
        self.rebuild()
        self.current_index = 0
        self._clear_card()

    def toggle_bookmark(self) -> Optional[bool]:
        record = self.current_record
        if record is None:
            return None
        return self.store.toggle_bookmark(record.question, record.topic_id)

"""Mistake notebook filtering and practice-queue construction."""
import math
import random
from typing import Callable, Iterable, Sequence, TypeVar

from civique_prep.models import MistakeRecord

T = TypeVar("T")

SITUATION_TOPIC = "situation"
KINDS = ("all", "choice", "situation")
MODES = ("review", "sprint")
SPRINT_MIN_WEIGHT = 1
SPRINT_MAX_WEIGHT = 5


def is_situation_topic(topic_id: str) -> bool:
    return topic_id == SITUATION_TOPIC


def get_question_kind(topic_id: str) -> str:
    """Return 'situation' for the scenario tag, 'choice' for any subject topic."""
    return "situation" if is_situation_topic(topic_id) else "choice"


def filter_mistakes(
    records: Iterable[MistakeRecord],
    kind: str = "all",
    topic_id: str = "all",
    min_wrong_count: int = 1,
) -> list[MistakeRecord]:
    """Keep records matching every criterion, in input order."""
    if kind not in KINDS:
        raise ValueError(f"Unknown question kind: {kind!r}")
    return [
        r for r in records
        if r.count >= min_wrong_count
        and (kind == "all" or get_question_kind(r.topic_id) == kind)
        and (topic_id == "all" or r.topic_id == topic_id)
    ]


def get_available_choice_topics(records: Iterable[MistakeRecord]) -> list[str]:
    """Distinct subject topics among the records, first-seen order."""
    return list(dict.fromkeys(
        r.topic_id for r in records if not is_situation_topic(r.topic_id)
    ))


def is_topic_allowed_in_kind(topic_id: str, kind: str) -> bool:
    if topic_id == "all" or kind == "all":
        return True
    return get_question_kind(topic_id) == kind


def get_topic_options(topic_ids: Iterable[str], kind: str) -> list[str]:
    """Distinct topics that can be picked while the given kind filter is active."""
    return list(dict.fromkeys(t for t in topic_ids if is_topic_allowed_in_kind(t, kind)))


def sort_mistakes(records: Iterable[MistakeRecord]) -> list[MistakeRecord]:
    """Most-missed first; ties broken by most recent wrong answer."""
    return sorted(records, key=lambda r: (r.count, r.last_wrong_at), reverse=True)


def shuffle(items: Sequence[T], random_fn: Callable[[], float] = random.random) -> list[T]:
    """Fisher-Yates shuffle of a copy of items, driven by random_fn in [0, 1)."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = math.floor(random_fn() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def sprint_weight(record: MistakeRecord) -> int:
    return min(SPRINT_MAX_WEIGHT, max(SPRINT_MIN_WEIGHT, record.count))


def build_practice_queue(
    records: Sequence[MistakeRecord],
    mode: str,
    random_fn: Callable[[], float] = random.random,
) -> list[MistakeRecord]:
    """Order mistakes for practice.

    review: every record once, shuffled.
    sprint: every record repeated by its clamped wrong count, shuffled, so
    frequently missed questions come up more often.
    """
    if mode == "review":
        return shuffle(records, random_fn)
    if mode == "sprint":
        weighted = [r for r in records for _ in range(sprint_weight(r))]
        return shuffle(weighted, random_fn)
    raise ValueError(f"Unknown practice mode: {mode!r}")

# tests/test_mistakes.py
from collections import Counter
import random

import pytest

from civique_prep.mistakes import (
    build_practice_queue, filter_mistakes, get_available_choice_topics,
    get_question_kind, get_topic_options, is_topic_allowed_in_kind, shuffle,
    sort_mistakes,
)


def test_question_kind_classification():
    assert get_question_kind("situation") == "situation"
    assert get_question_kind("history") == "choice"


def test_filter_by_kind_and_min_wrong_count(make_record):
    records = [
        make_record(question_id="q1", topic_id="history", count=3),
        make_record(question_id="q2", topic_id="situation", count=2),
        make_record(question_id="q3", topic_id="values", count=1),
    ]
    filtered = filter_mistakes(records, kind="choice", min_wrong_count=2)
    assert [r.question_id for r in filtered] == ["q1"]


def test_filter_defaults_keep_everything_in_order(make_record):
    records = [
        make_record(question_id="q3", count=1),
        make_record(question_id="q1", topic_id="situation", count=4),
        make_record(question_id="q2", count=2),
    ]
    assert filter_mistakes(records) == records


def test_filter_by_topic(make_record):
    records = [
        make_record(question_id="q1", topic_id="history"),
        make_record(question_id="q2", topic_id="values"),
        make_record(question_id="q3", topic_id="situation"),
    ]
    assert [r.question_id for r in filter_mistakes(records, topic_id="values")] == ["q2"]
    assert [r.question_id for r in filter_mistakes(records, kind="situation")] == ["q3"]


@pytest.mark.parametrize("n", [1, 2, 3, 5, 10])
def test_filter_min_wrong_count_property(make_record, n):
    records = [make_record(question_id=f"q{i}", count=i) for i in range(1, 8)]
    filtered = filter_mistakes(records, min_wrong_count=n)
    assert all(r.count >= n for r in filtered)
    assert len(filtered) == sum(1 for r in records if r.count >= n)


def test_filter_rejects_unknown_kind(make_record):
    with pytest.raises(ValueError):
        filter_mistakes([make_record()], kind="essay")


def test_available_choice_topics_deduplicated(make_record):
    records = [
        make_record(topic_id="history"),
        make_record(question_id="q2", topic_id="history"),
        make_record(question_id="q3", topic_id="situation"),
        make_record(question_id="q4", topic_id="values"),
    ]
    assert get_available_choice_topics(records) == ["history", "values"]


def test_topic_options_follow_kind():
    topic_ids = ["history", "situation", "values", "history"]
    assert get_topic_options(topic_ids, "all") == ["history", "situation", "values"]
    assert get_topic_options(topic_ids, "choice") == ["history", "values"]
    assert get_topic_options(topic_ids, "situation") == ["situation"]
    assert is_topic_allowed_in_kind("all", "situation")
    assert not is_topic_allowed_in_kind("history", "situation")


def test_sort_mistakes_count_then_recency(make_record):
    records = [
        make_record(question_id="q1", count=2, last_wrong_at="2026-01-01T00:00:01"),
        make_record(question_id="q2", count=4, last_wrong_at="2026-01-01T00:00:00"),
        make_record(question_id="q3", count=2, last_wrong_at="2026-01-01T00:00:05"),
    ]
    assert [r.question_id for r in sort_mistakes(records)] == ["q2", "q3", "q1"]


def test_shuffle_is_deterministic_and_does_not_mutate():
    items = [1, 2, 3, 4, 5]
    assert shuffle(items, lambda: 0.0) == [2, 3, 4, 5, 1]
    assert shuffle(items, lambda: 0.999) == [1, 2, 3, 4, 5]
    assert items == [1, 2, 3, 4, 5]


def test_review_queue_is_permutation(make_record):
    records = [make_record(question_id=f"q{i}", count=i) for i in range(1, 6)]
    queue = build_practice_queue(records, "review", random.Random(7).random)
    assert len(queue) == len(records)
    assert Counter(r.question_id for r in queue) == Counter(r.question_id for r in records)


def test_sprint_queue_weights_are_clamped(make_record):
    records = [
        make_record(question_id="q1", count=1),
        make_record(question_id="q3", count=3),
        make_record(question_id="q10", count=10),
    ]
    queue = build_practice_queue(records, "sprint", lambda: 0.5)
    counts = Counter(r.question_id for r in queue)
    assert counts == {"q1": 1, "q3": 3, "q10": 5}
    assert len(queue) == 9


def test_sprint_queue_weight_floor(make_record):
    queue = build_practice_queue([make_record(count=0)], "sprint", lambda: 0.5)
    assert len(queue) == 1


def test_queue_deterministic_for_fixed_source(make_record):
    records = [make_record(question_id=f"q{i}", count=i) for i in range(1, 6)]
    first = build_practice_queue(records, "sprint", random.Random(42).random)
    second = build_practice_queue(records, "sprint", random.Random(42).random)
    assert [r.question_id for r in first] == [r.question_id for r in second]


def test_empty_queue(make_record):
    assert build_practice_queue([], "review") == []
    assert build_practice_queue([], "sprint") == []


def test_unknown_mode_rejected(make_record):
    with pytest.raises(ValueError):
        build_practice_queue([make_record()], "marathon")

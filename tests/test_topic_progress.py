# tests/test_topic_progress.py
from civique_prep.topic_progress import TopicProgressStore


def test_record_answer_upserts(fixed_now):
    tracker = TopicProgressStore(now=fixed_now)
    tracker.record_answer("values", True)
    tracker.record_answer("values", False)
    record = tracker.record_answer("values", True)
    assert record.total_answered == 3
    assert record.correct_count == 2
    assert record.last_practice_at == "2026-01-01T12:00:03"
    assert tracker.get_topic_progress("values").accuracy == 67


def test_first_wrong_answer_counts_zero_correct():
    tracker = TopicProgressStore()
    record = tracker.record_answer("history", False)
    assert record.total_answered == 1
    assert record.correct_count == 0


def test_get_topic_progress_unknown():
    assert TopicProgressStore().get_topic_progress("nope") is None


def test_reset_topic_and_all():
    tracker = TopicProgressStore()
    tracker.record_answer("values", True)
    tracker.record_answer("rights", True)
    tracker.reset_topic_progress("values")
    tracker.reset_topic_progress("values")
    assert tracker.get_topic_progress("values") is None
    assert tracker.get_topic_progress("rights") is not None
    tracker.reset_all_progress()
    assert tracker.progress == {}


def test_persists_across_instances(tmp_db):
    tracker = TopicProgressStore(tmp_db)
    tracker.record_answer("values", True)
    tracker.record_answer("values", False)
    tracker.record_answer("rights", True)
    tracker.reset_topic_progress("rights")

    reloaded = TopicProgressStore(tmp_db)
    assert reloaded.get_topic_progress("values").total_answered == 2
    assert reloaded.get_topic_progress("values").correct_count == 1
    assert reloaded.get_topic_progress("rights") is None

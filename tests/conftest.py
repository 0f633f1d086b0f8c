import json
from datetime import datetime, timedelta

import pytest

from civique_prep.models import Choice, MistakeRecord, Question


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_progress.db")
    return db_path


def _question(question_id="q1", correct="c1", wrong="c2"):
    return Question(
        id=question_id,
        stem=f"{question_id} stem",
        analysis="analysis",
        choices=[
            Choice(id=correct, text="right", is_correct=True),
            Choice(id=wrong, text="wrong", is_correct=False),
        ],
    )


@pytest.fixture
def make_question():
    return _question


@pytest.fixture
def make_record():
    def factory(question_id="q1", topic_id="values", count=1, last_wrong_at="2026-01-01T10:00:00"):
        return MistakeRecord(
            question_id=question_id,
            question=_question(question_id),
            topic_id=topic_id,
            count=count,
            last_wrong_at=last_wrong_at,
        )
    return factory


@pytest.fixture
def fixed_now():
    """A clock that advances one second per call, for ordered timestamps."""
    current = [datetime(2026, 1, 1, 12, 0, 0)]

    def now():
        current[0] += timedelta(seconds=1)
        return current[0]
    return now


def _bank_question(question_id):
    return {
        "id": question_id,
        "type": "single",
        "stem": f"{question_id} stem",
        "analysis": "analysis",
        "choices": [
            {"id": "c1", "text": "A", "isCorrect": True},
            {"id": "c2", "text": "B", "isCorrect": False},
        ],
    }


@pytest.fixture
def write_bank(tmp_path):
    """Write a bank directory: write_bank({'values': 10, ...}, situation=12)."""
    def factory(topics: dict, situation=None, extra_entries=None):
        content = tmp_path / "content"
        (content / "topics").mkdir(parents=True, exist_ok=True)
        for topic_id, count in topics.items():
            questions = [_bank_question(f"{topic_id}-{i}") for i in range(count)]
            questions += list(extra_entries or [])
            payload = {"meta": {"sectionId": topic_id, "sectionTitle": topic_id}, "questions": questions}
            (content / "topics" / f"{topic_id}.json").write_text(json.dumps(payload))
        if situation is not None:
            questions = [_bank_question(f"situation-{i}") for i in range(situation)]
            questions += list(extra_entries or [])
            payload = {"meta": {"sectionId": "situation", "sectionTitle": "situation"}, "questions": questions}
            (content / "situation.json").write_text(json.dumps(payload))
        return content
    return factory

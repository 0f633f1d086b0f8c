"""Per-topic answer and accuracy counters."""
from datetime import datetime
from typing import Callable, Optional

from civique_prep.db import get_connection, init_db
from civique_prep.models import TopicProgressRecord


class TopicProgressStore:
    def __init__(
        self,
        db_path: Optional[str] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.db_path = db_path
        self._now = now
        self.progress: dict[str, TopicProgressRecord] = {}
        if db_path:
            init_db(db_path)
            conn = get_connection(db_path)
            for row in conn.execute("SELECT * FROM topic_progress").fetchall():
                self.progress[row["topic_id"]] = TopicProgressRecord(
                    topic_id=row["topic_id"],
                    total_answered=row["total_answered"],
                    correct_count=row["correct_count"],
                    last_practice_at=row["last_practice_at"],
                )
            conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> None:
        if not self.db_path:
            return
        conn = get_connection(self.db_path)
        conn.execute(sql, params)
        conn.commit()
        conn.close()

    def record_answer(self, topic_id: str, is_correct: bool) -> TopicProgressRecord:
        existing = self.progress.get(topic_id)
        record = TopicProgressRecord(
            topic_id=topic_id,
            total_answered=(existing.total_answered if existing else 0) + 1,
            correct_count=(existing.correct_count if existing else 0) + int(is_correct),
            last_practice_at=self._now().isoformat(),
        )
        self.progress[topic_id] = record
        self._execute(
            """INSERT INTO topic_progress (topic_id, total_answered, correct_count, last_practice_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(topic_id) DO UPDATE SET
                total_answered=excluded.total_answered, correct_count=excluded.correct_count,
                last_practice_at=excluded.last_practice_at""",
            (record.topic_id, record.total_answered, record.correct_count, record.last_practice_at),
        )
        return record

    def get_topic_progress(self, topic_id: str) -> Optional[TopicProgressRecord]:
        return self.progress.get(topic_id)

    def reset_topic_progress(self, topic_id: str) -> None:
        if self.progress.pop(topic_id, None) is not None:
            self._execute("DELETE FROM topic_progress WHERE topic_id = ?", (topic_id,))

    def reset_all_progress(self) -> None:
        self.progress = {}
        self._execute("DELETE FROM topic_progress")

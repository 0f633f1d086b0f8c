"""Per-user mistake notebook and bookmarks.

The store keeps both maps in memory and, when given a database path, reads
every record at construction and writes the touched row on each mutation.
Construct one store per process and pass it to the engines that need it.
"""
import copy
import json
import logging
from datetime import datetime
from typing import Callable, Optional

from civique_prep.db import get_connection, init_db
from civique_prep.mistakes import sort_mistakes
from civique_prep.models import BookmarkRecord, MistakeRecord, Question

logger = logging.getLogger(__name__)


class UserProgressStore:
    def __init__(
        self,
        db_path: Optional[str] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.db_path = db_path
        self._now = now
        self.mistakes: dict[str, MistakeRecord] = {}
        self.bookmarks: dict[str, BookmarkRecord] = {}
        if db_path:
            init_db(db_path)
            self._load()

    def _load(self) -> None:
        conn = get_connection(self.db_path)
        for row in conn.execute("SELECT * FROM mistakes").fetchall():
            self.mistakes[row["question_id"]] = MistakeRecord(
                question_id=row["question_id"],
                question=Question.from_dict(json.loads(row["question_json"])),
                topic_id=row["topic_id"],
                count=row["count"],
                last_wrong_at=row["last_wrong_at"],
            )
        for row in conn.execute("SELECT * FROM bookmarks").fetchall():
            self.bookmarks[row["question_id"]] = BookmarkRecord(
                question_id=row["question_id"],
                question=Question.from_dict(json.loads(row["question_json"])),
                topic_id=row["topic_id"],
                added_at=row["added_at"],
            )
        conn.close()
        logger.debug(
            "Loaded %d mistakes and %d bookmarks from %s",
            len(self.mistakes), len(self.bookmarks), self.db_path,
        )

    def _execute(self, sql: str, params: tuple = ()) -> None:
        if not self.db_path:
            return
        conn = get_connection(self.db_path)
        conn.execute(sql, params)
        conn.commit()
        conn.close()

    # Mistakes

    def add_mistake(self, question: Question, topic_id: str) -> MistakeRecord:
        """Count one more wrong answer for the question, refreshing its snapshot."""
        question = copy.deepcopy(question)
        existing = self.mistakes.get(question.id)
        record = MistakeRecord(
            question_id=question.id,
            question=question,
            topic_id=topic_id,
            count=existing.count + 1 if existing else 1,
            last_wrong_at=self._now().isoformat(),
        )
        self.mistakes[question.id] = record
        self._execute(
            """INSERT INTO mistakes (question_id, topic_id, question_json, count, last_wrong_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(question_id) DO UPDATE SET
                topic_id=excluded.topic_id, question_json=excluded.question_json,
                count=excluded.count, last_wrong_at=excluded.last_wrong_at""",
            (
                record.question_id, record.topic_id,
                json.dumps(question.to_dict(), ensure_ascii=False),
                record.count, record.last_wrong_at,
            ),
        )
        logger.debug("Mistake %s on %s now at count %d", question.id, topic_id, record.count)
        return record

    def remove_mistake(self, question_id: str) -> None:
        if self.mistakes.pop(question_id, None) is None:
            return
        self._execute("DELETE FROM mistakes WHERE question_id = ?", (question_id,))

    def is_mistake(self, question_id: str) -> bool:
        return question_id in self.mistakes

    def get_mistake(self, question_id: str) -> Optional[MistakeRecord]:
        return self.mistakes.get(question_id)

    def list_mistakes(self) -> list[MistakeRecord]:
        """Mistakes ordered by wrong count (highest first), then most recent."""
        return sort_mistakes(self.mistakes.values())

    def clear_all_mistakes(self) -> None:
        self.mistakes = {}
        self._execute("DELETE FROM mistakes")

    # Bookmarks

    def toggle_bookmark(self, question: Question, topic_id: str) -> bool:
        """Flip the bookmark for a question. Returns True if it is now bookmarked."""
        question = copy.deepcopy(question)
        if question.id in self.bookmarks:
            del self.bookmarks[question.id]
            self._execute("DELETE FROM bookmarks WHERE question_id = ?", (question.id,))
            return False
        record = BookmarkRecord(
            question_id=question.id,
            question=question,
            topic_id=topic_id,
            added_at=self._now().isoformat(),
        )
        self.bookmarks[question.id] = record
        self._execute(
            "INSERT INTO bookmarks (question_id, topic_id, question_json, added_at) VALUES (?, ?, ?, ?)",
            (
                record.question_id, record.topic_id,
                json.dumps(question.to_dict(), ensure_ascii=False), record.added_at,
            ),
        )
        return True

    def is_bookmarked(self, question_id: str) -> bool:
        return question_id in self.bookmarks

    def list_bookmarks(self) -> list[BookmarkRecord]:
        return sorted(self.bookmarks.values(), key=lambda r: r.added_at, reverse=True)

    def clear_all_bookmarks(self) -> None:
        self.bookmarks = {}
        self._execute("DELETE FROM bookmarks")

"""Exam result history."""
import json
from typing import Optional

from civique_prep.db import get_connection
from civique_prep.models import ExamResult, Question, TopicScore, WrongQuestion


def save_exam_result(db_path: str, result: ExamResult) -> None:
    """Store a finished exam. Saving the same result twice keeps one row."""
    conn = get_connection(db_path)
    conn.execute(
        """INSERT OR IGNORE INTO exam_results
        (id, date, score, total, duration, topic_scores_json, wrong_questions_json)
        VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (
            result.id, result.date, result.score, result.total, result.duration,
            json.dumps({
                topic_id: {"correct": s.correct, "total": s.total}
                for topic_id, s in result.topic_scores.items()
            }),
            json.dumps([
                {
                    "question": w.question.to_dict(),
                    "userAnswer": w.user_answer,
                    "correctAnswer": w.correct_answer,
                    "topicId": w.topic_id,
                }
                for w in result.wrong_questions
            ], ensure_ascii=False),
        ),
    )
    conn.commit()
    conn.close()


def _row_to_result(row) -> ExamResult:
    topic_scores = {
        topic_id: TopicScore(correct=s["correct"], total=s["total"])
        for topic_id, s in json.loads(row["topic_scores_json"]).items()
    }
    wrong = tuple(
        WrongQuestion(
            question=Question.from_dict(w["question"]),
            user_answer=w["userAnswer"],
            correct_answer=w["correctAnswer"],
            topic_id=w["topicId"],
        )
        for w in json.loads(row["wrong_questions_json"])
    )
    return ExamResult(
        id=row["id"],
        date=row["date"],
        score=row["score"],
        total=row["total"],
        duration=row["duration"],
        topic_scores=topic_scores,
        wrong_questions=wrong,
    )


def get_exam_results(db_path: str, limit: Optional[int] = None) -> list[ExamResult]:
    """Past exams, newest first."""
    conn = get_connection(db_path)
    sql = "SELECT * FROM exam_results ORDER BY date DESC"
    params: tuple = ()
    if limit is not None:
        sql += " LIMIT ?"
        params = (limit,)
    rows = conn.execute(sql, params).fetchall()
    conn.close()
    return [_row_to_result(r) for r in rows]


def get_exam_stats(db_path: str) -> dict:
    results = get_exam_results(db_path)
    if not results:
        return {"attempts": 0, "best": 0, "average": 0.0, "passed": 0}
    percentages = [r.percentage for r in results]
    return {
        "attempts": len(results),
        "best": max(percentages),
        "average": round(sum(percentages) / len(percentages), 1),
        "passed": sum(1 for r in results if r.passed),
    }

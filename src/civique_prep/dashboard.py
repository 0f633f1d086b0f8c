"""Progress statistics and display helpers for results and the exam clock."""
from civique_prep.mistakes import SITUATION_TOPIC, get_question_kind
from civique_prep.models import ExamResult, WrongQuestion
from civique_prep.progress import UserProgressStore
from civique_prep.topic_progress import TopicProgressStore

TOPIC_NAMES = {
    "values": "Principes et valeurs",
    "institutions": "Système institutionnel",
    "rights": "Droits et devoirs",
    "history": "Histoire et culture",
    "society": "Société française",
    "situation": "Situations pratiques",
}

TIMER_WARNING_SECONDS = 5 * 60
TIMER_CRITICAL_SECONDS = 60


def get_topic_label(topic_id: str) -> str:
    return TOPIC_NAMES.get(topic_id, topic_id)


def format_time(seconds: int) -> str:
    """Clock display, e.g. 2700 -> '45:00'."""
    mins, secs = divmod(max(0, seconds), 60)
    return f"{mins:02d}:{secs:02d}"


def format_duration(seconds: int) -> str:
    mins, secs = divmod(seconds, 60)
    if mins == 0:
        return f"{secs} secondes"
    if secs == 0:
        return f"{mins} minutes"
    return f"{mins} min {secs} sec"


def get_timer_level(seconds: int) -> str:
    if seconds <= TIMER_CRITICAL_SECONDS:
        return "critical"
    elif seconds <= TIMER_WARNING_SECONDS:
        return "warning"
    return "normal"


def get_timer_color(seconds: int) -> str:
    return {"critical": "red", "warning": "yellow", "normal": "white"}[get_timer_level(seconds)]


def get_score_color(percentage: float) -> str:
    if percentage >= 80:
        return "green"
    elif percentage >= 60:
        return "yellow"
    return "red"


def get_topic_breakdown(result: ExamResult) -> list[dict]:
    """Per-topic scores for subject topics; situational questions are reported apart."""
    rows = []
    for topic_id, score in result.topic_scores.items():
        if topic_id == SITUATION_TOPIC:
            continue
        pct = round(score.correct / score.total * 100) if score.total else 0
        rows.append({
            "topic_id": topic_id,
            "name": get_topic_label(topic_id),
            "correct": score.correct,
            "total": score.total,
            "percentage": pct,
        })
    return rows


def group_wrong_by_topic(result: ExamResult) -> dict[str, list[WrongQuestion]]:
    grouped: dict[str, list[WrongQuestion]] = {}
    for wrong in result.wrong_questions:
        grouped.setdefault(wrong.topic_id, []).append(wrong)
    return grouped


def get_progress_overview(store: UserProgressStore, tracker: TopicProgressStore) -> dict:
    mistakes = list(store.mistakes.values())
    topics = [
        {
            "topic_id": record.topic_id,
            "name": get_topic_label(record.topic_id),
            "total_answered": record.total_answered,
            "correct_count": record.correct_count,
            "accuracy": record.accuracy,
        }
        for record in sorted(tracker.progress.values(), key=lambda r: r.topic_id)
    ]
    return {
        "mistakes_total": len(mistakes),
        "mistakes_choice": sum(1 for r in mistakes if get_question_kind(r.topic_id) == "choice"),
        "mistakes_situation": sum(1 for r in mistakes if get_question_kind(r.topic_id) == "situation"),
        "repeat_mistakes": sum(1 for r in mistakes if r.count >= 2),
        "bookmarks_total": len(store.bookmarks),
        "topics": topics,
    }

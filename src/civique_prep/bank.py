"""Question bank loading from JSON or YAML files."""
import json
import logging
from pathlib import Path

import yaml

from civique_prep.mistakes import SITUATION_TOPIC
from civique_prep.models import Question

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"
BANK_SUFFIXES = (".json", ".yaml", ".yml")


class QuestionBankError(Exception):
    """A question bank could not be read or holds no usable questions."""


def read_bank_file(file_path: Path) -> dict:
    suffix = file_path.suffix.lower()
    text = file_path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def parse_questions(payload) -> list[Question]:
    """Extract questions from a bank payload, skipping null or malformed entries."""
    if not isinstance(payload, dict) or not isinstance(payload.get("questions"), list):
        raise QuestionBankError("Bank payload has no 'questions' list")
    questions = []
    for index, raw in enumerate(payload["questions"]):
        try:
            questions.append(Question.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Skipping invalid question entry %d: %s", index, e)
    return questions


class QuestionBank:
    """Topic banks live in <content_dir>/topics/<topic>.json, situations in <content_dir>/situation.json."""

    def __init__(self, content_dir: Path | str = CONTENT_DIR):
        self.content_dir = Path(content_dir)

    def _find(self, stem: Path) -> Path:
        for suffix in BANK_SUFFIXES:
            candidate = stem.with_suffix(suffix)
            if candidate.exists():
                return candidate
        raise QuestionBankError(f"Question bank not found: {stem.name}")

    def _load(self, stem: Path) -> list[Question]:
        path = self._find(stem)
        try:
            payload = read_bank_file(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise QuestionBankError(f"Failed to read {path.name}: {e}") from e
        questions = parse_questions(payload)
        logger.debug("Loaded %d questions from %s", len(questions), path)
        return questions

    def list_topics(self) -> list[str]:
        topics_dir = self.content_dir / "topics"
        if not topics_dir.is_dir():
            return []
        return sorted({p.stem for p in topics_dir.iterdir() if p.suffix.lower() in BANK_SUFFIXES})

    def load_topic(self, topic_id: str) -> list[Question]:
        if topic_id == SITUATION_TOPIC:
            return self.load_situation()
        return self._load(self.content_dir / "topics" / topic_id)

    def load_situation(self) -> list[Question]:
        return self._load(self.content_dir / SITUATION_TOPIC)

"""Data classes for the exam-prep domain model."""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

PASS_PERCENTAGE = 80


@dataclass
class Choice:
    id: str
    text: str
    is_correct: bool = False
    text_zh: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Choice":
        return cls(
            id=str(data["id"]),
            text=str(data.get("text", "")),
            is_correct=bool(data.get("isCorrect", False)),
            text_zh=data.get("text_zh"),
        )

    def to_dict(self) -> dict:
        data = {"id": self.id, "text": self.text, "isCorrect": self.is_correct}
        if self.text_zh is not None:
            data["text_zh"] = self.text_zh
        return data


@dataclass
class Question:
    id: str
    stem: str
    choices: list[Choice]
    analysis: str = ""
    type: str = "single"
    difficulty: Optional[int] = None
    tags: list[str] = field(default_factory=list)
    stem_zh: Optional[str] = None
    analysis_zh: Optional[str] = None

    def correct_choice(self) -> Optional[Choice]:
        return next((c for c in self.choices if c.is_correct), None)

    def is_correct(self, choice_id: str) -> bool:
        choice = next((c for c in self.choices if c.id == choice_id), None)
        return choice is not None and choice.is_correct

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        """Build a question from the bank/storage JSON shape.

        Raises KeyError, TypeError or ValueError on malformed input.
        """
        if not isinstance(data, dict):
            raise TypeError(f"question entry must be an object, got {type(data).__name__}")
        choices = data["choices"]
        if not isinstance(choices, list):
            raise TypeError("choices must be a list")
        question_id = str(data["id"]).strip()
        if not question_id:
            raise ValueError("question id is empty")
        parsed_choices = [Choice.from_dict(c) for c in choices]
        if not any(c.is_correct for c in parsed_choices):
            raise ValueError(f"question {question_id} has no correct choice")
        return cls(
            id=question_id,
            stem=str(data["stem"]),
            choices=parsed_choices,
            analysis=str(data.get("analysis") or ""),
            type=str(data.get("type") or "single"),
            difficulty=data.get("difficulty"),
            tags=list(data.get("tags") or []),
            stem_zh=data.get("stem_zh"),
            analysis_zh=data.get("analysis_zh"),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "stem": self.stem,
            "choices": [c.to_dict() for c in self.choices],
            "analysis": self.analysis,
        }
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty
        if self.tags:
            data["tags"] = list(self.tags)
        if self.stem_zh is not None:
            data["stem_zh"] = self.stem_zh
        if self.analysis_zh is not None:
            data["analysis_zh"] = self.analysis_zh
        return data


@dataclass
class MistakeRecord:
    question_id: str
    question: Question
    topic_id: str
    count: int = 1
    last_wrong_at: str = ""


@dataclass
class BookmarkRecord:
    question_id: str
    question: Question
    topic_id: str
    added_at: str = ""


@dataclass
class TopicProgressRecord:
    topic_id: str
    total_answered: int = 0
    correct_count: int = 0
    last_practice_at: Optional[str] = None

    @property
    def accuracy(self) -> int:
        if self.total_answered == 0:
            return 0
        return round(self.correct_count / self.total_answered * 100)


@dataclass
class ExamQuestion:
    """A question drawn into a mock exam, tagged with the pool it came from."""
    question: Question
    topic_id: str

    @property
    def id(self) -> str:
        return self.question.id


@dataclass(frozen=True)
class TopicScore:
    correct: int = 0
    total: int = 0


@dataclass(frozen=True)
class WrongQuestion:
    question: Question
    user_answer: str
    correct_answer: str
    topic_id: str


@dataclass(frozen=True)
class ExamResult:
    id: str
    date: str
    score: int
    total: int
    duration: int  # seconds
    topic_scores: Mapping[str, TopicScore]
    wrong_questions: tuple[WrongQuestion, ...] = ()

    def __post_init__(self):
        # Read-only view over a private copy of the per-topic scores.
        object.__setattr__(self, "topic_scores", MappingProxyType(dict(self.topic_scores)))

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.score / self.total * 100)

    @property
    def passed(self) -> bool:
        return self.percentage >= PASS_PERCENTAGE

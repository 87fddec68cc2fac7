from __future__ import annotations

"""Storage keys and Pydantic models for every persisted document."""

from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationInfo,
    field_validator,
    model_validator,
)

from ..dates import ensure_aware

# --- Constants ---

KEYS = {
    "user_id": "skillTest_userId",
    "results": "testResults",
    "stats": "userStats",
    "review": "reviewNotes",
    "history": "learningHistories",
    "session": "skillTest_session",
}
BACKUP_PREFIX = "backup_"
LAST_BACKUP_KEY = "lastBackupDate"

POINTS_PER_CORRECT = 10
SUMMARY_LENGTH = 50

# Alias so a field can be named ``date`` and still be typed as one.
Day = date


def backup_key(key: str) -> str:
    return f"{BACKUP_PREFIX}{key}"


# --- Question input (not persisted by the engine) ---

class Option(BaseModel):
    id: str
    text: str


class Question(BaseModel):
    id: str = Field(min_length=1)
    category: str
    question: str
    options: List[Option] = Field(min_length=2)
    correct_answer: int
    explanation: str = ""

    @model_validator(mode="before")
    @classmethod
    def _option_id_to_index(cls, data: Any) -> Any:
        # Older question files name the correct option by id; store the index.
        if isinstance(data, dict) and isinstance(data.get("correct_answer"), str):
            ids = [o["id"] if isinstance(o, dict) else getattr(o, "id", None) for o in data.get("options", [])]
            if data["correct_answer"] in ids:
                data = {**data, "correct_answer": ids.index(data["correct_answer"])}
        return data

    @model_validator(mode="after")
    def _correct_in_range(self) -> "Question":
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(f"correct_answer {self.correct_answer} outside {len(self.options)} options")
        return self

    def answer_index(self, value: int | str | None) -> Optional[int]:
        """Normalize a selection (index or option id) to a 0-based index.

        ``None`` means the question was left unanswered.
        """
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError("boolean is not an answer")
        if isinstance(value, int):
            if 0 <= value < len(self.options):
                return value
            raise ValueError(f"answer index {value} outside {len(self.options)} options of {self.id}")
        for i, opt in enumerate(self.options):
            if opt.id == value:
                return i
        raise ValueError(f"unknown option id {value!r} for question {self.id}")


# --- Persisted documents ---

class QuestionAnswerAttempt(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    user_id: str
    category: str
    question_id: str = Field(min_length=1)
    question_summary: str = ""
    user_answer: Optional[int] = Field(default=None, ge=0)
    correct_answer: int = Field(ge=0)
    is_correct: bool
    time_spent: int = Field(default=0, ge=0)
    score: int = Field(ge=0)
    test_date: datetime

    @field_validator("test_date")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @model_validator(mode="after")
    def _correctness(self) -> "QuestionAnswerAttempt":
        if self.is_correct != (self.user_answer == self.correct_answer):
            raise ValueError("is_correct must equal user_answer == correct_answer")
        if self.is_correct and self.score <= 0:
            raise ValueError("a correct attempt must score points")
        if not self.is_correct and self.score != 0:
            raise ValueError("an incorrect attempt scores 0")
        return self


class TestSessionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    date: datetime
    results: List[QuestionAnswerAttempt] = Field(min_length=1)
    score: int = Field(ge=0)
    total: int = Field(ge=1)

    @field_validator("date")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @model_validator(mode="after")
    def _counts(self) -> "TestSessionRecord":
        if self.score != sum(1 for r in self.results if r.is_correct):
            raise ValueError("score must equal the number of correct results")
        if self.total != len(self.results):
            raise ValueError("total must equal the number of results")
        return self


class CategoryStats(BaseModel):
    total_questions: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    accuracy: float = Field(default=0.0, ge=0, le=100)


class AggregateStatistics(BaseModel):
    user_id: str = ""
    total_tests: int = Field(default=0, ge=0)
    total_questions: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    overall_accuracy: float = Field(default=0.0, ge=0, le=100)
    category_stats: Dict[str, CategoryStats] = Field(default_factory=dict)
    last_test_date: Optional[datetime] = None

    @field_validator("last_test_date")
    @classmethod
    def _aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v) if v is not None else None

    @model_validator(mode="after")
    def _correct_le_total(self) -> "AggregateStatistics":
        if self.correct_answers > self.total_questions:
            raise ValueError("correct_answers must be <= total_questions")
        return self

    @property
    def wrong_answers(self) -> int:
        return self.total_questions - self.correct_answers


class ReviewQueueEntry(BaseModel):
    question_id: str = Field(min_length=1)
    category: str
    question: str = ""
    wrong_count: int = Field(ge=1)
    added_date: datetime
    last_attempt_date: datetime

    @field_validator("added_date", "last_attempt_date")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class DailyLearningRecord(BaseModel):
    date: Day
    categories: List[str] = Field(default_factory=list)
    question_count: int = Field(default=0, ge=0)
    correct_count: int = Field(default=0, ge=0)
    correct_rate: float = Field(default=0.0, ge=0, le=100)

    @field_validator("correct_count")
    @classmethod
    def _c_le_q(cls, v: int, info: ValidationInfo) -> int:
        q = int(info.data.get("question_count", 0))
        if v > q:
            raise ValueError("correct_count must be <= question_count")
        return v


class ActiveSession(BaseModel):
    """Checkpoint of a quiz run that has not finished yet."""

    category: str
    mode: str = "learning"
    question_ids: List[str] = Field(default_factory=list)
    answers: Dict[str, Optional[int]] = Field(default_factory=dict)
    current_index: int = Field(default=0, ge=0)
    started_at: datetime

    @field_validator("started_at")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class BackupSlot(BaseModel):
    timestamp: datetime
    data: Any = None
    previous: Any = None


# --- Per-key document validators ---

def _unique_questions(entries: List[ReviewQueueEntry]) -> List[ReviewQueueEntry]:
    ids = [e.question_id for e in entries]
    if len(ids) != len(set(ids)):
        raise ValueError("review queue holds duplicate question ids")
    return entries


def _unique_days(records: List[DailyLearningRecord]) -> List[DailyLearningRecord]:
    days = [r.date for r in records]
    if len(days) != len(set(days)):
        raise ValueError("learning history holds duplicate dates")
    return records


DOCUMENTS: Dict[str, TypeAdapter] = {
    KEYS["user_id"]: TypeAdapter(Annotated[str, StringConstraints(min_length=1)]),
    KEYS["results"]: TypeAdapter(List[TestSessionRecord]),
    KEYS["stats"]: TypeAdapter(AggregateStatistics),
    KEYS["review"]: TypeAdapter(Annotated[List[ReviewQueueEntry], AfterValidator(_unique_questions)]),
    KEYS["history"]: TypeAdapter(Annotated[List[DailyLearningRecord], AfterValidator(_unique_days)]),
    KEYS["session"]: TypeAdapter(ActiveSession),
}

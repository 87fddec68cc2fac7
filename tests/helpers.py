from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Sequence

from skilltest import MemoryStore, QuizEngine
from skilltest.storage.schema import Option, Question, QuestionAnswerAttempt


def local(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute).astimezone()


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> datetime:
        self.now = value
        return value


def make_question(qid: str, category: str = "Finance", correct: int = 0, text: str | None = None) -> Question:
    return Question(
        id=qid,
        category=category,
        question=text or f"Question {qid} about {category}?",
        options=[Option(id=c, text=f"Option {c}") for c in "abcd"],
        correct_answer=correct,
    )


def make_engine(start: datetime | None = None, **kwargs) -> tuple[QuizEngine, FakeClock, MemoryStore]:
    clock = FakeClock(start or local(2025, 1, 3, 9, 0))
    backend = MemoryStore(quota_bytes=kwargs.pop("quota_bytes", None))
    return QuizEngine(backend, clock=clock, **kwargs), clock, backend


def answer(engine: QuizEngine, clock: FakeClock, question: Question, right: bool) -> QuestionAnswerAttempt:
    choice = question.correct_answer if right else (question.correct_answer + 1) % len(question.options)
    return engine.build_attempt(question, choice, time_spent=12, at=clock.advance(seconds=30))


def run_session(engine: QuizEngine, clock: FakeClock, plan: Sequence[tuple[Question, bool]]):
    attempts: List[QuestionAnswerAttempt] = [answer(engine, clock, q, ok) for q, ok in plan]
    return engine.record_session(attempts, completed_at=clock.advance(seconds=5))

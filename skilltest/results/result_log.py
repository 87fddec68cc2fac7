from __future__ import annotations

"""Result Log: append-only record of answered questions, grouped by session.

Attempts and sessions are never edited after they are written. The only
rewrite path is ``replace_sessions``, used by date-scoped deletion.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Iterator, List, Optional
from uuid import uuid4

from ..dates import Clock, DayLike, calendar_day, local_now, parse_day
from ..storage.durable import DurableStore
from ..storage.schema import (
    KEYS,
    POINTS_PER_CORRECT,
    SUMMARY_LENGTH,
    Question,
    QuestionAnswerAttempt,
    TestSessionRecord,
)

logger = logging.getLogger(__name__)


def summarize(text: str, length: int = SUMMARY_LENGTH) -> str:
    """Single-line question text cut to length characters."""
    flat = " ".join(str(text).split())
    if len(flat) <= length:
        return flat
    return flat[:length] + "..."


def chronological(sessions: Iterable[TestSessionRecord]) -> List[TestSessionRecord]:
    return sorted(sessions, key=lambda s: s.date)


def iter_attempts(sessions: Iterable[TestSessionRecord]) -> Iterator[QuestionAnswerAttempt]:
    """Every attempt, sessions oldest first, attempts in answer order."""
    for session in chronological(sessions):
        yield from sorted(session.results, key=lambda a: a.test_date)


def make_session(attempts: List[QuestionAnswerAttempt], completed_at: datetime) -> TestSessionRecord:
    return TestSessionRecord(
        id=f"test_{int(completed_at.timestamp() * 1000)}_{uuid4().hex[:6]}",
        date=completed_at,
        results=list(attempts),
        score=sum(1 for a in attempts if a.is_correct),
        total=len(attempts),
    )


class ResultLog:
    def __init__(
        self,
        store: DurableStore,
        *,
        clock: Clock = local_now,
        points_per_correct: int = POINTS_PER_CORRECT,
        summary_length: int = SUMMARY_LENGTH,
    ) -> None:
        self.store = store
        self.clock = clock
        self.points_per_correct = points_per_correct
        self.summary_length = summary_length

    def user_id(self) -> str:
        """Stable pseudo-identity for this store, created on first use."""
        uid = self.store.safe_read(KEYS["user_id"], None)
        if uid:
            return uid
        now = self.clock()
        uid = f"user_{int(now.timestamp() * 1000)}_{uuid4().hex[:9]}"
        if not self.store.safe_write(KEYS["user_id"], uid):
            logger.warning("user id could not be persisted; using a transient one")
        return uid

    def build_attempt(
        self,
        question: Question,
        user_answer: int | str | None,
        *,
        time_spent: int = 0,
        at: Optional[datetime] = None,
    ) -> QuestionAnswerAttempt:
        """Create the attempt for one submitted answer.

        ``user_answer`` may be an option index or an option id; it is stored
        as the 0-based index. ``None`` records an unanswered question.
        """
        answer = question.answer_index(user_answer)
        correct = answer == question.correct_answer
        return QuestionAnswerAttempt(
            id=uuid4().hex,
            user_id=self.user_id(),
            category=question.category,
            question_id=question.id,
            question_summary=summarize(question.question, self.summary_length),
            user_answer=answer,
            correct_answer=question.correct_answer,
            is_correct=correct,
            time_spent=max(0, int(time_spent)),
            score=self.points_per_correct if correct else 0,
            test_date=at or self.clock(),
        )

    def record_session(
        self,
        attempts: List[QuestionAnswerAttempt],
        *,
        completed_at: Optional[datetime] = None,
    ) -> Optional[TestSessionRecord]:
        """Append a finished run. Returns None if the log could not be written."""
        if not attempts:
            raise ValueError("a session needs at least one attempt")
        session = make_session(attempts, completed_at or self.clock())
        sessions = self.sessions()
        sessions.append(session)
        if not self.store.safe_write(KEYS["results"], sessions):
            logger.error("session %s was not saved", session.id)
            return None
        logger.info("saved session %s (%d/%d)", session.id, session.score, session.total)
        return session

    def sessions(self) -> List[TestSessionRecord]:
        return self.store.safe_read(KEYS["results"], [])

    def attempts(self) -> List[QuestionAnswerAttempt]:
        return list(iter_attempts(self.sessions()))

    def get_session_by_id(self, session_id: str) -> Optional[TestSessionRecord]:
        return next((s for s in self.sessions() if s.id == session_id), None)

    def get_attempts_by_category(self, category: str) -> List[QuestionAnswerAttempt]:
        return [a for a in self.attempts() if a.category == category]

    def get_attempts_by_calendar_date(self, day: DayLike) -> List[QuestionAnswerAttempt]:
        """Attempts answered on the given local day, whatever session they belong to."""
        target: date = parse_day(day)
        return [a for a in self.attempts() if calendar_day(a.test_date) == target]

    def replace_sessions(self, sessions: List[TestSessionRecord]) -> bool:
        return self.store.safe_write(KEYS["results"], sessions)

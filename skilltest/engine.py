from __future__ import annotations

"""QuizEngine: the one object a front end talks to.

Wires every component over a single ``DurableStore`` and runs the write
flow for a finished quiz run:

    Result Log -> Aggregate Statistics -> Review Queue -> Learning History

Two processes sharing one store race on these read-modify-write steps and
the last writer wins; no locking is attempted.
"""

import logging
from datetime import datetime
from typing import List, Optional

from .app.explain import trace as xtrace
from .config.config import EngineConfig
from .dates import Clock, DayLike, local_now, parse_day
from .history.learning_history import LearningHistory
from .maintenance.maintenance import Maintenance, WipeSummary, export_filename
from .results.active_session import ActiveSessionStore
from .results.result_log import ResultLog
from .review.review_queue import ReviewQueue
from .stats.stats import StatisticsStore
from .storage.backend import JsonFileStore, KeyValueStore, MemoryStore
from .storage.durable import DurableStore
from .storage.schema import (
    AggregateStatistics,
    DailyLearningRecord,
    Question,
    QuestionAnswerAttempt,
    ReviewQueueEntry,
    TestSessionRecord,
)

logger = logging.getLogger(__name__)


class QuizEngine:
    def __init__(
        self,
        backend: Optional[KeyValueStore] = None,
        *,
        clock: Clock = local_now,
        points_per_correct: int = 10,
        summary_length: int = 50,
        export_prefix: str = "test-results",
    ) -> None:
        self.clock = clock
        self.export_prefix = export_prefix
        self.store = DurableStore(backend if backend is not None else MemoryStore(), clock=clock)
        self.results = ResultLog(
            self.store, clock=clock, points_per_correct=points_per_correct, summary_length=summary_length
        )
        self.stats = StatisticsStore(self.store)
        self.review = ReviewQueue(self.store, self.results)
        self.history = LearningHistory(self.store, self.results, clock=clock)
        self.active = ActiveSessionStore(self.store, clock=clock)
        self.maintenance = Maintenance(self.store, self.results, self.stats, self.review, self.history)
        self._pending: List[QuestionAnswerAttempt] = []

    @classmethod
    def from_config(cls, cfg: EngineConfig, *, clock: Clock = local_now) -> "QuizEngine":
        if cfg.storage.backend == "memory":
            backend: KeyValueStore = MemoryStore()
        else:
            backend = JsonFileStore(cfg.storage.path)
        return cls(
            backend,
            clock=clock,
            points_per_correct=cfg.attempts.points_per_correct,
            summary_length=cfg.attempts.summary_length,
            export_prefix=cfg.export.filename_prefix,
        )

    # --- writing results ---

    def user_id(self) -> str:
        return self.results.user_id()

    def build_attempt(
        self,
        question: Question,
        user_answer: int | str | None,
        *,
        time_spent: int = 0,
        at: Optional[datetime] = None,
    ) -> QuestionAnswerAttempt:
        return self.results.build_attempt(question, user_answer, time_spent=time_spent, at=at)

    def record_attempt(self, attempt: QuestionAnswerAttempt) -> int:
        """Add an answered question to the run in progress; returns the run length."""
        self._pending.append(attempt)
        return len(self._pending)

    def pending_attempts(self) -> List[QuestionAnswerAttempt]:
        return list(self._pending)

    def finish_session(self, *, completed_at: Optional[datetime] = None) -> Optional[TestSessionRecord]:
        """Save the run built with ``record_attempt``. The buffer is kept if saving fails."""
        if not self._pending:
            return None
        session = self.record_session(self._pending, completed_at=completed_at)
        if session is not None:
            self._pending = []
        return session

    def record_session(
        self,
        attempts: List[QuestionAnswerAttempt],
        *,
        completed_at: Optional[datetime] = None,
    ) -> Optional[TestSessionRecord]:
        """Save a finished run and update everything derived from it.

        Returns None when the Result Log could not be written; derived
        documents are then left as they were.
        """
        session = self.results.record_session(attempts, completed_at=completed_at)
        if session is None:
            return None
        uid = self.results.user_id()
        if not self.stats.record(session, uid):
            logger.error("statistics not updated for session %s", session.id)
        if not self.review.on_session_recorded(session):
            logger.error("review queue not updated for session %s", session.id)
        if not self.history.record_session(session):
            logger.error("learning history not updated for session %s", session.id)
        self.active.clear()
        xtrace(
            "session_recorded",
            {"id": session.id, "date": session.date, "score": session.score, "total": session.total},
        )
        return session

    # --- reads ---

    def get_statistics(self) -> AggregateStatistics:
        return self.stats.get(self.results.user_id())

    def get_session_by_id(self, session_id: str) -> Optional[TestSessionRecord]:
        return self.results.get_session_by_id(session_id)

    def get_attempts_by_category(self, category: str) -> List[QuestionAnswerAttempt]:
        return self.results.get_attempts_by_category(category)

    def get_attempts_by_calendar_date(self, day: DayLike) -> List[QuestionAnswerAttempt]:
        return self.results.get_attempts_by_calendar_date(day)

    def review_entries(self, category: Optional[str] = None) -> List[ReviewQueueEntry]:
        if category is None:
            return self.review.list_all()
        return self.review.list_by_category(category)

    def remove_review_entry(self, question_id: str) -> bool:
        return self.review.remove_entry(question_id)

    def get_consecutive_days(self) -> int:
        return self.history.get_consecutive_days()

    def get_daily_record(self, day: DayLike) -> Optional[DailyLearningRecord]:
        return self.history.get_daily_record(day)

    # --- maintenance ---

    def wipe_all(self) -> WipeSummary:
        self._pending = []
        summary = self.maintenance.wipe_all()
        xtrace("wiped", {"sessions": summary.sessions, "attempts": summary.attempts})
        return summary

    def delete_by_calendar_date(self, day: DayLike) -> int:
        removed = self.maintenance.delete_by_calendar_date(day)
        xtrace("date_deleted", {"day": parse_day(day), "attempts": removed})
        return removed

    def export_csv(self) -> str:
        return self.maintenance.export_csv()

    def export_filename(self, day: Optional[DayLike] = None) -> str:
        return export_filename(day if day is not None else self.clock(), self.export_prefix)

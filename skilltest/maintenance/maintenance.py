from __future__ import annotations

"""Destructive maintenance and CSV export.

Callers are expected to have confirmed with the user before calling any of
the deleting operations; nothing here prompts.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List

import pandas as pd

from ..dates import DayLike, calendar_day, parse_day
from ..errors import StorageError
from ..history.learning_history import LearningHistory
from ..results.result_log import ResultLog, iter_attempts
from ..review.review_queue import ReviewQueue
from ..stats.stats import StatisticsStore
from ..storage.durable import DurableStore
from ..storage.schema import KEYS, TestSessionRecord

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "User ID",
    "Date",
    "Category",
    "Question ID",
    "Question Summary",
    "Correct Answer",
    "Chosen Answer",
    "Result",
    "Time Spent (s)",
    "Score",
    "Overall Accuracy",
]


@dataclass(frozen=True)
class WipeSummary:
    sessions: int
    attempts: int
    review_entries: int
    history_days: int

    def describe(self) -> str:
        return (
            f"Deleted {self.sessions} tests ({self.attempts} answers), "
            f"{self.review_entries} review entries and {self.history_days} days of history."
        )


def export_filename(day: DayLike, prefix: str = "test-results") -> str:
    return f"{prefix}_{parse_day(day).isoformat()}.csv"


def _one_line(text: str) -> str:
    return " ".join(str(text).split())


def _trim_session(session: TestSessionRecord, day: date) -> TestSessionRecord | None:
    keep = [a for a in session.results if calendar_day(a.test_date) != day]
    if len(keep) == len(session.results):
        return session
    if not keep:
        return None
    return TestSessionRecord(
        id=session.id,
        date=session.date,
        results=keep,
        score=sum(1 for a in keep if a.is_correct),
        total=len(keep),
    )


class Maintenance:
    def __init__(
        self,
        store: DurableStore,
        results: ResultLog,
        stats: StatisticsStore,
        review: ReviewQueue,
        history: LearningHistory,
    ) -> None:
        self.store = store
        self.results = results
        self.stats = stats
        self.review = review
        self.history = history

    def wipe_all(self) -> WipeSummary:
        """Delete every quiz document and its backup in one store call."""
        sessions = self.results.sessions()
        summary = WipeSummary(
            sessions=len(sessions),
            attempts=sum(s.total for s in sessions),
            review_entries=len(self.review.list_all()),
            history_days=len(self.history.all_records()),
        )
        keys = [KEYS["results"], KEYS["stats"], KEYS["review"], KEYS["history"], KEYS["session"]]
        if not self.store.delete(*keys):
            raise StorageError("wipe failed; no data was removed")
        logger.warning("wiped all data: %s", summary.describe())
        return summary

    def clear_selected(
        self,
        *,
        results: bool = False,
        stats: bool = False,
        review: bool = False,
        history: bool = False,
        session: bool = False,
        user_id: bool = False,
    ) -> List[str]:
        """Delete the chosen documents; returns labels of what was cleared.

        Clearing the results also clears the review queue and learning
        history, which are built from them. Statistics are recomputed from
        whatever log remains whenever results or statistics are cleared.
        """
        if results:
            review = history = True
        chosen = []
        if results:
            chosen.append((KEYS["results"], f"test results ({sum(s.total for s in self.results.sessions())} answers)"))
        if stats:
            chosen.append((KEYS["stats"], "statistics"))
        if review:
            chosen.append((KEYS["review"], f"review queue ({len(self.review.list_all())} entries)"))
        if history:
            chosen.append((KEYS["history"], f"learning history ({len(self.history.all_records())} days)"))
        if session:
            chosen.append((KEYS["session"], "session in progress"))
        if user_id:
            chosen.append((KEYS["user_id"], "user id"))
        if not chosen:
            return []
        if not self.store.delete(*(k for k, _ in chosen)):
            raise StorageError("selective delete failed; no data was removed")
        if results or stats:
            if self.stats.rebuild(self.results.sessions(), self.results.user_id()) is None:
                logger.error("statistics were not rebuilt after a selective delete")
        return [label for _, label in chosen]

    def delete_by_calendar_date(self, day: DayLike) -> int:
        """Remove every attempt answered on day and rebuild what derives from them.

        Returns the number of attempts removed; 0 leaves the store untouched.
        """
        target = parse_day(day)
        sessions = self.results.sessions()
        kept: List[TestSessionRecord] = []
        for s in sessions:
            trimmed = _trim_session(s, target)
            if trimmed is not None:
                kept.append(trimmed)
        removed = sum(s.total for s in sessions) - sum(s.total for s in kept)
        if removed == 0:
            return 0

        if not self.results.replace_sessions(kept):
            raise StorageError(f"could not rewrite the result log for {target.isoformat()}")
        if not self.history.remove_day(target):
            logger.error("history record for %s was not removed", target.isoformat())
        if self.stats.rebuild(kept, self.results.user_id()) is None:
            logger.error("statistics were not rebuilt after deleting %s", target.isoformat())
        logger.warning("deleted %d answers from %s", removed, target.isoformat())
        return removed

    def export_csv(self) -> str:
        """One row per attempt, oldest first, with the current overall accuracy."""
        overall = f"{self.stats.get().overall_accuracy:.1f}%"
        rows = [
            [
                a.user_id,
                a.test_date.isoformat(),
                _one_line(a.category),
                a.question_id,
                _one_line(a.question_summary),
                a.correct_answer,
                "" if a.user_answer is None else a.user_answer,
                "correct" if a.is_correct else "incorrect",
                a.time_spent,
                a.score,
                overall,
            ]
            for a in iter_attempts(self.results.sessions())
        ]
        df = pd.DataFrame(rows, columns=CSV_HEADERS)
        return df.to_csv(index=False, lineterminator="\n")

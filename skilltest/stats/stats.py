from __future__ import annotations

"""Aggregate statistics: incremental updates and full rebuild from the log.

Both paths fold the same ``apply_attempt`` step, so for any log the stored
statistics equal ``recompute_from_log`` of that log. Deletions never
decrement counters; they trigger a rebuild instead.
"""

import logging
from typing import Iterable, Optional

from ..results.result_log import chronological
from ..storage.durable import DurableStore
from ..storage.schema import (
    KEYS,
    AggregateStatistics,
    CategoryStats,
    QuestionAnswerAttempt,
    TestSessionRecord,
)

logger = logging.getLogger(__name__)


def accuracy(correct: int, total: int) -> float:
    """Percentage in 0..100; 0.0 when nothing was asked."""
    if total <= 0:
        return 0.0
    return correct / total * 100


def empty_stats(user_id: str = "") -> AggregateStatistics:
    return AggregateStatistics(user_id=user_id)


def apply_attempt(stats: AggregateStatistics, attempt: QuestionAnswerAttempt) -> AggregateStatistics:
    """Return stats with one more answered question. The input is not modified."""
    hit = 1 if attempt.is_correct else 0
    buckets = dict(stats.category_stats)
    bucket = buckets.get(attempt.category, CategoryStats())
    asked = bucket.total_questions + 1
    right = bucket.correct_answers + hit
    buckets[attempt.category] = CategoryStats(total_questions=asked, correct_answers=right, accuracy=accuracy(right, asked))

    total = stats.total_questions + 1
    correct = stats.correct_answers + hit
    last = stats.last_test_date
    if last is None or attempt.test_date > last:
        last = attempt.test_date
    return stats.model_copy(
        update={
            "total_questions": total,
            "correct_answers": correct,
            "overall_accuracy": accuracy(correct, total),
            "category_stats": buckets,
            "last_test_date": last,
        }
    )


def apply_session(stats: AggregateStatistics, session: TestSessionRecord) -> AggregateStatistics:
    out = stats.model_copy(update={"total_tests": stats.total_tests + 1})
    for attempt in sorted(session.results, key=lambda a: a.test_date):
        out = apply_attempt(out, attempt)
    return out


def recompute_from_log(sessions: Iterable[TestSessionRecord], user_id: str = "") -> AggregateStatistics:
    """Rebuild statistics from scratch, oldest session first."""
    stats = empty_stats(user_id)
    for session in chronological(sessions):
        stats = apply_session(stats, session)
    return stats


def format_summary(stats: AggregateStatistics) -> str:
    """Return a human-readable summary of stats."""
    lines = [
        f"Tests: {stats.total_tests}",
        f"Total: {stats.correct_answers}/{stats.total_questions} correct ({stats.overall_accuracy:.1f}%)",
    ]
    for name in sorted(stats.category_stats):
        b = stats.category_stats[name]
        lines.append(f"{name}: {b.correct_answers}/{b.total_questions} ({b.accuracy:.1f}%)")
    if stats.last_test_date is not None:
        lines.append(f"Last test: {stats.last_test_date.strftime('%Y-%m-%d %H:%M')}")
    return "\n".join(lines)


class StatisticsStore:
    def __init__(self, store: DurableStore) -> None:
        self.store = store

    def get(self, user_id: str = "") -> AggregateStatistics:
        return self.store.safe_read(KEYS["stats"], empty_stats(user_id))

    def record(self, session: TestSessionRecord, user_id: str = "") -> bool:
        stats = self.get(user_id)
        if not stats.user_id and user_id:
            stats = stats.model_copy(update={"user_id": user_id})
        return self.store.safe_write(KEYS["stats"], apply_session(stats, session))

    def rebuild(self, sessions: Iterable[TestSessionRecord], user_id: str = "") -> Optional[AggregateStatistics]:
        stats = recompute_from_log(sessions, user_id)
        if not self.store.safe_write(KEYS["stats"], stats):
            logger.error("rebuilt statistics could not be saved")
            return None
        return stats

from __future__ import annotations

"""Learning history: one record per local calendar day, plus streaks.

Day records are always rebuilt from the Result Log's attempts for that day;
nothing here keeps running counters of its own.
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from ..dates import Clock, DayLike, calendar_day, local_now, parse_day
from ..results.result_log import ResultLog
from ..storage.durable import DurableStore
from ..storage.schema import KEYS, DailyLearningRecord, QuestionAnswerAttempt, TestSessionRecord
from ..stats.stats import accuracy

logger = logging.getLogger(__name__)


def build_record(day: date, attempts: Iterable[QuestionAnswerAttempt]) -> Optional[DailyLearningRecord]:
    """Summarize one day's attempts; None when there are none."""
    attempts = list(attempts)
    if not attempts:
        return None
    categories: List[str] = []
    for a in attempts:
        if a.category not in categories:
            categories.append(a.category)
    correct = sum(1 for a in attempts if a.is_correct)
    return DailyLearningRecord(
        date=day,
        categories=categories,
        question_count=len(attempts),
        correct_count=correct,
        correct_rate=accuracy(correct, len(attempts)),
    )


def consecutive_days(days: Iterable[date], today: date) -> int:
    """Length of the run of active days ending today (0 if today is idle)."""
    active = set(days)
    count = 0
    cursor = today
    while cursor in active:
        count += 1
        cursor -= timedelta(days=1)
    return count


class LearningHistory:
    def __init__(self, store: DurableStore, results: ResultLog, *, clock: Clock = local_now) -> None:
        self.store = store
        self.results = results
        self.clock = clock

    def all_records(self) -> List[DailyLearningRecord]:
        return sorted(self.store.safe_read(KEYS["history"], []), key=lambda r: r.date)

    def get_daily_record(self, day: DayLike) -> Optional[DailyLearningRecord]:
        target = parse_day(day)
        return next((r for r in self.all_records() if r.date == target), None)

    def _recomputed(self, records: List[DailyLearningRecord], days: Iterable[date]) -> List[DailyLearningRecord]:
        by_day: Dict[date, DailyLearningRecord] = {r.date: r for r in records}
        attempts = self.results.attempts()
        for day in days:
            record = build_record(day, (a for a in attempts if calendar_day(a.test_date) == day))
            if record is None:
                by_day.pop(day, None)
            else:
                by_day[day] = record
        return [by_day[d] for d in sorted(by_day)]

    def recompute_day(self, day: DayLike) -> Optional[DailyLearningRecord]:
        """Rebuild one day's record from the log and save it."""
        target = parse_day(day)
        records = self._recomputed(self.all_records(), [target])
        if not self.store.safe_write(KEYS["history"], records):
            logger.error("learning history for %s was not saved", target.isoformat())
        return next((r for r in records if r.date == target), None)

    def record_session(self, session: TestSessionRecord) -> bool:
        """Refresh every day the session touched (two days if it spans midnight)."""
        days = sorted({calendar_day(a.test_date) for a in session.results})
        records = self._recomputed(self.all_records(), days)
        ok = self.store.safe_write(KEYS["history"], records)
        if ok:
            logger.debug("learning history updated for %s", ", ".join(d.isoformat() for d in days))
        return ok

    def remove_day(self, day: DayLike) -> bool:
        target = parse_day(day)
        records = self.all_records()
        kept = [r for r in records if r.date != target]
        if len(kept) == len(records):
            return True
        return self.store.safe_write(KEYS["history"], kept)

    def get_consecutive_days(self, today: Optional[DayLike] = None) -> int:
        day = parse_day(today) if today is not None else calendar_day(self.clock())
        return consecutive_days((r.date for r in self.all_records()), day)

    def get_month(self, year: int, month: int) -> List[DailyLearningRecord]:
        return [r for r in self.all_records() if r.date.year == year and r.date.month == month]

    def month_summary(self, year: int, month: int) -> Dict[str, float]:
        """Study days, questions and correct answers for one month."""
        records = self.get_month(year, month)
        questions = sum(r.question_count for r in records)
        correct = sum(r.correct_count for r in records)
        return {
            "study_days": len(records),
            "questions": questions,
            "correct": correct,
            "correct_rate": accuracy(correct, questions),
        }

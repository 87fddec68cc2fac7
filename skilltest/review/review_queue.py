from __future__ import annotations

"""Review queue: the questions whose latest attempt was wrong.

A miss adds the question (or bumps its wrong count); a later correct answer
removes the entry entirely rather than paying the count down. "Later" is by
answer time, so a run saved late with older timestamps cannot overrule a
newer answer.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..results.result_log import ResultLog
from ..storage.durable import DurableStore
from ..storage.schema import KEYS, QuestionAnswerAttempt, ReviewQueueEntry, TestSessionRecord

logger = logging.getLogger(__name__)


def apply_attempt(
    entries: List[ReviewQueueEntry],
    attempt: QuestionAnswerAttempt,
    *,
    newest_seen: Optional[datetime] = None,
) -> List[ReviewQueueEntry]:
    """Return the queue after one attempt. The input list is not modified.

    An attempt older than ``newest_seen`` or than the entry's
    ``last_attempt_date`` leaves the queue as it was.
    """
    existing = next((e for e in entries if e.question_id == attempt.question_id), None)
    known = [d for d in (newest_seen, existing.last_attempt_date if existing else None) if d is not None]
    if known and attempt.test_date < max(known):
        return list(entries)
    others = [e for e in entries if e.question_id != attempt.question_id]
    if attempt.is_correct:
        return others
    if existing is None:
        entry = ReviewQueueEntry(
            question_id=attempt.question_id,
            category=attempt.category,
            question=attempt.question_summary,
            wrong_count=1,
            added_date=attempt.test_date,
            last_attempt_date=attempt.test_date,
        )
    else:
        entry = existing.model_copy(
            update={"wrong_count": existing.wrong_count + 1, "last_attempt_date": attempt.test_date}
        )
    return others + [entry]


def display_order(entries: Iterable[ReviewQueueEntry]) -> List[ReviewQueueEntry]:
    """Group by category (A→Z); newest miss first within a group."""
    by_recent = sorted(entries, key=lambda e: e.question_id)
    by_recent = sorted(by_recent, key=lambda e: e.last_attempt_date, reverse=True)
    return sorted(by_recent, key=lambda e: e.category)


class ReviewQueue:
    def __init__(self, store: DurableStore, results: Optional[ResultLog] = None) -> None:
        self.store = store
        self.results = results

    def _load(self) -> List[ReviewQueueEntry]:
        return self.store.safe_read(KEYS["review"], [])

    def _newest_answers(self, *, exclude: str) -> Dict[str, datetime]:
        """Latest logged answer time per question, ignoring session ``exclude``."""
        newest: Dict[str, datetime] = {}
        if self.results is None:
            return newest
        for s in self.results.sessions():
            if s.id == exclude:
                continue
            for a in s.results:
                if a.question_id not in newest or a.test_date > newest[a.question_id]:
                    newest[a.question_id] = a.test_date
        return newest

    def on_attempt_recorded(self, attempt: QuestionAnswerAttempt) -> bool:
        return self.store.safe_write(KEYS["review"], apply_attempt(self._load(), attempt))

    def on_session_recorded(self, session: TestSessionRecord) -> bool:
        """Apply a whole session's attempts with one read and one write."""
        entries = self._load()
        newest = self._newest_answers(exclude=session.id)
        for attempt in sorted(session.results, key=lambda a: a.test_date):
            entries = apply_attempt(entries, attempt, newest_seen=newest.get(attempt.question_id))
        ok = self.store.safe_write(KEYS["review"], entries)
        if ok:
            logger.info("review queue now holds %d questions", len(entries))
        return ok

    def list_all(self) -> List[ReviewQueueEntry]:
        return display_order(self._load())

    def list_by_category(self, category: str) -> List[ReviewQueueEntry]:
        return [e for e in self.list_all() if e.category == category]

    def count_by_category(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for e in self.list_all():
            counts[e.category] = counts.get(e.category, 0) + 1
        return counts

    def question_ids(self) -> List[str]:
        return [e.question_id for e in self.list_all()]

    def get(self, question_id: str) -> ReviewQueueEntry | None:
        return next((e for e in self._load() if e.question_id == question_id), None)

    def remove_entry(self, question_id: str) -> bool:
        """Drop a question on the learner's request. False if it was not queued."""
        entries = self._load()
        kept = [e for e in entries if e.question_id != question_id]
        if len(kept) == len(entries):
            return False
        return self.store.safe_write(KEYS["review"], kept)

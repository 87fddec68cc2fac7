from __future__ import annotations

"""Checkpoint of the quiz run in progress, so a reload can resume it."""

from typing import List, Optional

from ..dates import Clock, local_now
from ..storage.durable import DurableStore
from ..storage.schema import KEYS, ActiveSession


class ActiveSessionStore:
    def __init__(self, store: DurableStore, *, clock: Clock = local_now) -> None:
        self.store = store
        self.clock = clock

    def start(self, category: str, question_ids: List[str], *, mode: str = "learning") -> Optional[ActiveSession]:
        session = ActiveSession(category=category, mode=mode, question_ids=list(question_ids), started_at=self.clock())
        return session if self.save(session) else None

    def save(self, session: ActiveSession) -> bool:
        return self.store.safe_write(KEYS["session"], session)

    def get(self) -> Optional[ActiveSession]:
        return self.store.safe_read(KEYS["session"], None)

    def answer(self, question_id: str, answer: Optional[int]) -> Optional[ActiveSession]:
        """Record one answer and advance the cursor; None if nothing is in progress."""
        current = self.get()
        if current is None:
            return None
        answers = {**current.answers, question_id: answer}
        updated = current.model_copy(
            update={"answers": answers, "current_index": min(len(answers), len(current.question_ids))}
        )
        return updated if self.save(updated) else None

    def clear(self) -> bool:
        return self.store.delete(KEYS["session"])

from __future__ import annotations

"""Flatten the Result Log into a typed pandas DataFrame, one row per attempt."""

from typing import Iterable

import pandas as pd

from ..dates import calendar_day
from ..results.result_log import chronological
from ..storage.schema import TestSessionRecord

ATTEMPT_DTYPES = {
    "session_id": "string",
    "attempt_id": "string",
    # timezone-aware UTC timestamps
    "test_date": pd.DatetimeTZDtype(tz="UTC"),
    "day": "string",
    "category": "category",
    "question_id": "string",
    "is_correct": "boolean",
    "time_spent": "UInt32",
    "score": "UInt16",
}


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in ATTEMPT_DTYPES.items()})


def attempts_frame(sessions: Iterable[TestSessionRecord]) -> pd.DataFrame:
    """Rows sorted by (test_date, session order); ``day`` is the local calendar day."""
    rows = [
        {
            "session_id": s.id,
            "attempt_id": a.id,
            "test_date": a.test_date,
            "day": calendar_day(a.test_date).isoformat(),
            "category": a.category,
            "question_id": a.question_id,
            "is_correct": a.is_correct,
            "time_spent": a.time_spent,
            "score": a.score,
        }
        for s in chronological(sessions)
        for a in s.results
    ]
    if not rows:
        return _empty_df()
    df = pd.DataFrame(rows)
    df["test_date"] = pd.to_datetime(df["test_date"], utc=True)
    for col, dt in ATTEMPT_DTYPES.items():
        df[col] = df[col].astype(dt)
    return df.sort_values("test_date", kind="stable").reset_index(drop=True)[list(ATTEMPT_DTYPES)]

from __future__ import annotations

"""Smoothing utilities (EWMA by day)."""

import pandas as pd


def ewma_by_day(daily: pd.DataFrame, value_col: str = "correct_rate", span: int = 7) -> pd.DataFrame:
    """Return a copy of a ``daily_summary`` table with f"{value_col}_smooth" added.

    Rows are smoothed in day order; gaps between active days are not filled.
    """
    g = daily.sort_values("day").copy()
    g[f"{value_col}_smooth"] = g[value_col].astype("float64").ewm(span=span).mean()
    return g.reset_index(drop=True)

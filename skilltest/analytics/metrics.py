from __future__ import annotations

"""Per-category and per-day accuracy tables."""

import numpy as np
import pandas as pd


def _rate(correct: pd.Series, total: pd.Series) -> np.ndarray:
    # 0 rather than NaN for empty groups
    c = correct.to_numpy(dtype="float64")
    t = total.to_numpy(dtype="float64")
    return np.divide(c * 100.0, t, out=np.zeros_like(c), where=t > 0)


def category_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Columns: questions, correct, accuracy (0..100), mean_time_s; indexed by category."""
    cols = ["questions", "correct", "accuracy", "mean_time_s"]
    if df.empty:
        return pd.DataFrame(columns=cols, index=pd.Index([], name="category"))
    g = df.assign(hit=df["is_correct"].astype("int64")).groupby("category", observed=True)
    out = pd.DataFrame(
        {
            "questions": g.size(),
            "correct": g["hit"].sum(),
            "mean_time_s": g["time_spent"].mean().astype("float64"),
        }
    )
    out["accuracy"] = _rate(out["correct"], out["questions"])
    return out[cols].sort_index()


def daily_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Columns: day, questions, correct, correct_rate; one row per active day."""
    cols = ["day", "questions", "correct", "correct_rate"]
    if df.empty:
        return pd.DataFrame(columns=cols)
    g = df.assign(hit=df["is_correct"].astype("int64")).groupby("day", observed=True)
    out = pd.DataFrame({"questions": g.size(), "correct": g["hit"].sum()}).reset_index()
    out["correct_rate"] = _rate(out["correct"], out["questions"])
    return out.sort_values("day").reset_index(drop=True)[cols]

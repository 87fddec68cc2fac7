from .stats import (
    StatisticsStore,
    accuracy,
    apply_attempt,
    apply_session,
    empty_stats,
    format_summary,
    recompute_from_log,
)

__all__ = [
    "StatisticsStore",
    "accuracy",
    "apply_attempt",
    "apply_session",
    "empty_stats",
    "format_summary",
    "recompute_from_log",
]

from .prepare import ATTEMPT_DTYPES, attempts_frame
from .metrics import category_summary, daily_summary
from .smoothing import ewma_by_day
from .export import export_ndjson, export_parquet

__all__ = [
    "ATTEMPT_DTYPES",
    "attempts_frame",
    "category_summary",
    "daily_summary",
    "ewma_by_day",
    "export_ndjson",
    "export_parquet",
]

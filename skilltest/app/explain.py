from __future__ import annotations

"""Explain Mode: one line per engine milestone.

``--explain`` on the CLI switches it on. Lines read
``[EXPLAIN] <event> :: <compact json>`` with keys sorted and dates in ISO
form, so they can be grepped or diffed between runs.
"""

import json
import sys
from datetime import date
from typing import Any, Dict, Optional, TextIO

_ENABLED = False
_STREAM: Optional[TextIO] = None


def enable(flag: bool = True, *, stream: Optional[TextIO] = None) -> None:
    """Turn tracing on or off; ``stream`` defaults to the current stdout."""
    global _ENABLED, _STREAM
    _ENABLED = bool(flag)
    _STREAM = stream


def enabled() -> bool:
    return _ENABLED


def _encode(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _ENABLED:
        return
    body = json.dumps(payload or {}, separators=(",", ":"), sort_keys=True, default=_encode)
    print(f"[EXPLAIN] {event} :: {body}", file=_STREAM or sys.stdout)

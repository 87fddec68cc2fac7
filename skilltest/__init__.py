"""skilltest package initialization.

Local persistence and statistics engine for a multiple-choice training quiz.
The usual entry point is :class:`skilltest.engine.QuizEngine`.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .engine import QuizEngine
from .storage import DurableStore, JsonFileStore, MemoryStore

__all__ = ["__version__", "QuizEngine", "DurableStore", "JsonFileStore", "MemoryStore"]

from .backend import KeyValueStore, MemoryStore, JsonFileStore
from .durable import DurableStore
from .schema import (
    KEYS,
    BACKUP_PREFIX,
    LAST_BACKUP_KEY,
    Option,
    Question,
    QuestionAnswerAttempt,
    TestSessionRecord,
    CategoryStats,
    AggregateStatistics,
    ReviewQueueEntry,
    DailyLearningRecord,
    ActiveSession,
    BackupSlot,
)

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "DurableStore",
    "KEYS",
    "BACKUP_PREFIX",
    "LAST_BACKUP_KEY",
    "Option",
    "Question",
    "QuestionAnswerAttempt",
    "TestSessionRecord",
    "CategoryStats",
    "AggregateStatistics",
    "ReviewQueueEntry",
    "DailyLearningRecord",
    "ActiveSession",
    "BackupSlot",
]

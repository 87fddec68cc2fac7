from __future__ import annotations

"""Exception types raised by skilltest."""


class SkillTestError(Exception):
    """Base class for package errors."""


class StorageError(SkillTestError):
    """A backend could not complete a read or write."""


class StorageQuotaError(StorageError):
    """The backend refused a write because it is full."""


class ConfigError(SkillTestError):
    """Configuration file missing or malformed."""

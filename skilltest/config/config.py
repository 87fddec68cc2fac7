from __future__ import annotations

"""Configuration loading and validation for skilltest.

This module loads YAML configuration, applies defaults, and validates the
result into an ``EngineConfig``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..errors import ConfigError

logger = logging.getLogger(__name__)

ALLOWED_BACKENDS = {"json", "memory"}
ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class StorageConfig(BaseModel):
    backend: str = "json"
    path: Path = Path("./skilltest_data.json")


class AttemptsConfig(BaseModel):
    points_per_correct: int = Field(10, gt=0)
    summary_length: int = Field(50, gt=0)


class ExportConfig(BaseModel):
    filename_prefix: str = Field("test-results", min_length=1)


class AnalyticsConfig(BaseModel):
    """smoothing_span: EWMA span in days (>1) for the daily accuracy trend."""

    smoothing_span: int = Field(7, gt=1)


class LoggingConfig(BaseModel):
    level: str = "WARNING"


class EngineConfig(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    attempts: AttemptsConfig = Field(default_factory=AttemptsConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must hold a mapping")
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def validate_config(cfg: Dict[str, Any]) -> EngineConfig:
    """Apply defaults and validate configuration values.

    Unknown enum values fall back to their defaults with a warning; values
    of the wrong type or range raise ``ConfigError``.
    """
    cfg = dict(cfg or {})
    storage = dict(cfg.get("storage") or {})
    log_cfg = dict(cfg.get("logging") or {})

    backend = storage.get("backend", "json")
    if backend not in ALLOWED_BACKENDS:
        logger.warning("Unsupported storage backend '%s', using 'json'.", backend)
        storage["backend"] = "json"

    level = str(log_cfg.get("level", "WARNING")).upper()
    if level not in ALLOWED_LOG_LEVELS:
        logger.warning("Unsupported log level '%s', using 'WARNING'.", level)
        level = "WARNING"
    log_cfg["level"] = level

    cfg["storage"] = storage
    cfg["logging"] = log_cfg
    try:
        return EngineConfig.model_validate(cfg)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

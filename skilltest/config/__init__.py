from .config import EngineConfig, load_config, validate_config

__all__ = ["EngineConfig", "load_config", "validate_config"]

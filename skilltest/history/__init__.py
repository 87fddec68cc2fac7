from .learning_history import LearningHistory, build_record, consecutive_days

__all__ = ["LearningHistory", "build_record", "consecutive_days"]

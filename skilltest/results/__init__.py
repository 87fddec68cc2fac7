from .result_log import ResultLog, chronological, iter_attempts, make_session, summarize
from .active_session import ActiveSessionStore

__all__ = ["ResultLog", "ActiveSessionStore", "chronological", "iter_attempts", "make_session", "summarize"]

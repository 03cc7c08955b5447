from .log_only_completion_listener import LogOnlyCompletionListener

__all__ = ["LogOnlyCompletionListener"]

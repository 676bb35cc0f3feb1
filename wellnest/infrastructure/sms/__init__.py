from .logging_sender import LoggingSmsSender

__all__ = ["LoggingSmsSender"]

from .logging import LogLevel, LogMessage, LogSink

__all__ = ["LogLevel", "LogMessage", "LogSink"]

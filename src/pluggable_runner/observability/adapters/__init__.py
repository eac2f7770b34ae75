from .logging import JsonlLogSink, MemoryLogSink, StdoutLogSink, build_log_sink

__all__ = ["JsonlLogSink", "MemoryLogSink", "StdoutLogSink", "build_log_sink"]

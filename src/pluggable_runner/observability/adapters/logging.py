from __future__ import annotations

import json
import sys
from pathlib import Path

from pluggable_runner.observability.domain.logging import LogMessage, LogSink


class StdoutLogSink:
    # Compact JSON line per event on stdout.
    def emit(self, message: LogMessage) -> None:
        payload = json.dumps(log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        sys.stdout.write(payload + "\n")

    def close(self) -> None:
        sys.stdout.flush()


class JsonlLogSink:
    # File-backed structured log sink; appends one event per line.
    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")

    def emit(self, message: LogMessage) -> None:
        payload = json.dumps(log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        self._file.write(payload + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()


class MemoryLogSink:
    # Keeps events in memory; used by tests and embedding hosts.
    def __init__(self) -> None:
        self.messages: list[LogMessage] = []

    def emit(self, message: LogMessage) -> None:
        self.messages.append(message)

    def events(self) -> list[str]:
        return [message.message for message in self.messages]

    def close(self) -> None:
        return None


def build_log_sink(kind: str, path: str | None = None) -> LogSink | None:
    # Config-level sink selection; "none" disables run logging.
    if kind == "none":
        return None
    if kind == "stdout":
        return StdoutLogSink()
    if kind == "jsonl":
        if not isinstance(path, str) or not path:
            raise ValueError("logging.path must be a non-empty string for the jsonl sink")
        return JsonlLogSink(Path(path))
    raise ValueError(f"Unsupported log sink kind: {kind}")


def log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }

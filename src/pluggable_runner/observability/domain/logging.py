from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal, Protocol

LogLevel = Literal["debug", "info", "warning", "error"]


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured run event emitted by the runner to a log sink.
    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")


class LogSink(Protocol):
    # Sink contract for structured run events.
    def emit(self, message: LogMessage) -> None:
        raise NotImplementedError("LogSink protocol has no implementation")

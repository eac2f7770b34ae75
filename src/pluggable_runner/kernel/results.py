from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Protocol

from pluggable_runner.kernel.rules import Description


class ExecutionState(str, Enum):
    # Per-method state machine: IDLE -> RULES_COMPOSED -> RUNNING -> PASSED | FAILED.
    IDLE = "idle"
    RULES_COMPOSED = "rules_composed"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


Phase = Literal["setup", "run"]


@dataclass(frozen=True, slots=True)
class MethodResult:
    # Outcome of one test method; error is the original exception, never wrapped.
    description: Description
    state: ExecutionState
    error: BaseException | None = None
    phase: Phase = "run"
    duration_ms: float = 0.0
    rule_order: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.state not in (ExecutionState.PASSED, ExecutionState.FAILED):
            raise ValueError(f"MethodResult requires a terminal state, got {self.state.value}")
        if self.state is ExecutionState.FAILED and self.error is None:
            raise ValueError("Failed MethodResult requires an error")

    @property
    def passed(self) -> bool:
        return self.state is ExecutionState.PASSED

    @property
    def setup_failure(self) -> bool:
        return self.state is ExecutionState.FAILED and self.phase == "setup"


@dataclass(frozen=True, slots=True)
class RunReport:
    # Results of one test class run, in execution order.
    class_name: str
    results: Sequence[MethodResult] = field(default_factory=tuple)

    @property
    def passed(self) -> list[MethodResult]:
        return [item for item in self.results if item.passed]

    @property
    def failed(self) -> list[MethodResult]:
        return [item for item in self.results if not item.passed]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def executed(self) -> list[str]:
        return [item.description.method_name for item in self.results]

    def first_failure(self) -> BaseException | None:
        for item in self.results:
            if item.error is not None:
                return item.error
        return None


class ResultSink(Protocol):
    # Reporter contract: receives terminal results in execution order.
    def emit(self, result: MethodResult) -> None:
        raise NotImplementedError("ResultSink protocol has no implementation")

    def close(self) -> None:
        raise NotImplementedError("ResultSink protocol has no implementation")


class CollectingResultSink:
    # In-memory reporter; keeps result objects with their original errors.
    def __init__(self) -> None:
        self.results: list[MethodResult] = []

    def emit(self, result: MethodResult) -> None:
        self.results.append(result)

    def close(self) -> None:
        return None

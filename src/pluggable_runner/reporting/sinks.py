from __future__ import annotations

import json
import sys
import traceback
from pathlib import Path

from pluggable_runner.kernel.results import CollectingResultSink, MethodResult, ResultSink


class JsonlResultSink:
    # One JSON line per result, appended to a file.
    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self._path.open("a", encoding="utf-8")

    def emit(self, result: MethodResult) -> None:
        line = json.dumps(result_to_dict(result), separators=(",", ":"), ensure_ascii=False)
        self._handle.write(line + "\n")
        self._handle.flush()

    def close(self) -> None:
        self._handle.close()


class StdoutResultSink:
    # Human-oriented one-line-per-method output.
    def emit(self, result: MethodResult) -> None:
        status = "PASS" if result.passed else ("ERROR" if result.setup_failure else "FAIL")
        line = f"{status} {result.description.display_name} ({result.duration_ms:.1f} ms)"
        if result.error is not None:
            line += f": {type(result.error).__name__}: {result.error}"
        sys.stdout.write(line + "\n")

    def close(self) -> None:
        sys.stdout.flush()


def build_result_sink(kind: str, path: str | None = None) -> ResultSink:
    if kind == "none":
        return CollectingResultSink()
    if kind == "stdout":
        return StdoutResultSink()
    if kind == "jsonl":
        if not isinstance(path, str) or not path:
            raise ValueError("report.path must be a non-empty string for the jsonl sink")
        return JsonlResultSink(Path(path))
    raise ValueError(f"Unsupported report sink kind: {kind}")


def result_to_dict(result: MethodResult) -> dict[str, object]:
    # Stable key order for machine-readable reports.
    error: dict[str, object] | None = None
    if result.error is not None:
        error = {
            "type": type(result.error).__name__,
            "message": str(result.error),
            "stack": "".join(traceback.format_exception(result.error)),
        }
    return {
        "class": result.description.class_name,
        "method": result.description.method_name,
        "state": result.state.value,
        "phase": result.phase,
        "duration_ms": result.duration_ms,
        "rule_order": list(result.rule_order),
        "error": error,
    }

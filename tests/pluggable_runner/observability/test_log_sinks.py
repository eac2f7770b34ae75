from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from pluggable_runner.observability.adapters.logging import (
    JsonlLogSink,
    MemoryLogSink,
    StdoutLogSink,
    build_log_sink,
    log_to_dict,
)
from pluggable_runner.observability.domain.logging import LogMessage


def test_log_message_requires_level_and_message() -> None:
    with pytest.raises(ValueError):
        LogMessage(level="info", message="")


def test_log_to_dict_uses_zulu_timestamp() -> None:
    message = LogMessage(
        level="info",
        message="run_started",
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
        fields={"class": "pkg.Sample"},
    )
    assert log_to_dict(message) == {
        "level": "info",
        "message": "run_started",
        "timestamp": "2024-01-02T03:04:05Z",
        "fields": {"class": "pkg.Sample"},
    }


def test_stdout_sink_prints_compact_json(capsys) -> None:
    StdoutLogSink().emit(LogMessage(level="error", message="method_failed", fields={"method": "x"}))
    payload = json.loads(capsys.readouterr().out)
    assert payload["message"] == "method_failed"
    assert payload["fields"] == {"method": "x"}


def test_jsonl_sink_appends_lines(tmp_path) -> None:
    path = tmp_path / "logs" / "run.jsonl"
    sink = JsonlLogSink(path)
    sink.emit(LogMessage(level="info", message="run_started"))
    sink.emit(LogMessage(level="info", message="run_finished"))
    sink.close()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["message"] for line in lines] == ["run_started", "run_finished"]


def test_memory_sink_keeps_messages() -> None:
    sink = MemoryLogSink()
    sink.emit(LogMessage(level="debug", message="rules_composed"))
    assert sink.events() == ["rules_composed"]


def test_build_log_sink_by_kind(tmp_path) -> None:
    assert build_log_sink("none") is None
    assert isinstance(build_log_sink("stdout"), StdoutLogSink)
    jsonl = build_log_sink("jsonl", str(tmp_path / "log.jsonl"))
    assert isinstance(jsonl, JsonlLogSink)
    jsonl.close()
    with pytest.raises(ValueError):
        build_log_sink("jsonl")
    with pytest.raises(ValueError):
        build_log_sink("syslog")

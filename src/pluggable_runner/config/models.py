from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Config models map YAML sections to typed structures.


class SequencingConfig(BaseModel):
    # Method ordering strategy; shuffle needs a fixed seed to stay repeatable.
    model_config = ConfigDict(extra="forbid")
    mode: Literal["name", "reverse_name", "declaration", "shuffle"] = "name"
    seed: int | None = None

    @model_validator(mode="after")
    def _require_seed(self) -> SequencingConfig:
        if self.mode == "shuffle" and self.seed is None:
            raise ValueError("sequencing.seed is required when mode is 'shuffle'")
        return self


class RulesConfig(BaseModel):
    # Rule collection settings; disabled means the empty rule chain.
    model_config = ConfigDict(extra="forbid")
    enabled: bool = True
    field_order: Literal["base_first", "subclass_first"] = "base_first"


class LoggingConfig(BaseModel):
    # Structured run-event logging.
    model_config = ConfigDict(extra="forbid")
    sink: Literal["none", "stdout", "jsonl"] = "none"
    path: str | None = None

    @model_validator(mode="after")
    def _require_path(self) -> LoggingConfig:
        if self.sink == "jsonl" and not self.path:
            raise ValueError("logging.path is required when sink is 'jsonl'")
        return self


class ReportConfig(BaseModel):
    # Result reporting sink.
    model_config = ConfigDict(extra="forbid")
    sink: Literal["none", "stdout", "jsonl"] = "stdout"
    path: str | None = None

    @model_validator(mode="after")
    def _require_path(self) -> ReportConfig:
        if self.sink == "jsonl" and not self.path:
            raise ValueError("report.path is required when sink is 'jsonl'")
        return self


class RunnerConfig(BaseModel):
    # Top-level typed view of a runner configuration file.
    model_config = ConfigDict(extra="forbid")
    version: int = 1
    targets: list[str] = Field(default_factory=list)
    markers: list[str] = Field(default_factory=lambda: ["case"])
    sequencing: SequencingConfig = Field(default_factory=SequencingConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @field_validator("version")
    @classmethod
    def _supported_version(cls, value: int) -> int:
        if value != 1:
            raise ValueError(f"Unsupported config version: {value}")
        return value

    @field_validator("markers")
    @classmethod
    def _unique_markers(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("markers must not be empty")
        if any(not isinstance(item, str) or not item for item in value):
            raise ValueError("markers entries must be non-empty strings")
        if len(value) != len(set(value)):
            raise ValueError("markers must not contain duplicates")
        return value

    @field_validator("targets")
    @classmethod
    def _target_format(cls, value: list[str]) -> list[str]:
        for item in value:
            module, sep, attr = item.partition(":")
            if not sep or not module or not attr:
                raise ValueError(f"targets entries must look like 'package.module:ClassName', got {item!r}")
        return value

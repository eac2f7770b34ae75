from __future__ import annotations

import importlib
import inspect
from collections.abc import Sequence
from dataclasses import dataclass

from pluggable_runner.config.loader import ConfigError
from pluggable_runner.config.models import RunnerConfig
from pluggable_runner.kernel.composer import RuleComposer, no_rules
from pluggable_runner.kernel.markers import Marker
from pluggable_runner.kernel.methods import MethodDiscoveryError, resolve_sorter
from pluggable_runner.kernel.registry import RuleRegistry
from pluggable_runner.kernel.results import ResultSink, RunReport
from pluggable_runner.kernel.runner import PluggableTestRunner
from pluggable_runner.observability.adapters.logging import build_log_sink
from pluggable_runner.observability.domain.logging import LogSink
from pluggable_runner.reporting.sinks import build_result_sink


@dataclass(frozen=True, slots=True)
class RunSession:
    # Resolved sinks shared by every target class of one invocation.
    result_sink: ResultSink
    log_sink: LogSink | None

    def close(self) -> None:
        self.result_sink.close()
        close = getattr(self.log_sink, "close", None)
        if callable(close):
            close()


def resolve_target(spec: str) -> type:
    # "package.module:ClassName" (nested classes via dots after the colon).
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise MethodDiscoveryError(f"Invalid target '{spec}'; expected 'package.module:ClassName'")
    try:
        value: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise MethodDiscoveryError(f"Cannot import target module '{module_name}': {exc}") from exc
    for part in attr_path.split("."):
        try:
            value = getattr(value, part)
        except AttributeError as exc:
            raise MethodDiscoveryError(f"Target '{spec}' has no attribute '{part}'") from exc
    if not inspect.isclass(value):
        raise MethodDiscoveryError(f"Target '{spec}' is not a class")
    return value


def build_runner(
    config: RunnerConfig,
    test_class: type,
    *,
    log_sink: LogSink | None = None,
) -> PluggableTestRunner:
    # Composition root: config sections become runner strategies.
    markers = tuple(Marker(name) for name in config.markers)
    sorter = resolve_sorter(config.sequencing.mode, seed=config.sequencing.seed)
    if config.rules.enabled:
        chain_factory = RuleComposer(RuleRegistry(field_order=config.rules.field_order))
    else:
        chain_factory = no_rules
    return PluggableTestRunner(
        test_class=test_class,
        supported_test_markers=markers,
        sort_test_methods=sorter,
        create_rule_chain=chain_factory,
        log_sink=log_sink,
    )


def open_session(config: RunnerConfig) -> RunSession:
    # Sink files that cannot be opened are configuration errors.
    try:
        result_sink = build_result_sink(config.report.sink, config.report.path)
    except OSError as exc:
        raise ConfigError(f"Cannot open report path '{config.report.path}': {exc}") from exc
    try:
        log_sink = build_log_sink(config.logging.sink, config.logging.path)
    except OSError as exc:
        result_sink.close()
        raise ConfigError(f"Cannot open log path '{config.logging.path}': {exc}") from exc
    return RunSession(result_sink=result_sink, log_sink=log_sink)


def run_targets(
    config: RunnerConfig,
    targets: Sequence[str] | None = None,
    *,
    session: RunSession | None = None,
) -> list[RunReport]:
    # Runs each target class in order; sinks are closed only when owned here.
    resolved = [resolve_target(spec) for spec in (targets if targets is not None else config.targets)]
    owned = session is None
    active = session if session is not None else open_session(config)
    try:
        return [
            build_runner(config, test_class, log_sink=active.log_sink).run(active.result_sink)
            for test_class in resolved
        ]
    finally:
        if owned:
            active.close()

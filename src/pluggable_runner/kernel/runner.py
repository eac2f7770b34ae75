from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from pluggable_runner.kernel.composer import ComposedRules, RuleChainFactory, RuleComposer
from pluggable_runner.kernel.markers import Marker, after, before, case
from pluggable_runner.kernel.methods import (
    AnnotationPolicy,
    MethodClassifier,
    MethodDescriptor,
    MethodSorter,
    sequence_methods,
    sort_by_name,
)
from pluggable_runner.kernel.results import (
    CollectingResultSink,
    ExecutionState,
    MethodResult,
    ResultSink,
    RunReport,
)
from pluggable_runner.kernel.rules import Description, Statement
from pluggable_runner.observability.domain.logging import LogLevel, LogMessage, LogSink


@dataclass(frozen=True, slots=True)
class PluggableTestRunner:
    # Runs the test methods of one class, each wrapped by its composed rule chain.
    # Marker policy, method ordering and rule chain creation are injected strategies.
    test_class: type
    supported_test_markers: Sequence[Marker] = (case,)
    sort_test_methods: MethodSorter = sort_by_name
    create_rule_chain: RuleChainFactory = field(default_factory=RuleComposer)
    log_sink: LogSink | None = None

    @property
    def class_name(self) -> str:
        return f"{self.test_class.__module__}.{self.test_class.__qualname__}"

    @property
    def policy(self) -> AnnotationPolicy:
        return AnnotationPolicy(markers=tuple(self.supported_test_markers))

    def test_methods(self) -> list[MethodDescriptor]:
        return sequence_methods(self.test_class, self.policy, self.sort_test_methods)

    def run(self, sink: ResultSink | None = None) -> RunReport:
        # Sequential, one attempt per method; a fresh instance and chain per method.
        reporter = sink if sink is not None else CollectingResultSink()
        methods = self.test_methods()
        self._log("info", "run_started", methods=[method.name for method in methods])
        results = [self.run_method(method, reporter) for method in methods]
        report = RunReport(class_name=self.class_name, results=tuple(results))
        self._log(
            "info" if report.ok else "error",
            "run_finished",
            passed=len(report.passed),
            failed=len(report.failed),
        )
        return report

    def run_method(self, method: MethodDescriptor, sink: ResultSink | None = None) -> MethodResult:
        description = Description(class_name=self.class_name, method_name=method.name)
        started = time.perf_counter()
        state = ExecutionState.IDLE

        # IDLE -> RULES_COMPOSED: everything is built before any rule runs.
        try:
            target = self.test_class()
            composed = self.create_rule_chain(target)
            statement = self._build_statement(method, target, composed, description)
        except Exception as exc:  # noqa: BLE001 - setup failures are reported, not raised
            self._log("error", "setup_failed", method=method.name, error=repr(exc), state=state.value)
            return self._finish(
                sink,
                MethodResult(
                    description=description,
                    state=ExecutionState.FAILED,
                    error=exc,
                    phase="setup",
                    duration_ms=_elapsed_ms(started),
                ),
            )
        state = ExecutionState.RULES_COMPOSED
        rule_order = tuple(composed.rule_order)
        self._log("debug", "rules_composed", method=method.name, rules=list(rule_order))

        # RULES_COMPOSED -> RUNNING -> PASSED | FAILED.
        state = ExecutionState.RUNNING
        try:
            statement()
        except Exception as exc:  # noqa: BLE001 - original failure goes to the reporter unchanged
            state = ExecutionState.FAILED
            self._log("error", "method_failed", method=method.name, error=repr(exc))
            return self._finish(
                sink,
                MethodResult(
                    description=description,
                    state=state,
                    error=exc,
                    duration_ms=_elapsed_ms(started),
                    rule_order=rule_order,
                ),
            )
        state = ExecutionState.PASSED
        self._log("info", "method_passed", method=method.name)
        return self._finish(
            sink,
            MethodResult(
                description=description,
                state=state,
                duration_ms=_elapsed_ms(started),
                rule_order=rule_order,
            ),
        )

    @staticmethod
    def run_and_raise(runner: PluggableTestRunner) -> RunReport:
        # Runs the class and re-raises the first original failure, if any.
        report = runner.run(CollectingResultSink())
        failure = report.first_failure()
        if failure is not None:
            raise failure
        return report

    def _build_statement(
        self,
        method: MethodDescriptor,
        target: object,
        composed: ComposedRules,
        description: Description,
    ) -> Statement:
        invoke = method.bind(target)

        def base() -> None:
            invoke()

        classifier = MethodClassifier(self.policy)
        befores = [hook.bind(target) for hook in classifier.lifecycle(self.test_class, before)]
        afters = [hook.bind(target) for hook in classifier.lifecycle(self.test_class, after)]
        return composed.wrap(
            base,
            method=method,
            target=target,
            description=description,
            lifecycle=_lifecycle(befores, afters),
        )

    def _finish(self, sink: ResultSink | None, result: MethodResult) -> MethodResult:
        if sink is not None:
            sink.emit(result)
        return result

    def _log(self, level: LogLevel, message: str, **fields: object) -> None:
        if self.log_sink is None:
            return
        self.log_sink.emit(
            LogMessage(level=level, message=message, fields={"class": self.class_name, **fields})
        )


def _lifecycle(
    befores: Sequence[Callable[[], object]],
    afters: Sequence[Callable[[], object]],
) -> Callable[[Statement], Statement]:
    # Before hooks precede the wrapped statement; after hooks always run.
    # The first failure is re-raised as-is.
    def _wrap(inner: Statement) -> Statement:
        if not befores and not afters:
            return inner

        def statement() -> None:
            errors: list[Exception] = []
            try:
                for hook in befores:
                    hook()
                inner()
            except Exception as exc:  # noqa: BLE001 - collected and re-raised below
                errors.append(exc)
            for hook in afters:
                try:
                    hook()
                except Exception as exc:  # noqa: BLE001 - collected and re-raised below
                    errors.append(exc)
            if errors:
                raise errors[0]

        return statement

    return _wrap


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0

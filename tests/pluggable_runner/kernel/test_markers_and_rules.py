from __future__ import annotations

import pytest

from pluggable_runner.kernel.markers import Marker, after, before, case, get_markers, marker
from pluggable_runner.kernel.rules import Description, RuleField, RuleRole, rule, rule_roles


def test_marker_decorator_attaches_marker() -> None:
    @case
    def check() -> None:
        pass

    assert get_markers(check) == frozenset({case})


def test_markers_stack() -> None:
    custom = marker("custom")

    @custom
    @case
    def check() -> None:
        pass

    assert get_markers(check) == frozenset({case, custom})


def test_markers_compare_by_name() -> None:
    # Config-level names resolve to the same marker as the built-ins.
    assert Marker("case") == case
    assert marker("before") == before
    assert after != before


def test_marker_rejects_empty_name() -> None:
    with pytest.raises(ValueError):
        marker("")


def test_unmarked_target_has_no_markers() -> None:
    assert get_markers(lambda: None) == frozenset()
    assert get_markers(object()) == frozenset()


def test_rule_field_builds_value_per_instance() -> None:
    class Counter:
        def apply(self, base, description):
            return base

    class Sample:
        guard = rule(Counter, order=4)

    first, second = Sample(), Sample()
    assert first.guard is first.guard
    assert first.guard is not second.guard
    field = Sample.__dict__["guard"]
    assert isinstance(field, RuleField)
    assert field.name == "guard"
    assert field.order == 4
    assert Sample.guard is field


def test_rule_field_is_read_only() -> None:
    class Sample:
        guard = rule(object)

    with pytest.raises(AttributeError):
        Sample().guard = object()


@pytest.mark.parametrize("order", [True, 1.5, "1"])
def test_rule_rejects_non_int_order(order: object) -> None:
    with pytest.raises(TypeError):
        rule(object, order=order)  # type: ignore[arg-type]


def test_rule_rejects_non_callable_factory() -> None:
    with pytest.raises(TypeError):
        rule(42)  # type: ignore[arg-type]


def test_rule_roles_follow_implemented_methods() -> None:
    class ClassOnly:
        def apply(self, base, description):
            return base

    class MethodOnly:
        def apply_to_method(self, base, method, target):
            return base

    class Both(ClassOnly, MethodOnly):
        pass

    assert rule_roles(ClassOnly()) == frozenset({RuleRole.CLASS})
    assert rule_roles(MethodOnly()) == frozenset({RuleRole.METHOD})
    assert rule_roles(Both()) == frozenset({RuleRole.CLASS, RuleRole.METHOD})
    assert rule_roles("text") == frozenset()


def test_description_display_name() -> None:
    assert Description(class_name="pkg.Sample", method_name="check").display_name == "check(pkg.Sample)"

from __future__ import annotations

import pytest

from pluggable_runner.kernel.markers import after, before, case, marker
from pluggable_runner.kernel.methods import (
    AnnotationPolicy,
    MethodClassifier,
    MethodDescriptor,
    MethodDiscoveryError,
    declaration_order,
    is_test_method,
    resolve_sorter,
    reverse_by_name,
    scan_methods,
    sequence_methods,
    shuffled,
    sort_by_name,
)

parameterized = marker("parameterized")


class Sample:
    @case
    def zeta(self) -> None:
        pass

    @parameterized
    def alpha(self) -> None:
        pass

    @case
    def mid(self) -> None:
        pass

    @before
    def set_up(self) -> None:
        pass

    @after
    def tear_down(self) -> None:
        pass

    def helper(self) -> None:
        pass


def _names(methods) -> list[str]:
    return [method.name for method in methods]


def test_is_test_method_checks_policy_membership() -> None:
    method = MethodDescriptor(name="x", declaring_class=Sample, markers=frozenset({parameterized}))
    assert not is_test_method(method, AnnotationPolicy())
    assert is_test_method(method, AnnotationPolicy(markers=(case, parameterized)))


def test_unmarked_method_is_never_a_test() -> None:
    method = MethodDescriptor(name="helper", declaring_class=Sample)
    assert not is_test_method(method, AnnotationPolicy(markers=(case, parameterized)))


def test_policy_collapses_duplicate_markers() -> None:
    # Recognized markers are a set; repeats do not change classification.
    policy = AnnotationPolicy(markers=(case, parameterized, case))
    assert policy.markers == (case, parameterized)
    assert _names(sequence_methods(Sample, policy)) == ["alpha", "mid", "zeta"]


def test_scan_methods_keeps_declaration_order() -> None:
    assert _names(scan_methods(Sample)) == ["zeta", "alpha", "mid", "set_up", "tear_down", "helper"]


def test_scan_methods_rejects_non_class() -> None:
    with pytest.raises(MethodDiscoveryError):
        scan_methods(Sample())  # type: ignore[arg-type]


def test_unmarked_override_keeps_inherited_markers() -> None:
    # Overriding a test without re-marking it keeps it a test; the override runs.
    class Child(Sample):
        def zeta(self) -> None:
            pass

        def tear_down(self) -> None:
            pass

    classifier = MethodClassifier()
    assert _names(classifier.test_methods(Child)) == ["zeta", "mid"]
    assert _names(classifier.lifecycle(Child, after)) == ["tear_down"]
    zeta = next(method for method in scan_methods(Child) if method.name == "zeta")
    assert zeta.declaring_class is Child
    assert zeta.function is Child.__dict__["zeta"]


def test_override_with_other_marker_replaces_inherited_markers() -> None:
    class Child(Sample):
        @parameterized
        def zeta(self) -> None:
            pass

    assert _names(MethodClassifier().test_methods(Child)) == ["mid"]


def test_inherited_test_methods_are_discovered() -> None:
    class Child(Sample):
        @case
        def extra(self) -> None:
            pass

    assert _names(MethodClassifier().test_methods(Child)) == ["zeta", "mid", "extra"]


def test_lifecycle_hooks_are_found_by_marker() -> None:
    classifier = MethodClassifier()
    assert _names(classifier.lifecycle(Sample, before)) == ["set_up"]
    assert _names(classifier.lifecycle(Sample, after)) == ["tear_down"]
    with pytest.raises(ValueError):
        classifier.lifecycle(Sample, case)


def test_sequence_defaults_to_name_order() -> None:
    assert _names(sequence_methods(Sample, AnnotationPolicy())) == ["mid", "zeta"]


def test_sequence_with_custom_policy_and_reverse_sorter() -> None:
    policy = AnnotationPolicy(markers=(case, parameterized))
    assert _names(sequence_methods(Sample, policy, reverse_by_name)) == ["zeta", "mid", "alpha"]


def test_declaration_order_sorter_keeps_scan_order() -> None:
    policy = AnnotationPolicy(markers=(case, parameterized))
    assert _names(sequence_methods(Sample, policy, declaration_order)) == ["zeta", "alpha", "mid"]


def test_sorters_receive_lazy_sequence() -> None:
    seen: list[object] = []

    def spy(methods):
        seen.append(methods)
        return sort_by_name(methods)

    sequence_methods(Sample, AnnotationPolicy(), spy)
    assert not isinstance(seen[0], list)
    assert iter(seen[0]) is seen[0]


def test_shuffled_is_repeatable_for_same_seed() -> None:
    policy = AnnotationPolicy(markers=(case, parameterized))
    first = _names(sequence_methods(Sample, policy, shuffled(7)))
    second = _names(sequence_methods(Sample, policy, shuffled(7)))
    assert first == second
    assert sorted(first) == ["alpha", "mid", "zeta"]


def test_sorter_cannot_introduce_unclassified_methods() -> None:
    def sneaky(methods):
        return [*methods, MethodDescriptor(name="helper", declaring_class=Sample)]

    with pytest.raises(MethodDiscoveryError):
        sequence_methods(Sample, AnnotationPolicy(), sneaky)


def test_resolve_sorter_by_mode() -> None:
    assert resolve_sorter("name") is sort_by_name
    assert resolve_sorter("reverse_name") is reverse_by_name
    assert resolve_sorter("declaration") is declaration_order
    assert callable(resolve_sorter("shuffle", seed=1))
    with pytest.raises(ValueError):
        resolve_sorter("shuffle")
    with pytest.raises(ValueError):
        resolve_sorter("random")


def test_descriptor_binds_most_derived_definition() -> None:
    calls: list[str] = []

    class Base:
        @case
        def check(self) -> None:
            calls.append("base")

    class Child(Base):
        @case
        def check(self) -> None:
            calls.append("child")

    method = MethodClassifier().test_methods(Base)[0]
    method.bind(Child())()
    assert calls == ["child"]

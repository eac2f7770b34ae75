from __future__ import annotations

import inspect
import random
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from pluggable_runner.kernel.markers import Marker, after, before, case, get_markers


class MethodDiscoveryError(RuntimeError):
    # Raised when a target class cannot be scanned for test methods.
    pass


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    # A method eligible for execution plus the markers present on it.
    name: str
    declaring_class: type
    markers: frozenset[Marker] = frozenset()
    function: Callable[..., object] | None = field(default=None, compare=False)

    def bind(self, target: object) -> Callable[[], object]:
        # Resolve through the instance so the most-derived definition is invoked.
        return getattr(target, self.name)


@dataclass(frozen=True, slots=True)
class AnnotationPolicy:
    # Marker kinds recognized as "this method is a test".
    markers: tuple[Marker, ...] = (case,)

    def __post_init__(self) -> None:
        # Recognized markers form a set; repeats collapse, first position wins.
        object.__setattr__(self, "markers", tuple(dict.fromkeys(self.markers)))

    def recognizes(self, markers: Iterable[Marker]) -> bool:
        return not set(self.markers).isdisjoint(markers)


def is_test_method(method: MethodDescriptor, policy: AnnotationPolicy) -> bool:
    # Pure set membership over the method's markers.
    return policy.recognizes(method.markers)


def scan_methods(cls: type) -> list[MethodDescriptor]:
    # Functions over the MRO, base classes first; an override replaces the
    # inherited definition but keeps the position where the name first appeared.
    # An unmarked override keeps the inherited markers.
    if not inspect.isclass(cls):
        raise MethodDiscoveryError(f"Test target must be a class, got {type(cls).__name__}")
    resolved: dict[str, MethodDescriptor] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, value in klass.__dict__.items():
            function = _unwrap(value)
            if function is None:
                continue
            markers = get_markers(value) | get_markers(function)
            inherited = resolved.get(name)
            if not markers and inherited is not None:
                markers = inherited.markers
            resolved[name] = MethodDescriptor(
                name=name,
                declaring_class=klass,
                markers=markers,
                function=function,
            )
    return list(resolved.values())


def _unwrap(value: object) -> Callable[..., object] | None:
    if isinstance(value, (staticmethod, classmethod)):
        value = value.__func__
    if inspect.isfunction(value):
        return value
    return None


@dataclass(frozen=True, slots=True)
class MethodClassifier:
    # Classifies scanned methods against the configured policy.
    policy: AnnotationPolicy = field(default_factory=AnnotationPolicy)

    def is_test_method(self, method: MethodDescriptor) -> bool:
        return is_test_method(method, self.policy)

    def test_methods(self, cls: type) -> list[MethodDescriptor]:
        return [method for method in scan_methods(cls) if self.is_test_method(method)]

    def lifecycle(self, cls: type, hook: Marker) -> list[MethodDescriptor]:
        # Lifecycle hooks (before/after) in declaration order; never tests themselves.
        if hook not in (before, after):
            raise ValueError(f"Unsupported lifecycle marker: {hook!r}")
        return [
            method
            for method in scan_methods(cls)
            if hook in method.markers and not self.is_test_method(method)
        ]


# Sorters accept a lazy sequence of methods and return the execution order.
MethodSorter = Callable[[Iterator[MethodDescriptor]], Iterable[MethodDescriptor]]


def sort_by_name(methods: Iterator[MethodDescriptor]) -> Iterable[MethodDescriptor]:
    return sorted(methods, key=lambda method: method.name)


def reverse_by_name(methods: Iterator[MethodDescriptor]) -> Iterable[MethodDescriptor]:
    return sorted(methods, key=lambda method: method.name, reverse=True)


def declaration_order(methods: Iterator[MethodDescriptor]) -> Iterable[MethodDescriptor]:
    return methods


def shuffled(seed: int) -> MethodSorter:
    # Repeatable shuffle: name order first so the result depends only on the seed.
    def _sort(methods: Iterator[MethodDescriptor]) -> Iterable[MethodDescriptor]:
        ordered = sorted(methods, key=lambda method: method.name)
        random.Random(seed).shuffle(ordered)
        return ordered

    return _sort


def sequence_methods(
    cls: type,
    policy: AnnotationPolicy,
    sorter: MethodSorter = sort_by_name,
) -> list[MethodDescriptor]:
    # Classification happens before sequencing; sorters never see non-test methods.
    classified = MethodClassifier(policy).test_methods(cls)
    ordered = list(sorter(iter(classified)))
    unknown = [method.name for method in ordered if method not in classified]
    if unknown:
        raise MethodDiscoveryError(f"Method sorter returned unclassified methods: {unknown}")
    return ordered


SORTERS: dict[str, MethodSorter] = {
    "name": sort_by_name,
    "reverse_name": reverse_by_name,
    "declaration": declaration_order,
}


def resolve_sorter(mode: str, *, seed: int | None = None) -> MethodSorter:
    # Config-level lookup for the built-in sorters.
    if mode == "shuffle":
        if seed is None:
            raise ValueError("shuffle sequencing requires a seed")
        return shuffled(seed)
    sorter = SORTERS.get(mode)
    if sorter is None:
        raise ValueError(f"Unknown sequencing mode: {mode}")
    return sorter

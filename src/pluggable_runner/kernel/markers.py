from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

MARKERS_ATTR = "__runner_markers__"


@dataclass(frozen=True, slots=True)
class Marker:
    # Named tag attached to functions for discovery (annotation analog).
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Marker.name must be a non-empty string")

    def __call__(self, target: T) -> T:
        # Decorator form: @case / @before / @marker("custom").
        current = getattr(target, MARKERS_ATTR, frozenset())
        setattr(target, MARKERS_ATTR, frozenset(current) | {self})
        return target

    def __repr__(self) -> str:
        return f"@{self.name}"


def marker(name: str) -> Marker:
    # Factory for custom test markers.
    return Marker(name=name)


def get_markers(target: object) -> frozenset[Marker]:
    # Read markers attached to a callable; non-marked targets yield an empty set.
    markers = getattr(target, MARKERS_ATTR, None)
    if not isinstance(markers, frozenset):
        return frozenset()
    return frozenset(item for item in markers if isinstance(item, Marker))


case = Marker("case")
before = Marker("before")
after = Marker("after")

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, overload, runtime_checkable

if TYPE_CHECKING:
    from pluggable_runner.kernel.methods import MethodDescriptor

T = TypeVar("T")

# A statement is a zero-argument action; a failure is any raised exception.
Statement = Callable[[], None]


class RuleConfigurationError(RuntimeError):
    # Raised for malformed or contradictory rule metadata; fatal to test setup.
    pass


class RuleRole(str, Enum):
    # Class-scoped rules wrap the whole test, lifecycle hooks included.
    CLASS = "class"
    # Method-scoped rules wrap only the test method invocation.
    METHOD = "method"


@dataclass(frozen=True, slots=True)
class Description:
    # Identifies one test execution for rules and reporters.
    class_name: str
    method_name: str

    @property
    def display_name(self) -> str:
        return f"{self.method_name}({self.class_name})"


@runtime_checkable
class ClassScopedRule(Protocol):
    def apply(self, base: Statement, description: Description) -> Statement:
        return base


@runtime_checkable
class MethodScopedRule(Protocol):
    def apply_to_method(self, base: Statement, method: MethodDescriptor, target: object) -> Statement:
        return base


def rule_roles(value: object) -> frozenset[RuleRole]:
    # A single rule instance may satisfy both roles.
    roles: set[RuleRole] = set()
    if isinstance(value, ClassScopedRule):
        roles.add(RuleRole.CLASS)
    if isinstance(value, MethodScopedRule):
        roles.add(RuleRole.METHOD)
    return frozenset(roles)


class RuleField(Generic[T]):
    # Descriptor for a rule-bearing class attribute.
    # Each test instance gets its own rule value, built on first access.
    def __init__(self, factory: Callable[[], T], *, order: int | None = None) -> None:
        if not callable(factory):
            raise TypeError("rule() factory must be callable")
        if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
            raise TypeError("rule() order must be an int or None")
        self.factory = factory
        self.order = order
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @overload
    def __get__(self, instance: None, owner: type) -> RuleField[T]: ...

    @overload
    def __get__(self, instance: object, owner: type) -> T: ...

    def __get__(self, instance: object | None, owner: type) -> Any:
        if instance is None:
            return self
        cache = instance.__dict__.setdefault("__runner_rule_values__", {})
        if self.name not in cache:
            cache[self.name] = self.factory()
        return cache[self.name]

    def __set__(self, instance: object, value: object) -> None:
        raise AttributeError(f"Rule field '{self.name}' is read-only")

    def __repr__(self) -> str:
        return f"RuleField(name={self.name!r}, order={self.order!r})"


def rule(factory: Callable[[], T], *, order: int | None = None) -> RuleField[T]:
    # Declares a rule field; order is the optional intrinsic priority.
    return RuleField(factory, order=order)

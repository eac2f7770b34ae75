from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from pluggable_runner.kernel.methods import MethodDescriptor
from pluggable_runner.kernel.registry import RuleDeclaration, RuleRegistry
from pluggable_runner.kernel.rules import (
    Description,
    RuleConfigurationError,
    RuleRole,
    Statement,
)


def order_declarations(declarations: Iterable[RuleDeclaration]) -> list[RuleDeclaration]:
    # Outermost first. Explicit orders ascend (position breaks ties) and wrap the
    # unordered rules, which follow in reverse declaration position: the last
    # declared unordered rule ends up outermost. Keep it that way.
    items = list(declarations)
    seen: dict[tuple[int | None, int], RuleDeclaration] = {}
    for declaration in items:
        key = (declaration.order, declaration.position)
        other = seen.get(key)
        if other is not None and other is not declaration:
            raise RuleConfigurationError(
                f"Rules '{other.field_name}' and '{declaration.field_name}' share "
                f"order={declaration.order} and position={declaration.position}"
            )
        seen[key] = declaration

    explicit = [item for item in items if item.has_explicit_order]
    implicit = [item for item in items if not item.has_explicit_order]
    explicit.sort(key=lambda item: (item.order, item.position))
    implicit.sort(key=lambda item: item.position, reverse=True)
    return explicit + implicit


@dataclass(frozen=True, slots=True)
class RuleChain:
    # Immutable, totally ordered rules for one role (outermost first).
    role: RuleRole
    declarations: tuple[RuleDeclaration, ...] = ()

    @property
    def names(self) -> list[str]:
        return [item.field_name for item in self.declarations]

    def __len__(self) -> int:
        return len(self.declarations)

    def fold(self, base: Statement, wrap: Callable[[object, Statement], Statement]) -> Statement:
        # Innermost rule wraps the base first; the first entry ends up outermost.
        statement = base
        for declaration in reversed(self.declarations):
            statement = wrap(declaration.rule, statement)
        return statement


@dataclass(frozen=True, slots=True)
class ComposedRules:
    # Both role chains for one test execution.
    class_chain: RuleChain = field(default_factory=lambda: RuleChain(RuleRole.CLASS))
    method_chain: RuleChain = field(default_factory=lambda: RuleChain(RuleRole.METHOD))

    def __post_init__(self) -> None:
        if self.class_chain.role is not RuleRole.CLASS:
            raise RuleConfigurationError(f"class_chain holds {self.class_chain.role.value} rules")
        if self.method_chain.role is not RuleRole.METHOD:
            raise RuleConfigurationError(f"method_chain holds {self.method_chain.role.value} rules")

    @property
    def rule_order(self) -> list[str]:
        # Field names in invocation order, outermost first.
        return self.class_chain.names + self.method_chain.names

    def wrap(
        self,
        base: Statement,
        *,
        method: MethodDescriptor,
        target: object,
        description: Description,
        lifecycle: Callable[[Statement], Statement] | None = None,
    ) -> Statement:
        # Method rules wrap the invocation, lifecycle hooks wrap that,
        # and class rules wrap everything.
        statement = self.method_chain.fold(
            base,
            lambda rule, inner: rule.apply_to_method(inner, method, target),  # type: ignore[attr-defined]
        )
        if lifecycle is not None:
            statement = lifecycle(statement)
        return self.class_chain.fold(
            statement,
            lambda rule, inner: rule.apply(inner, description),  # type: ignore[attr-defined]
        )


def compose_rules(declarations: Sequence[RuleDeclaration]) -> ComposedRules:
    # A rule playing both roles is kept in the class chain only, so it runs once.
    class_group = [item for item in declarations if RuleRole.CLASS in item.roles]
    class_ids = {id(item.rule) for item in class_group}
    method_group = [
        item
        for item in declarations
        if RuleRole.METHOD in item.roles and id(item.rule) not in class_ids
    ]
    return ComposedRules(
        class_chain=RuleChain(RuleRole.CLASS, tuple(order_declarations(class_group))),
        method_chain=RuleChain(RuleRole.METHOD, tuple(order_declarations(method_group))),
    )


RuleChainFactory = Callable[[object], ComposedRules]


@dataclass(frozen=True, slots=True)
class RuleComposer:
    # Default rule chain strategy: registry scan followed by compose_rules.
    registry: RuleRegistry = field(default_factory=RuleRegistry)

    def __call__(self, target: object) -> ComposedRules:
        return compose_rules(self.registry.collect(target))


def no_rules(target: object) -> ComposedRules:
    # Empty strategy: isolates discovery and sequencing from rule composition.
    _ = target
    return ComposedRules()

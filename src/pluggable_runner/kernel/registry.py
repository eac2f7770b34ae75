from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pluggable_runner.kernel.rules import RuleConfigurationError, RuleField, RuleRole, rule_roles

FieldOrder = Literal["base_first", "subclass_first"]


@dataclass(frozen=True, slots=True)
class RuleDeclaration:
    # One rule value discovered on a test instance.
    rule: object
    order: int | None
    position: int
    field_name: str
    declaring_class: type
    roles: frozenset[RuleRole]

    @property
    def has_explicit_order(self) -> bool:
        return self.order is not None


@dataclass(frozen=True, slots=True)
class RuleRegistry:
    # Collects rule declarations from a test instance in stable field order.
    # field_order decides whether inherited fields come before the subclass's own.
    field_order: FieldOrder = "base_first"

    def __post_init__(self) -> None:
        if self.field_order not in ("base_first", "subclass_first"):
            raise ValueError(f"Unsupported rule field order: {self.field_order}")

    def rule_fields(self, cls: type) -> list[tuple[type, RuleField[object]]]:
        # A name declared on a more-derived class shadows the inherited field.
        mro = [klass for klass in cls.__mro__ if klass is not object]
        owners: dict[str, type] = {}
        for klass in mro:
            for name in klass.__dict__:
                owners.setdefault(name, klass)

        walk = list(reversed(mro)) if self.field_order == "base_first" else mro
        fields: list[tuple[type, RuleField[object]]] = []
        for klass in walk:
            for name, value in klass.__dict__.items():
                if not isinstance(value, RuleField):
                    continue
                if owners.get(name) is not klass:
                    continue
                fields.append((klass, value))
        return fields

    def collect(self, target: object) -> list[RuleDeclaration]:
        declarations: list[RuleDeclaration] = []
        for position, (klass, declared) in enumerate(self.rule_fields(type(target))):
            try:
                value = getattr(target, declared.name)
            except Exception as exc:  # noqa: BLE001 - rule factory failures are setup errors
                raise RuleConfigurationError(
                    f"Rule field '{declared.name}' could not be created: {exc}"
                ) from exc
            roles = rule_roles(value)
            if not roles:
                raise RuleConfigurationError(
                    f"Rule field '{klass.__name__}.{declared.name}' holds {type(value).__name__}, "
                    "which implements neither apply() nor apply_to_method()"
                )
            declarations.append(
                RuleDeclaration(
                    rule=value,
                    order=declared.order,
                    position=position,
                    field_name=declared.name,
                    declaring_class=klass,
                    roles=roles,
                )
            )
        return declarations

    def collect_by_role(self, target: object) -> dict[RuleRole, list[RuleDeclaration]]:
        grouped: dict[RuleRole, list[RuleDeclaration]] = {RuleRole.CLASS: [], RuleRole.METHOD: []}
        for declaration in self.collect(target):
            for role in (RuleRole.CLASS, RuleRole.METHOD):
                if role in declaration.roles:
                    grouped[role].append(declaration)
        return grouped

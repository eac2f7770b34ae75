from .composer import ComposedRules, RuleChain, RuleChainFactory, RuleComposer, compose_rules, no_rules, order_declarations
from .markers import Marker, after, before, case, get_markers, marker
from .methods import (
    AnnotationPolicy,
    MethodClassifier,
    MethodDescriptor,
    MethodDiscoveryError,
    MethodSorter,
    declaration_order,
    is_test_method,
    resolve_sorter,
    reverse_by_name,
    scan_methods,
    sequence_methods,
    shuffled,
    sort_by_name,
)
from .registry import RuleDeclaration, RuleRegistry
from .results import CollectingResultSink, ExecutionState, MethodResult, ResultSink, RunReport
from .rules import (
    ClassScopedRule,
    Description,
    MethodScopedRule,
    RuleConfigurationError,
    RuleField,
    RuleRole,
    Statement,
    rule,
)
from .runner import PluggableTestRunner

# Kernel exports cover discovery, rule composition and execution.
__all__ = [
    "AnnotationPolicy",
    "ClassScopedRule",
    "CollectingResultSink",
    "ComposedRules",
    "Description",
    "ExecutionState",
    "Marker",
    "MethodClassifier",
    "MethodDescriptor",
    "MethodDiscoveryError",
    "MethodResult",
    "MethodScopedRule",
    "MethodSorter",
    "PluggableTestRunner",
    "RuleChain",
    "RuleChainFactory",
    "RuleComposer",
    "RuleConfigurationError",
    "RuleDeclaration",
    "RuleField",
    "RuleRegistry",
    "ResultSink",
    "RuleRole",
    "RunReport",
    "Statement",
    "after",
    "before",
    "case",
    "compose_rules",
    "declaration_order",
    "get_markers",
    "is_test_method",
    "marker",
    "no_rules",
    "order_declarations",
    "resolve_sorter",
    "reverse_by_name",
    "rule",
    "scan_methods",
    "sequence_methods",
    "shuffled",
    "sort_by_name",
]

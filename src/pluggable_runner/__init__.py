from .kernel import (
    AnnotationPolicy,
    ClassScopedRule,
    CollectingResultSink,
    Description,
    ExecutionState,
    Marker,
    MethodDescriptor,
    MethodResult,
    MethodScopedRule,
    PluggableTestRunner,
    RuleComposer,
    RuleConfigurationError,
    RuleRegistry,
    RunReport,
    after,
    before,
    case,
    declaration_order,
    marker,
    no_rules,
    reverse_by_name,
    rule,
    shuffled,
    sort_by_name,
)

__all__ = [
    "AnnotationPolicy",
    "ClassScopedRule",
    "CollectingResultSink",
    "Description",
    "ExecutionState",
    "Marker",
    "MethodDescriptor",
    "MethodResult",
    "MethodScopedRule",
    "PluggableTestRunner",
    "RuleComposer",
    "RuleConfigurationError",
    "RuleRegistry",
    "RunReport",
    "after",
    "before",
    "case",
    "declaration_order",
    "marker",
    "no_rules",
    "reverse_by_name",
    "rule",
    "shuffled",
    "sort_by_name",
]

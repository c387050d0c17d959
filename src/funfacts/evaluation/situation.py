"""Numeric values of dotted names in a situation.

resolve_value() reads a participant's answer; when the question was
skipped it falls back to resolve_default(), which applies the rule's
applicability guard and default. A default may itself name another
rule, in which case that rule's formula is evaluated.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from funfacts.evaluation.condition import evaluate_condition, to_number
from funfacts.evaluation.namespace import merge
from funfacts.rules.registry import RuleRegistry

DEFAULT_STAGE = "default"


def is_unanswered(raw: Any) -> bool:
    """True for absent answers and placeholder objects (any non-scalar)."""
    return raw is None or not isinstance(raw, (str, int, float))


def resolve_default(
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    *,
    resolving: frozenset[tuple[str, str]] = frozenset(),
) -> float:
    """Return the value used for name when the situation leaves it unanswered."""
    from funfacts.evaluation.formula import evaluate_rule

    rule = rules.get_rule(name)
    if rule is None:
        return 0.0

    key = (DEFAULT_STAGE, name)
    if key in resolving:
        return 0.0
    resolving = resolving | {key}

    if rule.applicable_if is not None and not evaluate_condition(
        rule.applicable_if,
        situation,
        rules,
        namespace=name,
        resolving=resolving,
    ):
        return 0.0

    if isinstance(rule.default, float):
        return rule.default

    if isinstance(rule.default, str):
        return evaluate_rule(
            merge(name, rule.default), situation, rules, resolving=resolving
        )

    # Without a default, an unanswered rule takes the value of its own formula
    return evaluate_rule(name, situation, rules, resolving=resolving)


def resolve_value(
    ref: Any,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    *,
    resolving: frozenset[tuple[str, str]] = frozenset(),
) -> float:
    """Return the numeric value of ref: the answer if usable, else its default."""
    if not isinstance(ref, str) or not ref:
        return 0.0

    raw = situation.get(ref)
    value = None if is_unanswered(raw) else to_number(raw)
    if value is None:
        return resolve_default(ref, situation, rules, resolving=resolving)
    return value

"""Formula evaluator -- computes the numeric value of a dotted name.

Supports the five formula kinds decoded by the rule models:
variations, average, sum, any_of and all_of. evaluate() is the only
entry point callers need; it never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from funfacts.evaluation.condition import evaluate_condition, to_number
from funfacts.evaluation.situation import resolve_value
from funfacts.models.rule import (
    FORMULA_TYPES,
    AllOf,
    AnyOf,
    Average,
    Sum,
    Variations,
)
from funfacts.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)

FORMULA_STAGE = "formula"

Resolving = frozenset[tuple[str, str]]


def _evaluate_variations(
    formula: Variations,
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    resolving: Resolving,
) -> float:
    for clause in formula.clauses:
        if not evaluate_condition(
            clause.condition, situation, rules, namespace=name, resolving=resolving
        ):
            continue
        if isinstance(clause.then, FORMULA_TYPES):
            return evaluate_formula(clause.then, name, situation, rules, resolving)
        value = to_number(clause.then)
        return value if value is not None else 0.0

    if isinstance(formula.otherwise, FORMULA_TYPES):
        return evaluate_formula(formula.otherwise, name, situation, rules, resolving)

    # A bare-number fallback is not applied. The reference engine returns
    # it, so fun facts relying on it differ from the engine's values.
    return 0.0


def _evaluate_average(
    formula: Average,
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    resolving: Resolving,
) -> float:
    # Only the first reference is read; averaging over participants
    # happens in the aggregation step.
    if not formula.refs:
        return 0.0
    return resolve_value(formula.refs[0], situation, rules, resolving=resolving)


def _evaluate_sum(
    formula: Sum,
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    resolving: Resolving,
) -> float:
    return sum(
        resolve_value(ref, situation, rules, resolving=resolving)
        for ref in formula.refs
    )


def _evaluate_any_of(
    formula: AnyOf,
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    resolving: Resolving,
) -> float:
    matched = any(
        evaluate_condition(condition, situation, rules, resolving=resolving)
        for condition in formula.conditions
    )
    return 1.0 if matched else 0.0


def _evaluate_all_of(
    formula: AllOf,
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    resolving: Resolving,
) -> float:
    matched = all(
        evaluate_condition(condition, situation, rules, resolving=resolving)
        for condition in formula.conditions
    )
    return 1.0 if matched else 0.0


FORMULA_EVALUATORS: dict[str, Callable[..., float]] = {
    "variations": _evaluate_variations,
    "average": _evaluate_average,
    "sum": _evaluate_sum,
    "any_of": _evaluate_any_of,
    "all_of": _evaluate_all_of,
}


def evaluate_formula(
    formula: Any,
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    resolving: Resolving = frozenset(),
) -> float:
    """Evaluate a decoded formula held by the rule called name."""
    handler = FORMULA_EVALUATORS.get(getattr(formula, "kind", None))
    if handler is None:
        return 0.0
    return handler(formula, name, situation, rules, resolving)


def evaluate_rule(
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    *,
    resolving: Resolving = frozenset(),
) -> float:
    """Evaluate the rule called name without the error boundary of evaluate().

    Re-entering a rule whose formula is already being evaluated further
    up the call chain yields 0.
    """
    rule = rules.get_rule(name)
    if rule is None:
        return 0.0

    if not rule.has_structured_formula:
        bare = rule.bare_number
        return bare if bare is not None else 0.0

    key = (FORMULA_STAGE, name)
    if key in resolving:
        return 0.0

    return evaluate_formula(rule.formula, name, situation, rules, resolving | {key})


def evaluate(
    name: str,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
) -> float:
    """Compute the value of a dotted name for one participant's situation.

    Args:
        name: Dotted name of the rule to evaluate.
        situation: Participant answers keyed by dotted name. Not mutated.
        rules: The rule registry of the model version in use.

    Returns:
        The computed value. Missing rules, unsupported formulas and any
        unexpected failure all yield 0; failures are logged.
    """
    try:
        return evaluate_rule(name, situation, rules)
    except Exception as exc:
        logger.error(
            "Failed to evaluate %r, using 0",
            name,
            extra={"dotted_name": name, "situation": situation, "error": repr(exc)},
            exc_info=True,
        )
        return 0.0

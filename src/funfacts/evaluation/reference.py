"""Cross-check of the evaluator against reference-engine values.

Reference cases are situations for which the values of some dotted
names were recorded with the full rules engine. Comparing them with
evaluate() catches rules whose shape this evaluator handles differently.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field

from funfacts.evaluation.formula import evaluate
from funfacts.models.rule import FORMULA_TYPES, Variations
from funfacts.rules.registry import RuleRegistry


class ReferenceCase(BaseModel):
    """One situation with the values the reference engine gave for it."""

    model_config = {"extra": "forbid"}

    name: str
    situation: dict[str, Any] = Field(default_factory=dict)
    expected: dict[str, float] = Field(default_factory=dict)


class Mismatch(BaseModel):
    """A dotted name whose evaluated value differs from the reference."""

    case: str
    dotted_name: str
    expected: float
    actual: float
    known_divergence: bool = False


def _has_bare_fallback(formula: Any) -> bool:
    if not isinstance(formula, Variations):
        return False
    if formula.otherwise is not None and not isinstance(
        formula.otherwise, FORMULA_TYPES
    ):
        return True
    nested = [clause.then for clause in formula.clauses] + [formula.otherwise]
    return any(_has_bare_fallback(item) for item in nested)


def has_known_divergence(name: str, rules: RuleRegistry) -> bool:
    """True if name depends on a variations fallback that is a bare value.

    Follows every reference of the rule (formula, default, applicability
    guard) transitively, so a sum over a rule with a bare fallback is
    flagged too.
    """
    from funfacts.loader.lint import iter_references

    pending = [name]
    visited: set[str] = set()
    while pending:
        current = pending.pop()
        if current in visited:
            continue
        visited.add(current)
        rule = rules.get_rule(current)
        if rule is None:
            continue
        if _has_bare_fallback(rule.formula):
            return True
        pending.extend(ref for _, ref in iter_references(current, rule))
    return False


def compare_with_reference(
    cases: Iterable[ReferenceCase],
    rules: RuleRegistry,
    tolerance: float = 1e-9,
) -> list[Mismatch]:
    """Evaluate every expected dotted name of every case and collect differences.

    Args:
        cases: Reference cases to check.
        rules: Rule registry of the model version the cases were
            recorded with.
        tolerance: Absolute and relative tolerance for equality.

    Returns:
        Mismatches in case order; known divergences are flagged rather
        than omitted.
    """
    mismatches: list[Mismatch] = []
    for case in cases:
        for name, expected in case.expected.items():
            actual = evaluate(name, case.situation, rules)
            if math.isclose(actual, expected, rel_tol=tolerance, abs_tol=tolerance):
                continue
            mismatches.append(
                Mismatch(
                    case=case.name,
                    dotted_name=name,
                    expected=expected,
                    actual=actual,
                    known_divergence=has_known_divergence(name, rules),
                )
            )
    return mismatches

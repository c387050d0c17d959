"""Evaluation package for dotted-name formulas and poll statistics.

Provides the formula evaluator, its condition and situation helpers,
fun-facts aggregation, and the reference cross-check.
"""

from __future__ import annotations

from funfacts.evaluation.aggregation import (
    PollStats,
    compute_fun_facts,
    get_fun_fact_value,
    valid_simulations,
)
from funfacts.evaluation.condition import evaluate_condition
from funfacts.evaluation.formula import evaluate
from funfacts.evaluation.namespace import merge
from funfacts.evaluation.reference import (
    Mismatch,
    ReferenceCase,
    compare_with_reference,
)
from funfacts.evaluation.situation import resolve_default, resolve_value

__all__ = [
    "Mismatch",
    "PollStats",
    "ReferenceCase",
    "compare_with_reference",
    "compute_fun_facts",
    "evaluate",
    "evaluate_condition",
    "get_fun_fact_value",
    "merge",
    "resolve_default",
    "resolve_value",
    "valid_simulations",
]

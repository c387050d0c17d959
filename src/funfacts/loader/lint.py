"""Static checks on a decoded rule model.

Lint findings are warnings: the evaluator already degrades to 0 on
unknown references, unsupported mechanisms and cycles, but a model that
triggers them usually produces misleading fun facts.
"""

from __future__ import annotations

import difflib
from collections.abc import Iterator, Mapping
from typing import Any

from funfacts.evaluation.condition import parse_condition
from funfacts.evaluation.namespace import merge
from funfacts.loader.validator import ValidationErrorDetail, make_detail
from funfacts.loader.yaml_parser import LineMap
from funfacts.models.rule import FORMULA_KEYS, AllOf, AnyOf, Average, Rule, Sum, Variations
from funfacts.rules.registry import RuleRegistry

RulePath = tuple[str, ...]


def _condition_ref(expr: Any, namespace: str | None = None) -> str | None:
    parsed = parse_condition(expr)
    if parsed is None:
        return None
    ref = parsed[0]
    return merge(namespace, ref) if namespace is not None else ref


def _formula_references(
    formula: Any,
    name: str,
    path: RulePath,
) -> Iterator[tuple[RulePath, str]]:
    if isinstance(formula, Variations):
        base = (*path, "variations")
        for idx, clause in enumerate(formula.clauses):
            ref = _condition_ref(clause.condition, name)
            if ref:
                yield (*base, str(idx), "si"), ref
            yield from _formula_references(clause.then, name, (*base, str(idx), "alors"))
        yield from _formula_references(
            formula.otherwise, name, (*base, str(len(formula.clauses)), "sinon")
        )
    elif isinstance(formula, (Average, Sum)):
        key = "moyenne" if isinstance(formula, Average) else "somme"
        for idx, ref in enumerate(formula.refs):
            if ref:
                yield (*path, key, str(idx)), ref
    elif isinstance(formula, (AnyOf, AllOf)):
        key = "une de ces conditions" if isinstance(formula, AnyOf) else "toutes ces conditions"
        for idx, condition in enumerate(formula.conditions):
            ref = _condition_ref(condition)
            if ref:
                yield (*path, key, str(idx)), ref


def iter_references(name: str, rule: Rule) -> Iterator[tuple[RulePath, str]]:
    """Yield (path in the model, absolute dotted name) for every reference of a rule."""
    if rule.applicable_if:
        ref = _condition_ref(rule.applicable_if, name)
        if ref:
            yield (name, "applicable si"), ref
    if isinstance(rule.default, str):
        yield (name, "par défaut"), merge(name, rule.default)
    yield from _formula_references(rule.formula, name, (name, "formule"))


def find_cycles(graph: Mapping[str, list[str]]) -> list[list[str]]:
    """Return each distinct reference cycle of graph once, in discovery order."""
    cycles: list[list[str]] = []
    reported: set[frozenset[str]] = set()
    state: dict[str, str] = {}

    for start in graph:
        if start in state:
            continue
        state[start] = "open"
        path = [start]
        stack = [iter(graph[start])]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                state[path.pop()] = "done"
                stack.pop()
                continue
            if child not in graph:
                continue
            if child not in state:
                state[child] = "open"
                path.append(child)
                stack.append(iter(graph[child]))
            elif state[child] == "open":
                cycle = path[path.index(child):]
                key = frozenset(cycle)
                if key not in reported:
                    reported.add(key)
                    cycles.append(cycle)

    return cycles


def lint_rules(
    raw: Mapping[str, Any],
    registry: RuleRegistry,
    line_map: LineMap | None = None,
) -> list[ValidationErrorDetail]:
    """Check a model for unknown references, unsupported mechanisms and cycles.

    Args:
        raw: The model mapping as parsed from the file.
        registry: The registry decoded from raw.
        line_map: Key positions from the parser, if available.

    Returns:
        Warning-severity findings, in model order.
    """
    line_map = line_map or {}
    names = list(registry)
    warnings: list[ValidationErrorDetail] = []
    graph: dict[str, list[str]] = {}

    for name in names:
        rule = registry.get_rule(name)
        if rule is None:
            continue

        raw_rule = raw.get(name)
        raw_formula = raw_rule.get("formule") if isinstance(raw_rule, dict) else None
        if isinstance(raw_formula, dict) and rule.formula is None:
            keys = ", ".join(repr(str(k)) for k in raw_formula)
            suggestion = None
            for key in raw_formula:
                matches = difflib.get_close_matches(str(key), list(FORMULA_KEYS), n=1, cutoff=0.7)
                if matches:
                    suggestion = f"Did you mean '{matches[0]}'?"
                    break
            warnings.append(
                make_detail(
                    (name, "formule"),
                    f"mechanism {keys} is not supported, the rule evaluates to 0",
                    "unsupported_formula",
                    line_map,
                    suggestion=suggestion,
                    severity="warning",
                )
            )

        refs = []
        for path, ref in iter_references(name, rule):
            refs.append(ref)
            if ref in registry:
                continue
            matches = difflib.get_close_matches(ref, names, n=1, cutoff=0.8)
            warnings.append(
                make_detail(
                    path,
                    f"'{ref}' is not a rule of the model",
                    "unknown_reference",
                    line_map,
                    suggestion=f"Did you mean '{matches[0]}'?" if matches else None,
                    severity="warning",
                )
            )
        graph[name] = refs

    for cycle in find_cycles(graph):
        loop = " -> ".join([*cycle, cycle[0]])
        warnings.append(
            make_detail(
                (cycle[0],),
                f"reference cycle {loop}, evaluates to 0 on re-entry",
                "reference_cycle",
                line_map,
                severity="warning",
            )
        )

    return warnings

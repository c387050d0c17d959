"""Boolean condition expressions over a situation.

A condition is either a bare dotted name, true when the participant
answered "oui", or ``<dotted name> <op> <literal>`` with op one of
``<``, ``>``, ``=``. Malformed conditions evaluate to False.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from funfacts.evaluation.namespace import merge
from funfacts.rules.registry import RuleRegistry

YES = "oui"

_OPERATOR_SPLIT = re.compile(r"(\s*[=<>]\s*)")
_NUMERIC = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def to_number(value: Any) -> float | None:
    """Coerce a raw scalar to a finite float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        # Plain ASCII decimals only: no digit separators or non-Latin digits
        if not _NUMERIC.fullmatch(text):
            return None
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def parse_condition(expr: Any) -> tuple[str, str | None, str | None] | None:
    """Split a condition into (ref, operator, literal).

    Returns None when the expression is not a string or does not split
    into a lone reference or exactly reference/operator/literal.

    >>> parse_condition("transport . voiture . km > 1000")
    ('transport . voiture . km', '>', '1000')
    """
    if not isinstance(expr, str):
        return None

    parts = [part for part in _OPERATOR_SPLIT.split(expr) if part]

    if len(parts) == 1:
        ref = parts[0].strip()
        return (ref, None, None) if ref else None

    if len(parts) == 3:
        ref, operator, literal = (part.strip() for part in parts)
        if not ref or not literal:
            return None
        return ref, operator, literal

    return None


def _compare(left: float, operator: str, right: float) -> bool:
    if operator == "<":
        return left < right
    if operator == ">":
        return left > right
    return left == right


def evaluate_condition(
    expr: Any,
    situation: Mapping[str, Any],
    rules: RuleRegistry,
    *,
    namespace: str | None = None,
    resolving: frozenset[tuple[str, str]] = frozenset(),
) -> bool:
    """Evaluate a condition expression against a situation.

    Args:
        expr: The condition string.
        situation: Participant answers keyed by dotted name.
        rules: Rule registry used to resolve defaults of unanswered
            references.
        namespace: Dotted name of the rule holding the condition. When
            given, the reference is merged into that rule's namespace.
        resolving: Rules currently being resolved further up the call
            chain.

    Returns:
        The truth value; False for any malformed or mistyped condition.
    """
    from funfacts.evaluation.situation import resolve_value

    parsed = parse_condition(expr)
    if parsed is None:
        return False

    ref, operator, literal = parsed
    if namespace is not None:
        ref = merge(namespace, ref)

    raw = situation.get(ref)

    if operator is None:
        return raw == YES

    if isinstance(raw, str):
        left: float | str = raw
    else:
        left = resolve_value(ref, situation, rules, resolving=resolving)

    right = to_number(literal)

    if isinstance(left, str):
        # Strings only support equality, and only against string literals
        return right is None and operator == "=" and left == literal

    if right is None:
        return False

    return _compare(left, operator, right)

"""Immutable rule registry keyed by dotted name.

The registry is decoded once per model version and then shared,
read-only, by every evaluation. It is always passed explicitly to the
evaluator; there is no module-level default registry.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from funfacts.models.rule import Rule, as_number


class RuleModelError(Exception):
    """Raised when one or more rules of a model fail to decode.

    Attributes:
        failures: (dotted_name, ValidationError) pairs, in model order.
    """

    def __init__(self, failures: list[tuple[str, ValidationError]]) -> None:
        self.failures = failures
        names = ", ".join(repr(name) for name, _ in failures[:3])
        more = f" (+{len(failures) - 3} more)" if len(failures) > 3 else ""
        super().__init__(f"{len(failures)} invalid rule(s): {names}{more}")


def decode_rule(raw: Any) -> Rule | None:
    """Decode one raw model entry.

    Mappings become a Rule, a bare number becomes a constant-formula
    Rule, anything else (title strings, null) is a bare entry (None).

    Raises:
        ValidationError: If a mapping entry is malformed.
    """
    if isinstance(raw, Rule):
        return raw
    if isinstance(raw, dict):
        return Rule.model_validate(raw)
    number = as_number(raw)
    if number is not None:
        return Rule(formula=number)
    return None


class RuleRegistry(Mapping[str, "Rule | None"]):
    """Read-only mapping from dotted name to decoded rule."""

    def __init__(self, rules: Mapping[str, Rule | None] | None = None) -> None:
        self._rules: Mapping[str, Rule | None] = MappingProxyType(dict(rules or {}))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> RuleRegistry:
        """Decode a raw model mapping into a registry.

        Every entry is decoded before failing, so all invalid rules are
        reported at once.

        Raises:
            RuleModelError: If any entry fails validation.
        """
        rules: dict[str, Rule | None] = {}
        failures: list[tuple[str, ValidationError]] = []
        for name, entry in raw.items():
            try:
                rules[str(name)] = decode_rule(entry)
            except ValidationError as exc:
                failures.append((str(name), exc))
        if failures:
            raise RuleModelError(failures)
        return cls(rules)

    def get_rule(self, name: Any) -> Rule | None:
        """Return the structured rule for name, or None (missing or bare)."""
        if not isinstance(name, str):
            return None
        return self._rules.get(name)

    def __getitem__(self, name: str) -> Rule | None:
        return self._rules[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleRegistry({len(self._rules)} rules)"

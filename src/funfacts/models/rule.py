"""Rule data models for the footprint rule graph.

Rules are decoded once from the model file's publicodes keys into
frozen pydantic models. Formulas become an explicit tagged union
(``kind`` discriminator), so evaluation dispatches on the decoded
shape instead of probing raw dict keys on every call.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator

# Supported publicodes mechanisms, in dispatch priority order
FORMULA_KEYS: dict[str, str] = {
    "variations": "variations",
    "moyenne": "average",
    "somme": "sum",
    "une de ces conditions": "any_of",
    "toutes ces conditions": "all_of",
}


def as_number(value: Any) -> float | None:
    """Return value as a finite float, or None if it is not a real number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return None


def _as_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _tag_variations(items: list[Any]) -> dict[str, Any]:
    clauses: list[dict[str, Any]] = []
    otherwise: Any = None
    for index, item in enumerate(items):
        if isinstance(item, dict) and "si" in item and "alors" in item:
            clauses.append(
                {"condition": _as_text(item["si"]), "then": tag_formula(item["alors"])}
            )
        elif isinstance(item, dict) and "sinon" in item:
            otherwise = tag_formula(item["sinon"])
        else:
            raise ValueError(
                f"variations item {index} must have 'si' and 'alors', or 'sinon'"
            )
    return {"kind": "variations", "clauses": clauses, "otherwise": otherwise}


def tag_formula(raw: Any) -> Any:
    """Convert a raw publicodes formula into the tagged shape the models expect.

    Numbers and strings pass through unchanged. Mappings holding one of
    the supported mechanisms gain a ``kind`` key; any other mapping is an
    expression this evaluator does not handle and becomes None.

    Raises:
        ValueError: If a supported mechanism is malformed (e.g. ``somme``
            is not a list).
    """
    if isinstance(raw, BaseModel):
        return raw
    number = as_number(raw)
    if number is not None:
        return number
    if isinstance(raw, str):
        return raw
    if not isinstance(raw, dict):
        return None

    for key, kind in FORMULA_KEYS.items():
        if key not in raw:
            continue
        items = raw[key]
        if not isinstance(items, list):
            raise ValueError(
                f"'{key}' expects a list, got {type(items).__name__}"
            )
        if kind == "variations":
            return _tag_variations(items)
        if kind in ("average", "sum"):
            return {"kind": kind, "refs": [_as_text(i) for i in items]}
        return {"kind": kind, "conditions": [_as_text(i) for i in items]}

    return None


class Variation(BaseModel):
    """One ``si``/``alors`` clause of a variations formula."""

    model_config = {"extra": "forbid", "frozen": True}

    condition: str | None = None
    then: FormulaValue = None


class Variations(BaseModel):
    """Ordered conditional clauses with a trailing ``sinon`` fallback."""

    model_config = {"extra": "forbid", "frozen": True}

    kind: Literal["variations"] = "variations"
    clauses: tuple[Variation, ...] = ()
    otherwise: FormulaValue = None


class Average(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    kind: Literal["average"] = "average"
    refs: tuple[str | None, ...] = ()


class Sum(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    kind: Literal["sum"] = "sum"
    refs: tuple[str | None, ...] = ()


class AnyOf(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    kind: Literal["any_of"] = "any_of"
    conditions: tuple[str | None, ...] = ()


class AllOf(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    kind: Literal["all_of"] = "all_of"
    conditions: tuple[str | None, ...] = ()


Formula = Annotated[
    Union[Variations, Average, Sum, AnyOf, AllOf],
    Field(discriminator="kind"),
]
FormulaValue = Union[Formula, float, str, None]

FORMULA_TYPES = (Variations, Average, Sum, AnyOf, AllOf)


class Rule(BaseModel):
    """A single rule of the model, keyed by its dotted name in the registry.

    Only the keys the evaluator reads are kept; titles, questions, units
    and the other presentation keys of the model file are ignored.
    """

    model_config = {"extra": "ignore", "frozen": True, "populate_by_name": True}

    applicable_if: str | None = Field(default=None, alias="applicable si")
    default: float | str | None = Field(default=None, alias="par défaut")
    formula: FormulaValue = Field(default=None, alias="formule")

    @field_validator("applicable_if", mode="before")
    @classmethod
    def _applicability_as_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        # Compound guards are not evaluated: the rule is never applicable
        return ""

    @field_validator("default", mode="before")
    @classmethod
    def _default_as_scalar(cls, value: Any) -> Any:
        number = as_number(value)
        if number is not None:
            return number
        return value if isinstance(value, str) else None

    @field_validator("formula", mode="before")
    @classmethod
    def _decode_formula(cls, value: Any) -> Any:
        return tag_formula(value)

    @property
    def has_structured_formula(self) -> bool:
        return isinstance(self.formula, FORMULA_TYPES)

    @property
    def bare_number(self) -> float | None:
        """The formula when it is a plain numeric constant."""
        return self.formula if isinstance(self.formula, float) else None


Variation.model_rebuild()
Variations.model_rebuild()
Rule.model_rebuild()

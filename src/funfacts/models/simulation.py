"""Stored simulation models and situation normalisation.

A simulation is one participant's completed questionnaire: the raw
answers (situation) plus the footprint totals computed when it was
saved. Stored answers come in several shapes (plain scalars, ``valeur``
objects, serialised engine nodes); normalisation collapses them into
plain numbers and strings before evaluation.
"""

from __future__ import annotations

import math
import re
from typing import Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

# Totals above this value are considered corrupted and excluded from stats
MAX_VALUE = 100_000


class ValeurAnswer(BaseModel):
    """Answer stored as ``{valeur, unité}``."""

    model_config = {"extra": "forbid"}

    valeur: float
    unite: str | None = Field(default=None, alias="unité")

    @field_validator("valeur", mode="before")
    @classmethod
    def _strip_spaces(cls, value: Any) -> Any:
        if isinstance(value, str):
            compact = re.sub(r"\s", "", value)
            return float(compact) if compact else 0.0
        return value

    @field_validator("valeur")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("valeur must be a finite number")
        return value


class ConstantNode(BaseModel):
    """Answer stored as a serialised engine constant node."""

    model_config = {"extra": "forbid"}

    type: Literal["number"]
    fullPrecision: bool
    nodeValue: float
    nodeKind: Literal["constant"]
    rawNode: float
    isNullable: bool | None = None
    missingVariables: dict[str, Any] | None = None


class ConstantRawNode(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["constant", "number"]
    nodeValue: float


class ExplanationRawNode(BaseModel):
    model_config = {"extra": "forbid"}

    constant: ConstantRawNode


class UnitExplanation(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["number"]
    fullPrecision: bool
    nodeValue: float
    nodeKind: Literal["constant"]
    rawNode: ExplanationRawNode
    isNullable: bool | None = None
    missingVariables: dict[str, Any] | None = None


class NodeUnit(BaseModel):
    model_config = {"extra": "forbid"}

    numerators: str
    denominators: str | None = None


class UnitNode(BaseModel):
    """Answer stored as a serialised engine unit node wrapping a constant."""

    model_config = {"extra": "forbid"}

    explanation: UnitExplanation
    unit: NodeUnit
    nodeKind: Literal["unité"]
    rawNode: str


StoredAnswer = Union[str, float, ValeurAnswer, ConstantNode, UnitNode]

_SITUATION_ADAPTER: TypeAdapter[dict[str, StoredAnswer]] = TypeAdapter(
    dict[str, StoredAnswer]
)


def _flatten_answer(answer: StoredAnswer) -> float | str:
    if isinstance(answer, ValeurAnswer):
        return answer.valeur
    if isinstance(answer, ConstantNode):
        return answer.nodeValue
    if isinstance(answer, UnitNode):
        return answer.explanation.nodeValue
    return answer


def normalize_situation(raw: Any) -> dict[str, float | str]:
    """Validate a stored situation and collapse every answer to a scalar.

    Raises:
        ValidationError: If the situation is not a mapping or holds an
            answer of an unknown shape.
    """
    parsed = _SITUATION_ADAPTER.validate_python(raw)
    return {name: _flatten_answer(answer) for name, answer in parsed.items()}


class MetricResult(BaseModel):
    """Computed totals for one metric (carbon or water)."""

    model_config = {"extra": "forbid"}

    bilan: float
    categories: dict[str, float] | None = None
    subcategories: dict[str, float] | None = None


class ComputedResults(BaseModel):
    model_config = {"extra": "forbid"}

    carbone: MetricResult
    eau: MetricResult | None = None


class Simulation(BaseModel):
    """A stored simulation ready for aggregation."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    id: str | None = None
    progression: float
    computed_results: ComputedResults = Field(alias="computedResults")
    situation: dict[str, float | str] = Field(default_factory=dict)

    @field_validator("situation", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return normalize_situation(value)


def parse_valid_simulation(
    raw: Any,
    max_value: float = MAX_VALUE,
) -> Simulation | None:
    """Parse a stored simulation, returning None if it must be excluded.

    A simulation is kept only when it is complete (progression of 1),
    its computed results and situation validate, and neither the carbon
    total nor any carbon category exceeds max_value.
    """
    if not isinstance(raw, dict) or raw.get("progression") != 1:
        return None

    try:
        simulation = Simulation.model_validate(raw)
    except ValidationError:
        return None

    carbon = simulation.computed_results.carbone
    values = [carbon.bilan, *(carbon.categories or {}).values()]
    if any(v > max_value for v in values):
        return None

    return simulation

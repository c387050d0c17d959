"""funfacts data models - re-exports all public model classes."""

from funfacts.models.config import ProjectConfig
from funfacts.models.rule import (
    AllOf,
    AnyOf,
    Average,
    Rule,
    Sum,
    Variation,
    Variations,
)
from funfacts.models.simulation import (
    ComputedResults,
    MetricResult,
    Simulation,
    normalize_situation,
    parse_valid_simulation,
)

__all__ = [
    "AllOf",
    "AnyOf",
    "Average",
    "ComputedResults",
    "MetricResult",
    "ProjectConfig",
    "Rule",
    "Simulation",
    "Sum",
    "Variation",
    "Variations",
    "normalize_situation",
    "parse_valid_simulation",
]

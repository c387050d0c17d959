"""Poll-level fun facts computed across participants' situations.

Each fun fact names a dotted name of the model. Its value for a poll is
the sum of that dotted name over every valid simulation, turned into an
average (keys starting with ``average``) or a percentage (keys starting
with ``percentage``) of the number of simulations.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from funfacts.evaluation.formula import evaluate
from funfacts.models.simulation import (
    MAX_VALUE,
    ComputedResults,
    MetricResult,
    Simulation,
    parse_valid_simulation,
)
from funfacts.rules.registry import RuleRegistry


def scale_fun_fact(key: str, total: float, count: int) -> float:
    """Turn a summed value into the published value for fun fact key."""
    if count == 0:
        return 0.0
    if key.startswith("average"):
        return total / count
    if key.startswith("percentage"):
        return total / count * 100
    return total


def get_fun_fact_value(
    name: str,
    situations: Iterable[Mapping[str, Any]],
    rules: RuleRegistry,
) -> float:
    """Sum the value of name over every situation."""
    return sum(evaluate(name, situation, rules) for situation in situations)


def compute_fun_facts(
    situations: list[Mapping[str, Any]],
    fun_facts_rules: Mapping[str, str],
    rules: RuleRegistry,
) -> dict[str, float]:
    """Compute every fun fact of a poll.

    Args:
        situations: One situation per valid simulation.
        fun_facts_rules: Fun fact key -> dotted name.
        rules: Rule registry of the model version in use.

    Returns:
        Fun fact key -> published value. Dotted names missing from the
        registry give 0.
    """
    count = len(situations)
    facts: dict[str, float] = {}
    for key, name in fun_facts_rules.items():
        if name not in rules:
            facts[key] = 0.0
            continue
        total = get_fun_fact_value(name, situations, rules)
        facts[key] = scale_fun_fact(key, total, count)
    return facts


def valid_simulations(
    raw_simulations: Iterable[Any],
    max_value: float = MAX_VALUE,
) -> list[Simulation]:
    """Keep only complete simulations with plausible totals."""
    simulations = []
    for raw in raw_simulations:
        simulation = parse_valid_simulation(raw, max_value=max_value)
        if simulation is not None:
            simulations.append(simulation)
    return simulations


def _combine_values(
    left: dict[str, float] | None,
    right: dict[str, float] | None,
) -> dict[str, float] | None:
    if left is None and right is None:
        return None
    combined = dict(left or {})
    for key, value in (right or {}).items():
        combined[key] = combined.get(key, 0.0) + value
    return combined


def _combine_metrics(
    left: MetricResult | None,
    right: MetricResult | None,
) -> MetricResult | None:
    if left is None:
        return right
    if right is None:
        return left
    return MetricResult(
        bilan=left.bilan + right.bilan,
        categories=_combine_values(left.categories, right.categories),
        subcategories=_combine_values(left.subcategories, right.subcategories),
    )


def _add_metric(
    totals: dict[str, Any] | None,
    metric: MetricResult | None,
) -> dict[str, Any] | None:
    """Add metric into the mutable totals, creating them on first use."""
    if metric is None:
        return totals
    if totals is None:
        totals = {"bilan": 0.0, "categories": None, "subcategories": None}
    totals["bilan"] += metric.bilan
    for field in ("categories", "subcategories"):
        values = getattr(metric, field)
        if values is None:
            continue
        if totals[field] is None:
            totals[field] = {}
        target = totals[field]
        for key, value in values.items():
            target[key] = target.get(key, 0.0) + value
    return totals


def _scale_metric(metric: MetricResult | None, factor: float) -> MetricResult | None:
    if metric is None:
        return None
    return MetricResult(
        bilan=metric.bilan * factor,
        categories=(
            {k: v * factor for k, v in metric.categories.items()}
            if metric.categories is not None
            else None
        ),
        subcategories=(
            {k: v * factor for k, v in metric.subcategories.items()}
            if metric.subcategories is not None
            else None
        ),
    )


class PollStats(BaseModel):
    """Running totals of a poll.

    fun_fact_values holds per dotted name the sum over all simulations
    added so far; computed_results holds the summed footprint totals.
    """

    simulation_count: int = 0
    fun_fact_values: dict[str, float] = Field(default_factory=dict)
    computed_results: ComputedResults | None = None

    @classmethod
    def from_simulations(
        cls,
        simulations: Iterable[Simulation],
        dotted_names: Iterable[str],
        rules: RuleRegistry,
    ) -> PollStats:
        """Aggregate a whole poll in one pass and build the stats once."""
        names = list(dict.fromkeys(dotted_names))
        values = {name: 0.0 for name in names}
        carbone: dict[str, Any] | None = None
        eau: dict[str, Any] | None = None
        count = 0
        for simulation in simulations:
            count += 1
            for name in names:
                values[name] += evaluate(name, simulation.situation, rules)
            carbone = _add_metric(carbone, simulation.computed_results.carbone)
            eau = _add_metric(eau, simulation.computed_results.eau)

        results = None
        if carbone is not None:
            results = ComputedResults(
                carbone=MetricResult.model_validate(carbone),
                eau=MetricResult.model_validate(eau) if eau is not None else None,
            )
        return cls(
            simulation_count=count,
            fun_fact_values=values,
            computed_results=results,
        )

    def add(
        self,
        simulation: Simulation,
        dotted_names: Iterable[str],
        rules: RuleRegistry,
    ) -> PollStats:
        """Return new stats including simulation."""
        values = dict(self.fun_fact_values)
        for name in dict.fromkeys(dotted_names):
            values[name] = values.get(name, 0.0) + evaluate(
                name, simulation.situation, rules
            )

        results = simulation.computed_results
        if self.computed_results is not None:
            results = ComputedResults(
                carbone=_combine_metrics(
                    self.computed_results.carbone, results.carbone
                ),
                eau=_combine_metrics(self.computed_results.eau, results.eau),
            )

        return PollStats(
            simulation_count=self.simulation_count + 1,
            fun_fact_values=values,
            computed_results=results,
        )

    def fun_facts(
        self,
        fun_facts_rules: Mapping[str, str],
        rules: RuleRegistry,
    ) -> dict[str, float]:
        """Derive the published fun facts from the accumulated sums."""
        facts: dict[str, float] = {}
        for key, name in fun_facts_rules.items():
            if name not in rules:
                facts[key] = 0.0
                continue
            total = self.fun_fact_values.get(name, 0.0)
            facts[key] = scale_fun_fact(key, total, self.simulation_count)
        return facts

    def average_computed_results(self) -> ComputedResults | None:
        """Per-participant averages of the footprint totals."""
        if self.computed_results is None or self.simulation_count == 0:
            return None
        factor = 1 / self.simulation_count
        return ComputedResults(
            carbone=_scale_metric(self.computed_results.carbone, factor),
            eau=_scale_metric(self.computed_results.eau, factor),
        )

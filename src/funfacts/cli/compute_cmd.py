"""funfacts compute CLI command: poll fun facts from stored simulations.

Filters out incomplete or implausible simulations, evaluates every
fun fact dotted name for the remaining ones and publishes the scaled
values.
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console

from funfacts.cli.common import load_input_or_exit, load_registry_or_exit, project_config
from funfacts.cli.output import output_json, render_fun_facts
from funfacts.evaluation.aggregation import PollStats, valid_simulations
from funfacts.loader.inputs import load_fun_facts_rules, load_simulations
from funfacts.models.config import resolve_input_path

logger = logging.getLogger(__name__)


def compute(
    rules: Optional[str] = typer.Option(
        None, "--rules", "-r", help="Rule model file (default: rules_file from funfacts.yaml)"
    ),
    fun_facts: Optional[str] = typer.Option(
        None, "--fun-facts", "-f", help="Fun facts file (default: fun_facts_file from funfacts.yaml)"
    ),
    simulations: Optional[str] = typer.Option(
        None, "--simulations", "-s", help="Simulations file (default: simulations_file from funfacts.yaml)"
    ),
    max_value: Optional[float] = typer.Option(
        None, "--max-value", help="Reject simulations with totals above this (default: from funfacts.yaml)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Compute the fun facts of a poll."""
    config, root = project_config()
    registry = load_registry_or_exit(resolve_input_path(rules, config.rules_file, root))
    fun_facts_rules = load_input_or_exit(
        load_fun_facts_rules, resolve_input_path(fun_facts, config.fun_facts_file, root)
    )
    raw = load_input_or_exit(
        load_simulations, resolve_input_path(simulations, config.simulations_file, root)
    )

    threshold = max_value if max_value is not None else config.max_value
    valid = valid_simulations(raw, max_value=threshold)
    excluded = len(raw) - len(valid)
    logger.info("Using %d of %d simulations (%d excluded)", len(valid), len(raw), excluded)

    missing = [name for name in fun_facts_rules.values() if name not in registry]
    for name in missing:
        logger.warning("Fun fact dotted name %r is not in the rule model, using 0", name)

    stats = PollStats.from_simulations(valid, fun_facts_rules.values(), registry)
    facts = stats.fun_facts(fun_facts_rules, registry)

    if json_output:
        averages = stats.average_computed_results()
        output_json(
            {
                "simulationCount": stats.simulation_count,
                "excluded": excluded,
                "funFacts": facts,
                "averageComputedResults": (
                    averages.model_dump(by_alias=True, exclude_none=True)
                    if averages is not None
                    else None
                ),
            }
        )
        return

    render_fun_facts(facts, stats, excluded, Console())

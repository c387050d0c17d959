"""Rich terminal output layer for evaluation results.

Provides fun-facts tables, reference mismatch tables, and pure JSON
output for terminal and CI use.
"""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any

from rich import box
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from funfacts.evaluation.aggregation import PollStats
    from funfacts.evaluation.reference import Mismatch


def _format_value(key: str, value: float) -> str:
    if key.startswith("percentage"):
        return f"{value:.1f} %"
    return f"{value:,.2f}"


def render_fun_facts(
    facts: dict[str, float],
    stats: PollStats,
    excluded: int,
    console: Console,
) -> None:
    """Render the fun facts of a poll with a short participation header.

    Args:
        facts: Fun fact key -> published value.
        stats: Poll totals the facts were derived from.
        excluded: Number of simulations filtered out as invalid.
        console: Rich Console for output.
    """
    header = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    header.add_column("Key", style="bold")
    header.add_column("Value")
    header.add_row("Simulations", str(stats.simulation_count))
    if excluded:
        header.add_row("Excluded", f"[yellow]{excluded} invalid[/yellow]")

    averages = stats.average_computed_results()
    if averages is not None:
        header.add_row("Average footprint", f"{averages.carbone.bilan:,.0f} kgCO2e")

    console.print()
    console.print(header)

    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Fun fact", style="bold")
    table.add_column("Value", justify="right")
    for key, value in facts.items():
        table.add_row(key, _format_value(key, value))
    console.print(table)


def render_mismatches(
    mismatches: list[Mismatch],
    compared: int,
    console: Console,
) -> None:
    """Render reference-check results.

    Known divergences are shown dimmed and do not count as failures.
    """
    unexpected = [m for m in mismatches if not m.known_divergence]
    known = len(mismatches) - len(unexpected)

    if not mismatches:
        console.print(f"[bold green]✓ {compared} values match the reference[/bold green]")
        return

    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Case")
    table.add_column("Dotted name")
    table.add_column("Expected", justify="right")
    table.add_column("Actual", justify="right")
    for m in mismatches:
        style = "dim" if m.known_divergence else ""
        note = " (known)" if m.known_divergence else ""
        table.add_row(
            m.case,
            f"{m.dotted_name}{note}",
            f"{m.expected:g}",
            f"{m.actual:g}",
            style=style,
        )
    console.print(table)

    if unexpected:
        console.print(
            f"[bold red]✗ {len(unexpected)} mismatch(es)[/bold red] "
            f"out of {compared} values ({known} known divergence(s))"
        )
    else:
        console.print(
            f"[bold yellow]~ {known} known divergence(s)[/bold yellow] "
            f"out of {compared} values"
        )


def output_json(payload: Any) -> None:
    """Write payload as pure JSON to stdout.

    No Rich markup, no color, no extra text.
    """
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False))
    sys.stdout.write("\n")

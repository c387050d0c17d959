"""funfacts check CLI command: compare evaluations with reference values."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from funfacts.cli.common import load_input_or_exit, load_registry_or_exit, project_config
from funfacts.cli.output import output_json, render_mismatches
from funfacts.evaluation.reference import compare_with_reference
from funfacts.loader.inputs import load_reference_cases
from funfacts.models.config import resolve_input_path


def check(
    rules: Optional[str] = typer.Option(
        None, "--rules", "-r", help="Rule model file (default: rules_file from funfacts.yaml)"
    ),
    cases: Optional[str] = typer.Option(
        None, "--cases", "-c", help="Reference cases file (default: cases_file from funfacts.yaml)"
    ),
    tolerance: float = typer.Option(1e-9, "--tolerance", help="Relative and absolute tolerance"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Cross-check the evaluator against values recorded with the rules engine.

    Exits with code 1 if any value differs outside known divergences.
    """
    config, root = project_config()
    registry = load_registry_or_exit(resolve_input_path(rules, config.rules_file, root))
    reference_cases = load_input_or_exit(
        load_reference_cases, resolve_input_path(cases, config.cases_file, root)
    )

    mismatches = compare_with_reference(reference_cases, registry, tolerance=tolerance)
    compared = sum(len(case.expected) for case in reference_cases)
    unexpected = [m for m in mismatches if not m.known_divergence]

    if json_output:
        output_json(
            {
                "compared": compared,
                "mismatches": [m.model_dump() for m in mismatches],
                "unexpected": len(unexpected),
            }
        )
    else:
        render_mismatches(mismatches, compared, Console())

    if unexpected:
        raise typer.Exit(code=1)

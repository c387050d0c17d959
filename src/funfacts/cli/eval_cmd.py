"""funfacts eval CLI command: value of one dotted name for one situation."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from funfacts.cli.common import load_input_or_exit, load_registry_or_exit, project_config
from funfacts.cli.output import output_json
from funfacts.evaluation.formula import evaluate
from funfacts.loader.inputs import load_situation
from funfacts.models.config import resolve_input_path
from funfacts.models.simulation import normalize_situation


def eval_name(
    name: str = typer.Argument(..., help="Dotted name to evaluate"),
    situation: str = typer.Option(
        ..., "--situation", "-s", help="Situation file (dotted name -> answer)"
    ),
    rules: Optional[str] = typer.Option(
        None, "--rules", "-r", help="Rule model file (default: rules_file from funfacts.yaml)"
    ),
    stored: bool = typer.Option(
        False,
        "--stored",
        help="Situation uses stored answer shapes ({valeur: ...}, nodes) to flatten first",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Evaluate one dotted name against one situation."""
    config, root = project_config()
    registry = load_registry_or_exit(resolve_input_path(rules, config.rules_file, root))
    answers = load_input_or_exit(load_situation, Path(situation))

    if stored:
        try:
            answers = normalize_situation(answers)
        except ValidationError as e:
            typer.echo(f"Error: {situation}: invalid stored answers ({e.error_count()} error(s))", err=True)
            raise typer.Exit(code=1) from e

    value = evaluate(name, answers, registry)

    if json_output:
        output_json({"dotted_name": name, "value": value, "known": name in registry})
        return

    console = Console()
    if name not in registry:
        console.print(f"[yellow]'{name}' is not in the rule model[/yellow]")
    console.print(f"{name} = {value:g}", markup=False, highlight=False)

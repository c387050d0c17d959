"""Helpers shared by the funfacts subcommands for loading input files.

Input problems are reported on stderr and turned into exit code 1;
tracebacks are never shown for user input errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

import typer
import yaml
from pydantic import ValidationError

from funfacts.loader.errors import ErrorFormatter
from funfacts.loader.inputs import InputFileError
from funfacts.loader.validator import RuleFileError, load_rules_file
from funfacts.models.config import ProjectConfig, find_project_root, load_project_config
from funfacts.rules.registry import RuleRegistry

T = TypeVar("T")


def project_config() -> tuple[ProjectConfig, Path]:
    """Return the project configuration and the directory it was found in."""
    root = find_project_root()
    try:
        return load_project_config(root), root
    except (ValidationError, yaml.YAMLError) as e:
        typer.echo(f"Error: invalid funfacts.yaml in {root}: {e}", err=True)
        raise typer.Exit(code=1) from e


def load_registry_or_exit(path: Path, ci: bool = False) -> RuleRegistry:
    """Load the rule model at path, or print its errors and exit 1."""
    if not path.exists():
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        return load_rules_file(path)
    except RuleFileError as e:
        source = path.read_text(encoding="utf-8")
        formatter = ErrorFormatter(ci_mode=ci)
        typer.echo(formatter.format_all(e.errors, source, str(path)), err=True)
        raise typer.Exit(code=1) from e


def load_input_or_exit(loader: Callable[[Path], T], path: Path) -> T:
    """Run one of the funfacts.loader.inputs loaders, exiting 1 on failure."""
    if not path.exists():
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        return loader(path)
    except InputFileError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


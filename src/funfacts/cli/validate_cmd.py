"""funfacts validate CLI command for rule model validation.

Validates YAML or JSON rule models, reporting all errors at once with
rich or CI-friendly formatting. With --lint, static checks add warnings
for references and mechanisms the evaluator would silently map to 0.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from funfacts.cli.common import project_config
from funfacts.loader.errors import ErrorFormatter
from funfacts.loader.validator import validate_rules_file
from funfacts.models.config import resolve_input_path


def validate(
    files: Optional[list[str]] = typer.Argument(
        None, help="Rule model files to validate (default: rules_file from funfacts.yaml)"
    ),
    ci: bool = typer.Option(False, "--ci", help="CI-friendly concise output"),
    lint: bool = typer.Option(
        False, "--lint", help="Also report unknown references, unsupported mechanisms and cycles"
    ),
) -> None:
    """Validate rule model files.

    Checks syntax and rule decoding, reporting all errors at once.
    Exits with code 0 if all valid, 1 if any errors. Lint warnings are
    reported but never fail the command.
    """
    config, root = project_config()
    formatter = ErrorFormatter(ci_mode=ci or config.ci_mode)

    paths: list[Path] = []
    if files:
        for f in files:
            p = Path(f)
            if not p.exists():
                typer.echo(f"Error: File not found: {f}", err=True)
                raise typer.Exit(code=1)
            paths.append(p)
    else:
        default = resolve_input_path(None, config.rules_file, root)
        if not default.exists():
            typer.echo(
                f"No rule model found at {default}. Specify files or set rules_file in funfacts.yaml."
            )
            raise typer.Exit(code=1)
        paths.append(default)

    total = len(paths)
    valid_count = 0
    error_count = 0
    warning_count = 0

    for filepath in paths:
        source = filepath.read_text(encoding="utf-8")
        registry, findings = validate_rules_file(filepath, lint=lint)

        if registry is None:
            error_count += 1
            typer.echo(formatter.format_all(findings, source, str(filepath)), err=not formatter.ci_mode)
            continue

        valid_count += 1
        formatter.print_success(str(filepath))
        if findings:
            warning_count += len(findings)
            typer.echo(formatter.format_all(findings, source, str(filepath)), err=not formatter.ci_mode)

    summary = f"\n{valid_count}/{total} rule models valid"
    if warning_count:
        summary += f", {warning_count} warning(s)"
    typer.echo(summary)

    if error_count > 0:
        raise typer.Exit(code=1)

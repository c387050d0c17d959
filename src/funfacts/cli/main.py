"""funfacts CLI entry point."""

from typing import Optional

import typer

from funfacts import __version__
from funfacts.cli.check_cmd import check
from funfacts.cli.common import project_config
from funfacts.cli.compute_cmd import compute
from funfacts.cli.eval_cmd import eval_name
from funfacts.cli.validate_cmd import validate
from funfacts.logging_config import setup_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

app = typer.Typer(
    name="funfacts",
    help="Dotted-name formula evaluation for poll fun facts",
    no_args_is_help=True,
)

# Register subcommands
app.command()(check)
app.command()(compute)
app.command(name="eval")(eval_name)
app.command()(validate)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"funfacts {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="DEBUG, INFO, WARNING or ERROR (default: log_level from funfacts.yaml)",
    ),
) -> None:
    """Dotted-name formula evaluation for poll fun facts."""
    if log_level is None:
        config, _ = project_config()
        log_level = config.log_level
    if log_level.upper() not in LOG_LEVELS:
        raise typer.BadParameter(
            f"must be one of {', '.join(LOG_LEVELS)}", param_hint="--log-level"
        )
    setup_logging(log_level)

"""Project configuration model for funfacts.

Captures funfacts.yaml fields with defaults for the model files,
the simulation export and the validity threshold.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from funfacts.models.simulation import MAX_VALUE

CONFIG_FILENAME = "funfacts.yaml"


class ProjectConfig(BaseModel):
    """Project-level configuration loaded from funfacts.yaml."""

    model_config = {"extra": "forbid"}

    rules_file: str = "model/rules.yaml"
    fun_facts_file: str = "model/fun-facts.json"
    simulations_file: str = "simulations.json"
    cases_file: str = "reference-cases.json"
    max_value: float = Field(default=MAX_VALUE, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    ci_mode: bool = False


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default: cwd) looking for funfacts.yaml.

    Returns:
        Path to the directory containing funfacts.yaml, or cwd if none
        is found.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current
        current = current.parent
    return Path.cwd()


def resolve_input_path(
    option: str | None,
    configured: str,
    project_root: Path,
) -> Path:
    """Return the path given on the command line, else the configured one.

    Configured paths are relative to the project root; command-line
    paths are used as given.
    """
    if option is not None:
        return Path(option)
    return project_root / configured


def load_project_config(project_root: Path | None = None) -> ProjectConfig:
    """Load ProjectConfig from funfacts.yaml. Returns defaults if not found."""
    if project_root is None:
        project_root = find_project_root()
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return ProjectConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return ProjectConfig()
    return ProjectConfig.model_validate(raw)

"""Loaders for the evaluator's other input files.

Fun-facts mappings, situations, simulation exports and reference cases
are plain JSON or YAML documents; they are parsed with the same
document parser as rule models and validated with Pydantic adapters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from funfacts.evaluation.reference import ReferenceCase
from funfacts.loader.yaml_parser import DocumentParseError, parse_document_file

_FUN_FACTS_ADAPTER: TypeAdapter[dict[str, str]] = TypeAdapter(dict[str, str])
_SITUATION_ADAPTER: TypeAdapter[dict[str, Any]] = TypeAdapter(dict[str, Any])
_SIMULATIONS_ADAPTER: TypeAdapter[list[Any]] = TypeAdapter(list[Any])
_CASES_ADAPTER: TypeAdapter[list[ReferenceCase]] = TypeAdapter(list[ReferenceCase])


class InputFileError(Exception):
    """Raised when an input file cannot be parsed or has the wrong shape."""

    def __init__(self, filename: str, message: str) -> None:
        self.filename = filename
        self.message = message
        super().__init__(f"{filename}: {message}")


def _load(filepath: Path, adapter: TypeAdapter[Any]) -> Any:
    try:
        document = parse_document_file(filepath)
    except DocumentParseError as e:
        location = f" (line {e.line})" if e.line else ""
        raise InputFileError(str(filepath), f"{e.message}{location}") from e

    try:
        return adapter.validate_python(document.data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        raise InputFileError(
            str(filepath), f"{loc}: {first.get('msg', 'invalid value')}"
        ) from e


def load_fun_facts_rules(filepath: Path) -> dict[str, str]:
    """Load a fun fact key -> dotted name mapping."""
    return _load(filepath, _FUN_FACTS_ADAPTER)


def load_situation(filepath: Path) -> dict[str, Any]:
    """Load a single situation (dotted name -> answer)."""
    return _load(filepath, _SITUATION_ADAPTER)


def load_simulations(filepath: Path) -> list[Any]:
    """Load raw stored simulations; validity filtering happens later."""
    return _load(filepath, _SIMULATIONS_ADAPTER)


def load_reference_cases(filepath: Path) -> list[ReferenceCase]:
    """Load reference cases recorded with the full rules engine."""
    return _load(filepath, _CASES_ADAPTER)

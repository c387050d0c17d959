"""Rule model validation pipeline combining parsing with Pydantic decoding.

Two-stage validation: first parse the model file with line tracking,
then decode every rule into the registry. Errors from both stages are
enriched with source positions and collected for batch reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from funfacts.loader.yaml_parser import (
    DocumentParseError,
    LineMap,
    ParsedDocument,
    parse_document,
    parse_document_file,
)
from funfacts.rules.registry import RuleModelError, RuleRegistry

PATH_SEPARATOR = " / "


@dataclass
class ValidationErrorDetail:
    """A single validation finding with source position and context.

    Attributes:
        field: The rule path that caused the finding, joined for display.
        message: Human-readable description.
        type: Error type string (Pydantic type, or a loader type such as
            'syntax_error', 'duplicate_key', 'unknown_reference').
        line: 1-indexed line number in the source, or None if unknown.
        col: 1-indexed column number in the source, or None if unknown.
        suggestion: 'Did you mean X?' suggestion, or None.
        severity: 'error' findings make the model unusable; 'warning'
            findings are reported but do not block loading.
        path: The rule path as a tuple, used for position lookups.
    """

    field: str
    message: str
    type: str
    line: int | None = None
    col: int | None = None
    suggestion: str | None = None
    severity: Literal["error", "warning"] = "error"
    path: tuple[str, ...] = field(default=())


class RuleFileError(Exception):
    """Raised by load_rules_file when a model file has errors."""

    def __init__(self, filename: str, errors: list[ValidationErrorDetail]) -> None:
        self.filename = filename
        self.errors = errors
        super().__init__(f"{filename}: {len(errors)} error(s)")


def find_line(
    path: tuple[str, ...],
    line_map: LineMap,
) -> tuple[int | None, int | None]:
    """Look up the position of path, falling back to its closest parent."""
    parts = list(path)
    while parts:
        position = line_map.get(tuple(parts))
        if position is not None:
            return position
        parts.pop()
    return None, None


def make_detail(
    path: tuple[str, ...],
    message: str,
    error_type: str,
    line_map: LineMap,
    *,
    suggestion: str | None = None,
    severity: Literal["error", "warning"] = "error",
) -> ValidationErrorDetail:
    line, col = find_line(path, line_map)
    return ValidationErrorDetail(
        field=PATH_SEPARATOR.join(path) or "<model>",
        message=message,
        type=error_type,
        line=line,
        col=col,
        suggestion=suggestion,
        severity=severity,
        path=path,
    )


def validate_rules(
    document: ParsedDocument,
    *,
    lint: bool = False,
) -> tuple[RuleRegistry | None, list[ValidationErrorDetail]]:
    """Decode a parsed model document into a registry.

    Args:
        document: The parsed model file.
        lint: Also run the static checks of funfacts.loader.lint.

    Returns:
        Tuple of (RuleRegistry, warnings) on success, or (None, errors)
        on failure. warnings is empty unless lint is set.
    """
    data = document.data
    if data is None:
        return None, [
            ValidationErrorDetail(
                field="<model>",
                message="Input is empty or contains only comments",
                type="empty_input",
            )
        ]

    if not isinstance(data, dict):
        return None, [
            ValidationErrorDetail(
                field="<model>",
                message=(
                    "A rule model must map dotted names to rules, "
                    f"got {type(data).__name__}"
                ),
                type="model_type",
                line=1,
                col=1,
            )
        ]

    errors = [
        make_detail(
            path,
            f"'{path[-1]}' is defined more than once (again on line {line})",
            "duplicate_key",
            document.line_map,
        )
        for path, line in document.duplicates
        if len(path) == 1
    ]

    registry = None
    try:
        registry = RuleRegistry.from_mapping(data)
    except RuleModelError as exc:
        for name, validation_error in exc.failures:
            for err in validation_error.errors():
                loc = tuple(str(part) for part in err.get("loc", ()))
                errors.append(
                    make_detail(
                        (name, *loc),
                        err.get("msg", "Validation error"),
                        err.get("type", "unknown"),
                        document.line_map,
                    )
                )

    if errors:
        return None, errors

    if lint:
        from funfacts.loader.lint import lint_rules

        return registry, lint_rules(data, registry, document.line_map)
    return registry, []


def _parse_failure(e: DocumentParseError) -> list[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field="<model>",
            message=e.message,
            type="syntax_error",
            line=e.line,
            col=e.column,
        )
    ]


def validate_rules_string(
    source: str,
    filename: str = "<string>",
    *,
    lint: bool = False,
) -> tuple[RuleRegistry | None, list[ValidationErrorDetail]]:
    """Validate a rule model from a string (YAML, or JSON for *.json names)."""
    try:
        document = parse_document(source, filename=filename)
    except DocumentParseError as e:
        return None, _parse_failure(e)
    return validate_rules(document, lint=lint)


def validate_rules_file(
    filepath: Path,
    *,
    lint: bool = False,
) -> tuple[RuleRegistry | None, list[ValidationErrorDetail]]:
    """Validate a rule model file, returning all errors at once."""
    try:
        document = parse_document_file(filepath)
    except DocumentParseError as e:
        return None, _parse_failure(e)
    return validate_rules(document, lint=lint)


def load_rules_file(filepath: Path) -> RuleRegistry:
    """Load a rule model file into a registry.

    Raises:
        RuleFileError: If the file cannot be parsed or a rule is invalid.
        FileNotFoundError: If the file does not exist.
    """
    registry, errors = validate_rules_file(filepath)
    if registry is None:
        raise RuleFileError(str(filepath), errors)
    return registry

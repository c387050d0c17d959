"""Error formatter with dual-mode output (rich human and CI concise).

Produces Rust/Elm-style annotated messages in human mode and concise
file:line:col -- message lines in CI mode.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from funfacts.loader.validator import ValidationErrorDetail


# Map error types to error codes
ERROR_CODES: dict[str, str] = {
    "syntax_error": "E001",
    "empty_input": "E002",
    "model_type": "E003",
    "duplicate_key": "E004",
    "value_error": "E005",
    "float_type": "E006",
    "float_parsing": "E006",
    "string_type": "E006",
    "literal_error": "E006",
    "unknown_reference": "W001",
    "unsupported_formula": "W002",
    "reference_cycle": "W003",
}

# Human-readable descriptions for error codes
ERROR_DESCRIPTIONS: dict[str, str] = {
    "E001": "syntax error",
    "E002": "empty input",
    "E003": "not a rule model",
    "E004": "duplicate rule",
    "E005": "invalid formula",
    "E006": "type mismatch",
    "W001": "unknown reference",
    "W002": "unsupported mechanism",
    "W003": "reference cycle",
}


class ErrorFormatter:
    """Formats validation findings for human or CI consumption.

    Args:
        ci_mode: If True, use CI-friendly concise output. If None,
            auto-detect from the CI environment variable.
    """

    def __init__(self, ci_mode: bool | None = None) -> None:
        if ci_mode is None:
            self.ci_mode = os.environ.get("CI", "").lower() in ("true", "1", "yes")
        else:
            self.ci_mode = ci_mode

    def _get_error_code(self, error: ValidationErrorDetail) -> str:
        if error.type in ERROR_CODES:
            return ERROR_CODES[error.type]
        # Pydantic types such as 'float_parsing' fall back on their family
        for key, code in ERROR_CODES.items():
            if key.split("_")[0] in error.type:
                return code
        return "W999" if error.severity == "warning" else "E999"

    def format_error(
        self,
        error: ValidationErrorDetail,
        source_lines: list[str],
        filename: str,
    ) -> str:
        """Format a single finding for display."""
        if self.ci_mode:
            return self._format_ci(error, filename)
        return self._format_rich(error, source_lines, filename)

    def _format_ci(self, error: ValidationErrorDetail, filename: str) -> str:
        """Format: filename:line:col -- severity: field: message (suggestion)"""
        line = error.line if error.line is not None else 0
        col = error.col if error.col is not None else 0
        suggestion_suffix = f" ({error.suggestion})" if error.suggestion else ""
        return (
            f"{filename}:{line}:{col} -- {error.severity}: "
            f"{error.field}: {error.message}{suggestion_suffix}"
        )

    def _format_rich(
        self,
        error: ValidationErrorDetail,
        source_lines: list[str],
        filename: str,
    ) -> str:
        """Format a finding with an annotated source snippet.

        Produces output like:
            error[E005]: invalid formula
              --> rules.yaml:3:3
               |
             3 |   formule:
               |   ^^^^^^^ Value error, 'somme' expects a list, got int
               |
        """
        error_code = self._get_error_code(error)
        description = ERROR_DESCRIPTIONS.get(error_code, "validation error")

        lines = [f"{error.severity}[{error_code}]: {description}"]

        if error.line is not None:
            col = error.col if error.col is not None else 1
            lines.append(f"  --> {filename}:{error.line}:{col}")
            lines.append("   |")

            line_idx = error.line - 1
            if 0 <= line_idx < len(source_lines):
                src_line = source_lines[line_idx].rstrip()
                line_num_str = str(error.line)
                padding = " " * len(line_num_str)
                lines.append(f" {line_num_str} | {src_line}")

                marker = error.path[-1] if error.path else ""
                marker_start = src_line.find(marker) if marker else -1
                if marker_start >= 0:
                    arrows = "^" * len(marker)
                    lines.append(
                        f" {padding} | {' ' * marker_start}{arrows} {error.message}"
                    )
                else:
                    lines.append(f" {padding} | {error.message}")
            else:
                lines.append(f"   | {error.message}")

            lines.append("   |")
        else:
            lines.append(f"  --> {filename}")
            lines.append("   |")
            lines.append(f"   | {error.field}: {error.message}")
            lines.append("   |")

        if error.suggestion:
            lines.append(f"   = help: {error.suggestion}")

        return "\n".join(lines)

    def format_all(
        self,
        errors: list[ValidationErrorDetail],
        source: str,
        filename: str,
    ) -> str:
        """Format all findings, separated by blank lines."""
        source_lines = source.splitlines()
        return "\n\n".join(
            self.format_error(error, source_lines, filename) for error in errors
        )

    def print_errors(
        self,
        errors: list[ValidationErrorDetail],
        source: str,
        filename: str,
    ) -> None:
        """Print formatted findings to stderr."""
        print(self.format_all(errors, source, filename), file=sys.stderr)

    def print_success(self, filename: str) -> None:
        print(f"  {filename} ... valid")

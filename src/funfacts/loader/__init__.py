"""funfacts loader - parsing, validation, and error reporting."""

from funfacts.loader.inputs import (
    InputFileError,
    load_fun_facts_rules,
    load_reference_cases,
    load_simulations,
    load_situation,
)
from funfacts.loader.validator import (
    RuleFileError,
    ValidationErrorDetail,
    load_rules_file,
    validate_rules_file,
    validate_rules_string,
)
from funfacts.loader.yaml_parser import (
    DocumentParseError,
    parse_document_file,
    parse_yaml_with_lines,
)

__all__ = [
    "DocumentParseError",
    "InputFileError",
    "RuleFileError",
    "ValidationErrorDetail",
    "load_fun_facts_rules",
    "load_reference_cases",
    "load_rules_file",
    "load_simulations",
    "load_situation",
    "parse_document_file",
    "parse_yaml_with_lines",
    "validate_rules_file",
    "validate_rules_string",
]

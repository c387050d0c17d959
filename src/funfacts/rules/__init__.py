"""Rule registry package."""

from funfacts.rules.registry import RuleModelError, RuleRegistry, decode_rule

__all__ = ["RuleModelError", "RuleRegistry", "decode_rule"]

"""Tests for situation value and default resolution."""

import pytest

from funfacts.evaluation.situation import is_unanswered, resolve_default, resolve_value
from funfacts.rules.registry import RuleRegistry


def make_rules(raw):
    return RuleRegistry.from_mapping(raw)


class TestIsUnanswered:
    """Tests for is_unanswered."""

    @pytest.mark.parametrize("raw", [None, {}, {"valeur": 3}, [1, 2]])
    def test_placeholders(self, raw):
        assert is_unanswered(raw) is True

    @pytest.mark.parametrize("raw", ["oui", "", 0, 3.5])
    def test_scalars(self, raw):
        assert is_unanswered(raw) is False


class TestResolveValue:
    """Tests for resolve_value."""

    def test_numeric_answer(self):
        assert resolve_value("a", {"a": 12}, RuleRegistry()) == 12.0

    def test_numeric_string_answer(self):
        assert resolve_value("a", {"a": "12.5"}, RuleRegistry()) == 12.5

    def test_default_when_absent(self):
        rules = make_rules({"x": {"par défaut": 2}})
        assert resolve_value("x", {}, rules) == 2

    def test_default_when_placeholder(self):
        rules = make_rules({"x": {"par défaut": 2}})
        assert resolve_value("x", {"x": {}}, rules) == 2

    def test_default_when_not_numeric(self):
        rules = make_rules({"x": {"par défaut": 2}})
        assert resolve_value("x", {"x": "beaucoup"}, rules) == 2

    def test_default_when_not_finite(self):
        rules = make_rules({"x": {"par défaut": 2}})
        assert resolve_value("x", {"x": float("nan")}, rules) == 2

    def test_answer_takes_precedence_over_default(self):
        rules = make_rules({"x": {"par défaut": 2}})
        assert resolve_value("x", {"x": 7}, rules) == 7

    @pytest.mark.parametrize("ref", [None, "", 3, ["x"]])
    def test_invalid_reference_is_zero(self, ref):
        rules = make_rules({"x": {"par défaut": 2}})
        assert resolve_value(ref, {}, rules) == 0

    def test_unknown_reference_is_zero(self):
        assert resolve_value("nope", {}, RuleRegistry()) == 0

    def test_situation_is_not_mutated(self):
        rules = make_rules({"x": {"par défaut": 2}})
        situation = {"y": "oui"}
        resolve_value("x", situation, rules)
        assert situation == {"y": "oui"}


class TestResolveDefault:
    """Tests for resolve_default."""

    def test_missing_rule_is_zero(self):
        assert resolve_default("x", {}, RuleRegistry()) == 0

    def test_bare_entry_is_zero(self):
        rules = make_rules({"transport": "Transport", "vide": None})
        assert resolve_default("transport", {}, rules) == 0
        assert resolve_default("vide", {}, rules) == 0

    def test_guard_false_short_circuits(self):
        rules = make_rules({"x": {"applicable si": "y", "par défaut": 2}})
        assert resolve_value("x", {"y": "non"}, rules) == 0

    def test_guard_true_uses_default(self):
        rules = make_rules({"x": {"applicable si": "y", "par défaut": 2}})
        assert resolve_value("x", {"y": "oui"}, rules) == 2

    def test_guard_is_merged_with_rule_namespace(self):
        rules = make_rules(
            {"logement . piscine . volume": {"applicable si": "piscine . présent", "par défaut": 40}}
        )
        situation = {"logement . piscine . présent": "oui"}
        assert resolve_default("logement . piscine . volume", situation, rules) == 40

    def test_compound_guard_is_never_applicable(self):
        rules = make_rules(
            {"x": {"applicable si": {"toutes ces conditions": ["y"]}, "par défaut": 2}}
        )
        assert resolve_default("x", {"y": "oui"}, rules) == 0

    def test_reference_default_evaluates_merged_rule(self):
        rules = make_rules(
            {
                "a . b": {"par défaut": "c"},
                "a . c": {"formule": {"somme": ["d", "e"]}},
            }
        )
        assert resolve_value("a . b", {"d": 3, "e": 4}, rules) == 7

    def test_reference_default_to_constant_rule(self):
        rules = make_rules({"a . b": {"par défaut": "c"}, "a . c": 12})
        assert resolve_default("a . b", {}, rules) == 12

    def test_no_default_uses_own_formula(self):
        rules = make_rules({"b": {"formule": 5}})
        assert resolve_default("b", {}, rules) == 5

    def test_no_default_no_formula_is_zero(self):
        rules = make_rules({"b": {"titre": "B"}})
        assert resolve_default("b", {}, rules) == 0

    def test_self_referencing_default_is_zero(self):
        rules = make_rules({"a": {"par défaut": "a"}})
        assert resolve_default("a", {}, rules) == 0

    def test_mutual_defaults_terminate(self):
        rules = make_rules({"a": {"par défaut": "b"}, "b": {"par défaut": "a"}})
        assert resolve_value("a", {}, rules) == 0

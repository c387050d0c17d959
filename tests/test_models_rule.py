"""Tests for funfacts.models.rule - formula decoding and the Rule model."""

import pytest
from pydantic import ValidationError

from funfacts.models.rule import (
    AllOf,
    AnyOf,
    Average,
    Rule,
    Sum,
    Variations,
    as_number,
    tag_formula,
)


class TestAsNumber:
    """Tests for as_number."""

    def test_int_and_float(self):
        assert as_number(3) == 3.0
        assert as_number(2.5) == 2.5

    def test_rejects_bool_and_strings(self):
        assert as_number(True) is None
        assert as_number("3") is None

    def test_rejects_non_finite(self):
        assert as_number(float("inf")) is None
        assert as_number(float("nan")) is None


class TestTagFormula:
    """Tests for tag_formula."""

    def test_number_passes_through_as_float(self):
        assert tag_formula(4) == 4.0

    def test_string_passes_through(self):
        assert tag_formula("a * b") == "a * b"

    def test_sum(self):
        assert tag_formula({"somme": ["a", "b"]}) == {"kind": "sum", "refs": ["a", "b"]}

    def test_average(self):
        assert tag_formula({"moyenne": ["a"]}) == {"kind": "average", "refs": ["a"]}

    def test_condition_lists(self):
        assert tag_formula({"une de ces conditions": ["a"]})["kind"] == "any_of"
        assert tag_formula({"toutes ces conditions": ["a"]})["kind"] == "all_of"

    def test_non_string_items_become_none(self):
        assert tag_formula({"somme": ["a", 3]}) == {"kind": "sum", "refs": ["a", None]}

    def test_variations(self):
        tagged = tag_formula(
            {"variations": [{"si": "x", "alors": 1}, {"sinon": {"somme": ["y"]}}]}
        )
        assert tagged == {
            "kind": "variations",
            "clauses": [{"condition": "x", "then": 1.0}],
            "otherwise": {"kind": "sum", "refs": ["y"]},
        }

    def test_variations_mechanism_wins_over_later_keys(self):
        tagged = tag_formula({"somme": ["a"], "variations": []})
        assert tagged["kind"] == "variations"

    def test_unknown_mechanism_is_none(self):
        assert tag_formula({"produit": {"assiette": "a"}}) is None

    def test_other_values_are_none(self):
        assert tag_formula(None) is None
        assert tag_formula(True) is None
        assert tag_formula([1, 2]) is None

    def test_mechanism_must_be_a_list(self):
        with pytest.raises(ValueError, match="'somme' expects a list"):
            tag_formula({"somme": "a"})

    def test_malformed_variations_item(self):
        with pytest.raises(ValueError, match="variations item 1"):
            tag_formula({"variations": [{"si": "x", "alors": 1}, {"alors": 2}]})


class TestRule:
    """Tests for the Rule model."""

    def test_decodes_publicodes_keys(self):
        rule = Rule.model_validate(
            {
                "titre": "Volume",
                "applicable si": "piscine",
                "par défaut": 40,
                "formule": {"somme": ["a", "b"]},
            }
        )
        assert rule.applicable_if == "piscine"
        assert rule.default == 40.0
        assert isinstance(rule.formula, Sum)
        assert rule.formula.refs == ("a", "b")
        assert rule.has_structured_formula is True
        assert rule.bare_number is None

    def test_empty_rule(self):
        rule = Rule.model_validate({})
        assert rule.applicable_if is None
        assert rule.default is None
        assert rule.formula is None
        assert rule.has_structured_formula is False

    def test_numeric_formula(self):
        rule = Rule.model_validate({"formule": 7})
        assert rule.bare_number == 7.0
        assert rule.has_structured_formula is False

    def test_string_default_is_a_reference(self):
        rule = Rule.model_validate({"par défaut": "voiture . km"})
        assert rule.default == "voiture . km"

    def test_non_scalar_default_is_dropped(self):
        rule = Rule.model_validate({"par défaut": {"valeur": 3}})
        assert rule.default is None

    def test_compound_guard_becomes_empty(self):
        rule = Rule.model_validate({"applicable si": {"toutes ces conditions": ["a"]}})
        assert rule.applicable_if == ""

    def test_nested_variations(self):
        rule = Rule.model_validate(
            {
                "formule": {
                    "variations": [
                        {"si": "a", "alors": {"moyenne": ["b"]}},
                        {"si": "c", "alors": {"une de ces conditions": ["d"]}},
                        {"sinon": {"toutes ces conditions": ["e"]}},
                    ]
                }
            }
        )
        assert isinstance(rule.formula, Variations)
        first, second = rule.formula.clauses
        assert first.condition == "a"
        assert isinstance(first.then, Average)
        assert first.then.refs == ("b",)
        assert isinstance(second.then, AnyOf)
        assert second.then.conditions == ("d",)
        assert isinstance(rule.formula.otherwise, AllOf)
        assert rule.formula.otherwise.conditions == ("e",)

    def test_malformed_mechanism_is_a_validation_error(self):
        with pytest.raises(ValidationError, match="expects a list"):
            Rule.model_validate({"formule": {"moyenne": 3}})

    def test_populate_by_field_name(self):
        rule = Rule(formula=2, default=1)
        assert rule.formula == 2.0
        assert rule.default == 1.0

    def test_rule_is_frozen(self):
        rule = Rule.model_validate({"formule": 1})
        with pytest.raises(ValidationError):
            rule.formula = 2.0

"""
Tests for the condition vocabulary.

These tests verify:
    - Condition and Rule objects can be created and are immutable
    - Every operator spelling the product has used maps to one Operator
    - The operator table knows which operators need a comparison value
    - Editor-side condition checks
"""

import pytest
from formlogic.conditions import (
    MISSING_TRIGGER,
    MISSING_VALUE,
    OPERATORS,
    UNKNOWN_OPERATOR,
    UNKNOWN_TRIGGER,
    Combinator,
    Condition,
    Operator,
    Rule,
    all_of,
    any_of,
    check_condition,
    normalize_combinator,
    normalize_operator,
    requires_value,
)


class TestCondition:
    """Test Condition objects."""

    def test_create_condition(self):
        """Should store trigger, operator and value."""
        cond = Condition("age", Operator.GREATER_THAN, "18")
        assert cond.trigger_field_id == "age"
        assert cond.operator == Operator.GREATER_THAN
        assert cond.value == "18"
        assert cond.combinator == Combinator.AND

    def test_condition_immutable(self):
        """Conditions should be immutable."""
        cond = Condition("age", Operator.EQUALS, "1")
        with pytest.raises(AttributeError):
            cond.value = "2"

    def test_operator_name_for_unknown_operator(self):
        """Unknown operators are kept as raw strings."""
        cond = Condition("age", "roughly", "18")
        assert cond.operator_name == "roughly"
        assert Condition("age", Operator.IN_LIST).operator_name == "in-list"


class TestRule:
    """Test Rule objects."""

    def test_rule_converts_list_to_tuple(self):
        """Conditions given as a list are stored as a tuple."""
        rule = Rule([Condition("a", Operator.EQUALS, "1")])
        assert isinstance(rule.conditions, tuple)
        assert len(rule) == 1

    def test_empty_rule(self):
        """An empty rule is allowed structurally."""
        assert len(Rule()) == 0

    def test_all_of_and_any_of(self):
        """Helpers set the combinator on every condition."""
        a = Condition("a", Operator.EQUALS, "1")
        b = Condition("b", Operator.EQUALS, "2")
        assert [c.combinator for c in all_of(a, b)] == [Combinator.AND, Combinator.AND]
        assert [c.combinator for c in any_of(a, b)] == [Combinator.OR, Combinator.OR]

    def test_trigger_field_ids_deduplicated(self):
        """Referenced fields are listed once, in order."""
        rule = any_of(
            Condition("b", Operator.EQUALS, "1"),
            Condition("a", Operator.EQUALS, "1"),
            Condition("b", Operator.EQUALS, "2"),
        )
        assert rule.trigger_field_ids == ["b", "a"]


class TestOperatorTable:
    """Test the static operator table."""

    def test_every_operator_has_a_spec(self):
        """Each Operator member must have exactly one table entry."""
        assert set(OPERATORS) == set(Operator)

    @pytest.mark.parametrize("name", [
        "is-empty", "is-not-empty", "is-selected", "is-not-selected", "has-any-value",
    ])
    def test_value_free_operators(self, name):
        """Emptiness-style operators take no comparison value."""
        assert requires_value(name) is False

    @pytest.mark.parametrize("name", ["equals", "has-specific-value", "in-list", "greater-than"])
    def test_value_operators(self, name):
        """Comparison operators need a value."""
        assert requires_value(name) is True

    def test_unknown_operator_requires_nothing(self):
        """Unknown operators never demand a value."""
        assert requires_value("bogus") is False


class TestNormalizeOperator:
    """Test alias normalization across the product's vocabularies."""

    @pytest.mark.parametrize("alias,expected", [
        ("eq", Operator.EQUALS),
        ("is equal to", Operator.EQUALS),
        ("EQUALS", Operator.EQUALS),
        ("neq", Operator.NOT_EQUALS),
        ("is not equal to", Operator.NOT_EQUALS),
        ("does not contain", Operator.NOT_CONTAINS),
        ("not_contains", Operator.NOT_CONTAINS),
        ("gt", Operator.GREATER_THAN),
        ("is greater than", Operator.GREATER_THAN),
        ("lt", Operator.LESS_THAN),
        ("greater_or_equal", Operator.GREATER_EQUAL),
        ("<=", Operator.LESS_EQUAL),
        ("is empty", Operator.IS_EMPTY),
        ("is not empty", Operator.IS_NOT_EMPTY),
        ("in", Operator.IN_LIST),
        ("Has Any Value", Operator.HAS_ANY_VALUE),
        ("has_specific_value", Operator.HAS_SPECIFIC_VALUE),
        ("starts with", Operator.STARTS_WITH),
    ])
    def test_aliases(self, alias, expected):
        """Each known spelling maps to its operator."""
        assert normalize_operator(alias) == expected

    def test_enum_passes_through(self):
        """Operator members are returned unchanged."""
        assert normalize_operator(Operator.IS_SELECTED) is Operator.IS_SELECTED

    @pytest.mark.parametrize("bad", [None, "", "   ", "approximately", 42])
    def test_unknown_returns_none(self, bad):
        """Unknown or non-string names give None."""
        assert normalize_operator(bad) is None


class TestNormalizeCombinator:
    def test_or_spellings(self):
        """OR is recognised in any case and with padding."""
        assert normalize_combinator("or") is Combinator.OR
        assert normalize_combinator(" OR ") is Combinator.OR

    def test_everything_else_is_and(self):
        """Anything that is not OR folds as AND."""
        assert normalize_combinator(None) is Combinator.AND
        assert normalize_combinator("and") is Combinator.AND
        assert normalize_combinator("xor") is Combinator.AND


class TestCheckCondition:
    """Test editor-side condition checks."""

    def test_well_formed(self):
        """A complete condition has no problems."""
        cond = Condition("age", Operator.GREATER_THAN, "18")
        assert check_condition(cond, {"age"}) == []

    def test_missing_trigger(self):
        """An empty trigger field is reported."""
        codes = [p.code for p in check_condition(Condition("", Operator.IS_EMPTY))]
        assert codes == [MISSING_TRIGGER]

    def test_unknown_trigger(self):
        """A trigger outside the known fields is reported."""
        codes = [p.code for p in check_condition(Condition("ghost", Operator.IS_EMPTY), ["age"])]
        assert codes == [UNKNOWN_TRIGGER]

    def test_unknown_operator(self):
        """An unknown operator is reported by name."""
        problems = check_condition(Condition("age", "about", "18"))
        assert [p.code for p in problems] == [UNKNOWN_OPERATOR]
        assert "about" in problems[0].message

    def test_missing_value(self):
        """has-specific-value must carry a value, is-empty must not need one."""
        assert [p.code for p in check_condition(Condition("pet", Operator.HAS_SPECIFIC_VALUE, " "))] == [
            MISSING_VALUE
        ]
        assert check_condition(Condition("pet", Operator.IS_EMPTY)) == []

    def test_zero_is_a_value(self):
        """0 is an acceptable comparison value."""
        assert check_condition(Condition("n", Operator.EQUALS, 0)) == []

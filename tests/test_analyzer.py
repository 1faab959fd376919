"""
Tests for the Form Analyzer.

Tests verify that the analyzer correctly:
    - Counts pages, fields, rules and conditions
    - Detects duplicate ids and dangling references
    - Flags unknown operators and missing comparison values
    - Finds skip cycles
    - Warns about required fields that are only shown behind rules
"""

from formlogic.analyzer import analyze_form
from formlogic.conditions import Condition, Operator, Rule
from formlogic.examples import build_age_gate_form, build_example_pet_form
from formlogic.model import (
    Field,
    FieldType,
    FormDefinition,
    HidePageRule,
    Page,
    SkipRule,
    VisibilityAction,
    VisibilityRule,
)


def when(field_id, op, value=None):
    return Rule((Condition(field_id, op, value),))


def choice(field_id):
    return Field(id=field_id, type=FieldType.RADIO, options=["yes", "no"])


def test_example_pet_form_is_valid():
    """The shipped example must pass its own save-time checks."""
    report = analyze_form(build_example_pet_form())

    assert report.is_valid
    assert report.form_name == "Pet Owner Survey"
    assert report.total_pages == 4
    assert report.total_fields == 10
    assert report.total_rules == 5
    assert report.total_conditions == 6
    assert not report.has_skip_cycle
    assert report.conditional_required_fields == ["petName", "petType", "petOther"]
    assert "Required only when shown: petName, petType, petOther" in report.warnings


def test_non_choice_trigger_warning():
    """A number field as trigger is allowed but flagged."""
    report = analyze_form(build_age_gate_form())

    assert report.is_valid
    assert any("trigger field 'age' of type 'number'" in w for w in report.warnings)


def test_duplicate_ids():
    """Repeated field and page ids are errors."""
    form = FormDefinition(name="Dupes", pages=[
        Page(id="p", fields=[Field(id="a"), Field(id="a")]),
        Page(id="p"),
    ])

    report = analyze_form(form)

    assert report.duplicate_field_ids == {"a"}
    assert report.duplicate_page_ids == {"p"}
    assert not report.is_valid


def test_undefined_trigger_field():
    """Should detect conditions on fields that do not exist."""
    form = FormDefinition(pages=[Page(id="p", fields=[
        Field(id="x", visibility_rules=[VisibilityRule(rule=when("ghost", Operator.IS_EMPTY))]),
    ])])

    report = analyze_form(form)

    assert report.undefined_trigger_fields == {"ghost"}
    assert "Conditions reference unknown fields: ghost" in report.errors


def test_empty_trigger_field():
    """A condition without a trigger field is reported as <empty>."""
    form = FormDefinition(pages=[Page(id="p", fields=[
        Field(id="x", visibility_rules=[VisibilityRule(rule=when("", Operator.IS_EMPTY))]),
    ])])

    assert analyze_form(form).undefined_trigger_fields == {"<empty>"}


def test_dangling_targets():
    """Rules pointing at missing fields or pages are errors."""
    form = FormDefinition(pages=[
        Page(
            id="p",
            fields=[
                choice("q"),
                Field(id="x", visibility_rules=[
                    VisibilityRule(rule=when("q", Operator.EQUALS, "yes"), target_field_id="nobody"),
                ]),
            ],
            skip_rules=[SkipRule(rule=when("q", Operator.EQUALS, "no"), target_page_id="gone")],
            hide_rules=[HidePageRule(rule=when("q", Operator.EQUALS, "no"), target_page_id="lost")],
        ),
    ])

    report = analyze_form(form)

    assert report.dangling_field_targets == {"nobody"}
    assert report.dangling_page_targets == {"gone", "lost"}
    assert not report.is_valid


def test_unknown_operator_and_missing_value():
    """Unknown operators and blank comparison values are errors."""
    form = FormDefinition(pages=[Page(id="p", fields=[
        choice("q"),
        Field(id="x", visibility_rules=[
            VisibilityRule(rule=when("q", "roughly", "yes")),
            VisibilityRule(rule=when("q", Operator.EQUALS, "")),
        ]),
    ])])

    report = analyze_form(form)

    assert report.unknown_operators == {"roughly"}
    assert report.missing_values == ["field 'x' rule 2"]
    assert "field 'x' rule 2: comparison value missing" in report.errors


def test_empty_rule_is_a_warning():
    """A rule with no conditions only warns."""
    form = FormDefinition(pages=[Page(id="p", fields=[
        Field(id="x", visibility_rules=[VisibilityRule(rule=Rule(), action=VisibilityAction.HIDE)]),
    ])])

    report = analyze_form(form)

    assert report.is_valid
    assert report.empty_rules == ["field 'x' rule 1"]
    assert report.total_conditions == 0


def test_skip_cycle():
    """A skips to B and B back to A."""
    go = when("go", Operator.EQUALS, "yes")
    form = FormDefinition(pages=[
        Page(id="A", fields=[choice("go")], skip_rules=[SkipRule(rule=go, target_page_id="B")]),
        Page(id="B", skip_rules=[SkipRule(rule=go, target_page_id="A")]),
    ])

    report = analyze_form(form)

    assert report.has_skip_cycle
    assert report.cycle_example == ["A", "B", "A"]
    assert "Skip cycle: A -> B -> A" in report.warnings
    assert report.is_valid


def test_self_skip():
    """A page skipping to itself is a one-page cycle."""
    go = when("go", Operator.EQUALS, "yes")
    form = FormDefinition(pages=[
        Page(id="A", fields=[choice("go")], skip_rules=[SkipRule(rule=go, target_page_id="A")]),
    ])

    report = analyze_form(form)

    assert report.cycle_example == ["A", "A"]
    assert "page 'A' has a skip rule targeting itself" in report.warnings


def test_forward_skips_are_not_cycles():
    """Two skips into the same later page form no cycle."""
    go = when("go", Operator.EQUALS, "yes")
    form = FormDefinition(pages=[
        Page(id="A", fields=[choice("go")], skip_rules=[SkipRule(rule=go, target_page_id="C")]),
        Page(id="B", skip_rules=[SkipRule(rule=go, target_page_id="C")]),
        Page(id="C"),
    ])

    report = analyze_form(form)

    assert not report.has_skip_cycle
    assert report.cycle_example is None


def test_required_field_with_hide_rule_not_flagged():
    """Only fields hidden until a SHOW rule matches are conditionally required."""
    form = FormDefinition(pages=[Page(id="p", fields=[
        choice("q"),
        Field(id="x", required=True, visibility_rules=[
            VisibilityRule(rule=when("q", Operator.EQUALS, "no"), action=VisibilityAction.HIDE),
        ]),
    ])])

    assert analyze_form(form).conditional_required_fields == []


def test_no_warnings_clean_form():
    """A well-formed form has neither errors nor warnings."""
    form = FormDefinition(name="Clean", pages=[
        Page(id="p1", fields=[choice("q")]),
        Page(id="p2", fields=[Field(id="x", visibility_rules=[
            VisibilityRule(rule=when("q", Operator.EQUALS, "yes")),
        ])]),
    ])

    report = analyze_form(form)

    assert report.is_valid
    assert report.warnings == []
    assert report.errors == []

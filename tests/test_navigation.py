"""
Tests for page reachability and navigation.

Tests verify:
    - Sequential walk and skip redirection
    - Cycle safety
    - Dangling skip targets fall through
    - Hide-page rules
    - Next / previous page
"""

from formlogic.conditions import Condition, Operator, Rule
from formlogic.examples import build_age_gate_form
from formlogic.model import Field, HidePageRule, Page, SkipRule
from formlogic.navigation import (
    hidden_page_ids,
    next_page_id,
    previous_page_id,
    reachable_page_ids,
    visible_page_ids,
)


def when(field_id, op, value=None):
    return Rule((Condition(field_id, op, value),))


def always():
    return when("go", Operator.IS_NOT_EMPTY)


class TestReachability:
    """The index-based walk."""

    def test_no_rules_is_sequential(self):
        """Without skip rules every page is visited in order."""
        pages = [Page(id="a"), Page(id="b"), Page(id="c")]
        assert reachable_page_ids(pages, {}) == ["a", "b", "c"]

    def test_empty_form(self):
        """A form without pages has no path."""
        assert reachable_page_ids([], {}) == []

    def test_example_age_gate(self):
        """Adults skip page 2; minors see every page."""
        pages = build_age_gate_form().pages
        assert reachable_page_ids(pages, {"age": 20}) == ["1", "3"]
        assert reachable_page_ids(pages, {"age": 10}) == ["1", "2", "3"]

    def test_first_matching_skip_rule_wins(self):
        """Only the first matching skip rule is followed."""
        pages = [
            Page(id="a", fields=[Field(id="go")], skip_rules=[
                SkipRule(rule=always(), target_page_id="d"),
                SkipRule(rule=always(), target_page_id="c"),
            ]),
            Page(id="b"), Page(id="c"), Page(id="d"),
        ]
        assert reachable_page_ids(pages, {"go": "y"}) == ["a", "d"]

    def test_dangling_target_is_ignored(self):
        """A skip to a missing page falls through to the next rule, then sequential."""
        pages = [
            Page(id="a", fields=[Field(id="go")], skip_rules=[
                SkipRule(rule=always(), target_page_id="nowhere"),
            ]),
            Page(id="b"),
        ]
        assert reachable_page_ids(pages, {"go": "y"}) == ["a", "b"]

        pages[0].skip_rules.append(SkipRule(rule=always(), target_page_id="c"))
        pages.append(Page(id="c"))
        assert reachable_page_ids(pages, {"go": "y"}) == ["a", "c"]

    def test_backward_skip_stops_at_revisit(self):
        """Skipping back to a visited page ends the walk."""
        pages = [
            Page(id="a", fields=[Field(id="go")]),
            Page(id="b", skip_rules=[SkipRule(rule=always(), target_page_id="a")]),
            Page(id="c"),
        ]
        assert reachable_page_ids(pages, {"go": "y"}) == ["a", "b"]
        assert reachable_page_ids(pages, {}) == ["a", "b", "c"]

    def test_cycle_terminates(self):
        """A skips to B and B skips to A: each appears at most once."""
        pages = [
            Page(id="A", fields=[Field(id="go")], skip_rules=[SkipRule(rule=always(), target_page_id="B")]),
            Page(id="B", skip_rules=[SkipRule(rule=always(), target_page_id="A")]),
            Page(id="C"),
        ]
        result = reachable_page_ids(pages, {"go": "y"})
        assert result == ["A", "B"]
        assert len(result) == len(set(result))

    def test_self_skip_terminates(self):
        """A page skipping to itself is visited once."""
        pages = [Page(id="A", fields=[Field(id="go")], skip_rules=[SkipRule(rule=always(), target_page_id="A")])]
        assert reachable_page_ids(pages, {"go": 1}) == ["A"]

    def test_idempotent(self):
        """Repeated walks give the same path."""
        pages = build_age_gate_form().pages
        data = {"age": "30"}
        first = reachable_page_ids(pages, data)
        for _ in range(5):
            assert reachable_page_ids(pages, data) == first
        assert data == {"age": "30"}

    def test_skip_on_unknown_trigger_field_never_fires(self):
        """Skips on missing fields are ignored."""
        pages = [
            Page(id="a", skip_rules=[SkipRule(rule=when("ghost", Operator.IS_EMPTY), target_page_id="c")]),
            Page(id="b"),
            Page(id="c"),
        ]
        assert reachable_page_ids(pages, {}) == ["a", "b", "c"]


class TestHiddenPages:
    """Hide-page rules, independent of sequencing."""

    def build_pages(self):
        return [
            Page(id="a", fields=[Field(id="minor")], hide_rules=[
                HidePageRule(rule=when("minor", Operator.EQUALS, "yes"), target_page_id="c"),
            ]),
            Page(id="b"),
            Page(id="c"),
            Page(id="d"),
        ]

    def test_hidden_page_removed_from_visible(self):
        """Hidden pages stay reachable but are not visible."""
        pages = self.build_pages()
        assert hidden_page_ids(pages, {"minor": "yes"}) == {"c"}
        assert reachable_page_ids(pages, {"minor": "yes"}) == ["a", "b", "c", "d"]
        assert visible_page_ids(pages, {"minor": "yes"}) == ["a", "b", "d"]
        assert visible_page_ids(pages, {"minor": "no"}) == ["a", "b", "c", "d"]

    def test_hide_rule_on_a_later_page_applies(self):
        """A hide rule works wherever it is defined."""
        pages = self.build_pages()
        pages[3].hide_rules.append(HidePageRule(rule=when("minor", Operator.EQUALS, "yes"), target_page_id="b"))
        assert visible_page_ids(pages, {"minor": "yes"}) == ["a", "d"]


class TestNextPage:
    """The Next button."""

    def test_sequential(self):
        """Without a matching skip the next page follows."""
        pages = build_age_gate_form().pages
        assert next_page_id(pages, "1", {"age": "5"}) == "2"
        assert next_page_id(pages, "2", {"age": "5"}) == "3"

    def test_skip(self):
        """A matching skip rule picks the next page."""
        pages = build_age_gate_form().pages
        assert next_page_id(pages, "1", {"age": "50"}) == "3"

    def test_last_page_has_no_next(self):
        """The last page has no next page."""
        pages = build_age_gate_form().pages
        assert next_page_id(pages, "3", {}) is None

    def test_unknown_page(self):
        """An unknown page has no next page."""
        assert next_page_id(build_age_gate_form().pages, "zzz", {}) is None

    def test_steps_over_hidden_pages(self):
        """Hidden pages are passed over."""
        pages = [
            Page(id="a", fields=[Field(id="minor")], hide_rules=[
                HidePageRule(rule=when("minor", Operator.EQUALS, "yes"), target_page_id="b"),
            ]),
            Page(id="b"),
            Page(id="c"),
        ]
        assert next_page_id(pages, "a", {"minor": "yes"}) == "c"
        assert next_page_id(pages, "a", {"minor": "no"}) == "b"

    def test_self_skip_has_no_next(self):
        """A self-skip does not loop on the same page."""
        pages = [Page(id="A", fields=[Field(id="go")], skip_rules=[SkipRule(rule=always(), target_page_id="A")])]
        assert next_page_id(pages, "A", {"go": 1}) is None


class TestPreviousPage:
    """The Back button follows the visible path."""

    def test_previous_on_skipped_path(self):
        """Back goes to the previous page on the path taken."""
        pages = build_age_gate_form().pages
        assert previous_page_id(pages, "3", {"age": "30"}) == "1"
        assert previous_page_id(pages, "3", {"age": "3"}) == "2"

    def test_first_page_has_no_previous(self):
        """The first page has no previous page."""
        assert previous_page_id(build_age_gate_form().pages, "1", {}) is None

    def test_page_off_the_path(self):
        """A skipped page has no previous page."""
        assert previous_page_id(build_age_gate_form().pages, "2", {"age": "30"}) is None

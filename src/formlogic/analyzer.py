"""
Form Analyzer: save-time integrity checks for form definitions.

The logic engine tolerates broken references at runtime (they evaluate to
False), but a form editor should refuse to save them. This module produces a
read-only report of everything that would make a form behave unexpectedly:
    - Duplicate field / page ids
    - Conditions referencing fields that do not exist
    - Visibility, skip and hide rules targeting nothing
    - Unknown operators and missing comparison values
    - Rules without conditions
    - Cycles in the skip graph
    - Required fields that are only shown behind rules

IMPORTANT: This module does NOT modify the form.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from formlogic.conditions import (
    MISSING_TRIGGER,
    MISSING_VALUE,
    UNKNOWN_OPERATOR,
    UNKNOWN_TRIGGER,
    Condition,
    Rule,
    check_condition,
)
from formlogic.model import FormDefinition, VisibilityAction, supports_conditional_logic
from formlogic.visibility import build_rule_index


@dataclass
class FormReport:
    """Integrity report for a form definition."""

    form_name: str
    total_pages: int = 0
    total_fields: int = 0
    total_rules: int = 0
    total_conditions: int = 0

    duplicate_field_ids: Set[str] = field(default_factory=set)
    duplicate_page_ids: Set[str] = field(default_factory=set)
    undefined_trigger_fields: Set[str] = field(default_factory=set)
    dangling_field_targets: Set[str] = field(default_factory=set)
    dangling_page_targets: Set[str] = field(default_factory=set)
    unknown_operators: Set[str] = field(default_factory=set)

    # Per-rule location strings, e.g. "field 'petName' rule 1"
    missing_values: List[str] = field(default_factory=list)
    empty_rules: List[str] = field(default_factory=list)

    has_skip_cycle: bool = False
    cycle_example: Optional[List[str]] = None
    conditional_required_fields: List[str] = field(default_factory=list)

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        if msg not in self.errors:
            self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def _iter_rules(form: FormDefinition) -> Iterator[Tuple[str, Rule]]:
    """Yield (location, rule) for every rule in the form."""
    for page in form.pages:
        for f in page.fields:
            for i, vis in enumerate(f.visibility_rules, 1):
                yield f"field '{f.id}' rule {i}", vis.rule
        for i, skip in enumerate(page.skip_rules, 1):
            yield f"page '{page.id}' skip rule {i}", skip.rule
        for i, hide in enumerate(page.hide_rules, 1):
            yield f"page '{page.id}' hide rule {i}", hide.rule


def _skip_graph(form: FormDefinition) -> Dict[str, List[str]]:
    """Static skip edges between existing pages (conditions ignored)."""
    page_ids = {p.id for p in form.pages}
    graph: Dict[str, List[str]] = defaultdict(list)
    for page in form.pages:
        for skip in page.skip_rules:
            if skip.target_page_id in page_ids and skip.target_page_id not in graph[page.id]:
                graph[page.id].append(skip.target_page_id)
    return graph


def _find_cycle(graph: Dict[str, List[str]], order: List[str]) -> Optional[List[str]]:
    """Iterative DFS; returns one cycle as a closed path, or None."""
    state: Dict[str, int] = {}  # 1 = on stack, 2 = done
    for root in order:
        if root in state:
            continue
        path: List[str] = [root]
        stack: List[Iterator[str]] = [iter(graph.get(root, []))]
        state[root] = 1
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                state[path.pop()] = 2
                stack.pop()
            elif state.get(nxt) == 1:
                return path[path.index(nxt):] + [nxt]
            elif nxt not in state:
                state[nxt] = 1
                path.append(nxt)
                stack.append(iter(graph.get(nxt, [])))
    return None


def analyze_form(form: FormDefinition) -> FormReport:
    """
    Check a form definition before it is saved.

    Errors make `is_valid` False; warnings are advisory.
    """
    report = FormReport(form_name=form.name)
    all_fields = form.all_fields
    report.total_pages = len(form.pages)
    report.total_fields = len(all_fields)

    # =========================================================================
    # 1. IDENTIFIERS
    # =========================================================================

    field_counts = Counter(f.id for f in all_fields)
    page_counts = Counter(p.id for p in form.pages)
    report.duplicate_field_ids = {fid for fid, n in field_counts.items() if n > 1}
    report.duplicate_page_ids = {pid for pid, n in page_counts.items() if n > 1}
    field_ids = set(field_counts)
    page_ids = set(page_counts)
    field_by_id = {f.id: f for f in all_fields}

    # =========================================================================
    # 2. CONDITIONS
    # =========================================================================

    for location, rule in _iter_rules(form):
        report.total_rules += 1
        if not rule.conditions:
            report.empty_rules.append(location)
            continue
        for cond in rule.conditions:
            report.total_conditions += 1
            _check(report, location, cond, field_ids)
            trigger = field_by_id.get(cond.trigger_field_id)
            if trigger is not None and not supports_conditional_logic(trigger.type):
                type_name = getattr(trigger.type, "value", trigger.type)
                report.add_warning(
                    f"{location}: trigger field '{trigger.id}' of type '{type_name}' "
                    f"is not a choice or date field"
                )

    # =========================================================================
    # 3. TARGETS
    # =========================================================================

    for page in form.pages:
        for f in page.fields:
            for vis in f.visibility_rules:
                if vis.target_field_id and vis.target_field_id not in field_ids:
                    report.dangling_field_targets.add(vis.target_field_id)
        for skip in page.skip_rules:
            if skip.target_page_id not in page_ids:
                report.dangling_page_targets.add(skip.target_page_id)
            elif skip.target_page_id == page.id:
                report.add_warning(f"page '{page.id}' has a skip rule targeting itself")
        for hide in page.hide_rules:
            if hide.target_page_id not in page_ids:
                report.dangling_page_targets.add(hide.target_page_id)

    # =========================================================================
    # 4. SKIP GRAPH
    # =========================================================================

    cycle = _find_cycle(_skip_graph(form), [p.id for p in form.pages])
    if cycle:
        report.has_skip_cycle = True
        report.cycle_example = cycle

    # =========================================================================
    # 5. REQUIRED FIELDS BEHIND RULES
    # =========================================================================

    rule_index = build_rule_index(form)
    for f in all_fields:
        rules = rule_index.get(f.id)
        if f.required and rules and all(r.action == VisibilityAction.SHOW for r in rules):
            report.conditional_required_fields.append(f.id)

    # =========================================================================
    # 6. FLAGS
    # =========================================================================

    if report.duplicate_field_ids:
        report.add_error(f"Duplicate field ids: {', '.join(sorted(report.duplicate_field_ids))}")
    if report.duplicate_page_ids:
        report.add_error(f"Duplicate page ids: {', '.join(sorted(report.duplicate_page_ids))}")
    if report.undefined_trigger_fields:
        report.add_error(
            f"Conditions reference unknown fields: {', '.join(sorted(report.undefined_trigger_fields))}"
        )
    if report.dangling_field_targets:
        report.add_error(
            f"Visibility rules target unknown fields: {', '.join(sorted(report.dangling_field_targets))}"
        )
    if report.dangling_page_targets:
        report.add_error(
            f"Page rules target unknown pages: {', '.join(sorted(report.dangling_page_targets))}"
        )
    if report.unknown_operators:
        report.add_error(f"Unknown operators: {', '.join(sorted(report.unknown_operators))}")
    for location in report.missing_values:
        report.add_error(f"{location}: comparison value missing")
    for location in report.empty_rules:
        report.add_warning(f"{location} has no conditions and never matches")
    if report.has_skip_cycle:
        report.add_warning(f"Skip cycle: {' -> '.join(report.cycle_example)}")
    if report.conditional_required_fields:
        report.add_warning(
            "Required only when shown: " + ", ".join(report.conditional_required_fields)
        )

    return report


def _check(report: FormReport, location: str, cond: Condition, field_ids: Set[str]) -> None:
    for problem in check_condition(cond, field_ids):
        if problem.code in (MISSING_TRIGGER, UNKNOWN_TRIGGER):
            report.undefined_trigger_fields.add(cond.trigger_field_id or "<empty>")
        elif problem.code == UNKNOWN_OPERATOR:
            report.unknown_operators.add(cond.operator_name or "<empty>")
        elif problem.code == MISSING_VALUE and location not in report.missing_values:
            report.missing_values.append(location)

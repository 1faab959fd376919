"""
Field visibility resolution.

A field is visible unless a visibility rule says otherwise:

    1. No rules target the field         -> visible
    2. First matching rule decides       -> SHOW: visible, HIDE: hidden
    3. Rules exist but none matches      -> visible, except when every
                                            rule is a SHOW rule: a field
                                            that is only ever shown "when X"
                                            stays hidden until X holds

Rules are looked up through a form-wide index keyed by target field,
because a rule can be attached to (and triggered by) a field on another
page than the field it affects.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from formlogic.evaluator import evaluate_rule
from formlogic.model import Field, FormDefinition, Page, VisibilityAction, VisibilityRule

RuleIndex = Dict[str, List[VisibilityRule]]


def build_rule_index(form: FormDefinition) -> RuleIndex:
    """
    Collect every visibility rule in the form, keyed by the field it targets.

    Rules keep form order: page order, then field order, then rule order.
    A rule without an explicit target targets the field that owns it.
    """
    index: RuleIndex = {}
    for _, owner in form.iter_fields():
        for vis_rule in owner.visibility_rules:
            target = vis_rule.target_field_id or owner.id
            index.setdefault(target, []).append(vis_rule)
    return index


def is_field_visible(
    field: Field,
    rules: Optional[Sequence[VisibilityRule]],
    data: Optional[Mapping[str, Any]],
    known_field_ids: Optional[Iterable[str]] = None,
) -> bool:
    """
    Decide whether one field is visible for the given answers.

    Args:
        field: Field being resolved
        rules: Visibility rules targeting this field, in order
        data: Current answers
        known_field_ids: Field ids that exist in the form. Conditions on
            fields outside this set never match. Without it a rule on a
            deleted field sees an empty answer (see evaluate_condition);
            visible_field_ids always supplies the form's ids.

    Returns:
        True if the field should be shown
    """
    if not rules:
        return True
    for vis_rule in rules:
        if evaluate_rule(vis_rule.rule, data, known_field_ids):
            return vis_rule.action != VisibilityAction.HIDE
    return not all(r.action == VisibilityAction.SHOW for r in rules)


def visible_field_ids(
    form: FormDefinition,
    page: Page,
    data: Optional[Mapping[str, Any]],
    rule_index: Optional[RuleIndex] = None,
    known_field_ids: Optional[Iterable[str]] = None,
) -> List[str]:
    """Ids of the visible fields on `page`, in page order."""
    if rule_index is None:
        rule_index = build_rule_index(form)
    if known_field_ids is None:
        known_field_ids = set(form.field_ids)
    return [
        f.id
        for f in page.fields
        if is_field_visible(f, rule_index.get(f.id), data, known_field_ids)
    ]

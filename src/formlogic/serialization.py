"""
Serialization helpers for form definitions.

Provides JSON/YAML round-trip via an explicit intermediate dict
representation, and accepts the other shapes forms have been stored in:

    - camelCase keys (visibilityRules, triggerFieldId, targetPageId, ...)
    - backend rules: {"when": [{"field", "op", "value"}]} (all AND),
      pages with {"logic": {"skipTo": [{"when": [...], "toPageId": ...}]}}
    - legacy single-page forms: top-level "fields" and no "pages"
    - form-level "fieldConditions" / "pageConditions" lists, as written by
      the conditional logic editor

Output always uses the canonical snake_case shape.

Structurally unusable input raises FormDefinitionError. Oddities the engine
tolerates (unknown operators or field types, empty rules) are loaded with a
UserWarning.
"""
from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from formlogic.conditions import (
    Combinator,
    Condition,
    Rule,
    normalize_combinator,
    normalize_operator,
)
from formlogic.model import (
    Field,
    FieldType,
    FormDefinition,
    HidePageRule,
    Page,
    SkipRule,
    SubField,
    VisibilityAction,
    VisibilityRule,
)


class FormDefinitionError(ValueError):
    """Raised when a form definition cannot be loaded."""
    pass


def _first(d: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in d and d[key] is not None:
            return d[key]
    return default


def _as_list(value: Any, what: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise FormDefinitionError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _as_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise FormDefinitionError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Conditions and rules
# ---------------------------------------------------------------------------


def condition_to_dict(c: Condition) -> Dict[str, Any]:
    return {
        "field": c.trigger_field_id,
        "operator": c.operator_name,
        "value": c.value,
        "combinator": c.combinator.value,
    }


def condition_from_dict(d: Dict[str, Any]) -> Condition:
    d = _as_dict(d, "condition")
    field_id = _first(d, "field", "trigger_field_id", "triggerFieldId", default="")

    # The editor stores the comparison under "state" and AND/OR under "operator".
    if "state" in d:
        raw_op = d.get("state")
        raw_comb = _first(d, "combinator", "operator", "logic")
    else:
        raw_op = _first(d, "operator", "op")
        raw_comb = _first(d, "combinator", "logic")

    op = normalize_operator(raw_op)
    if op is None:
        warnings.warn(f"Unknown operator '{raw_op}' in condition on '{field_id}'", UserWarning)

    return Condition(
        trigger_field_id=str(field_id),
        operator=op if op is not None else str(raw_op or ""),
        value=d.get("value"),
        combinator=normalize_combinator(raw_comb),
    )


def rule_to_list(r: Rule) -> List[Dict[str, Any]]:
    return [condition_to_dict(c) for c in r.conditions]


def rule_from_dict(d: Dict[str, Any], owner: str = "") -> Rule:
    """
    Read the conditions of any rule-bearing dict.

    Accepts "conditions" (ordered, with combinators), "when" (all AND), or a
    single inline condition (triggerFieldId/state/value on the rule itself).
    """
    if "conditions" in d and d["conditions"]:
        conditions = [condition_from_dict(c) for c in _as_list(d["conditions"], "conditions")]
    elif "when" in d:
        conditions = [
            _with_and(condition_from_dict(c)) for c in _as_list(d["when"], "when")
        ]
    elif _first(d, "field", "trigger_field_id", "triggerFieldId") is not None:
        conditions = [condition_from_dict(d)]
    else:
        conditions = []

    if not conditions:
        warnings.warn(f"Rule on '{owner}' has no conditions and never matches", UserWarning)
    return Rule(tuple(conditions))


def _with_and(c: Condition) -> Condition:
    return Condition(c.trigger_field_id, c.operator, c.value, Combinator.AND)


def visibility_rule_to_dict(v: VisibilityRule) -> Dict[str, Any]:
    return {
        "conditions": rule_to_list(v.rule),
        "action": v.action.value,
        "target_field_id": v.target_field_id,
    }


def visibility_rule_from_dict(d: Dict[str, Any], owner: str = "") -> VisibilityRule:
    d = _as_dict(d, "visibility rule")
    raw_action = str(d.get("action") or "show").strip().lower()
    try:
        action = VisibilityAction(raw_action)
    except ValueError:
        raise FormDefinitionError(f"Invalid visibility action '{raw_action}' on '{owner}'")
    return VisibilityRule(
        rule=rule_from_dict(d, owner),
        action=action,
        target_field_id=_first(d, "target_field_id", "targetFieldId", "target"),
    )


def _target_page(d: Dict[str, Any], owner: str) -> str:
    target = _first(d, "target_page_id", "targetPageId", "toPageId", "toPage", "target")
    if target is None:
        raise FormDefinitionError(f"Page rule on '{owner}' has no target page")
    return str(target)


def skip_rule_to_dict(s: SkipRule) -> Dict[str, Any]:
    return {"conditions": rule_to_list(s.rule), "target_page_id": s.target_page_id}


def skip_rule_from_dict(d: Dict[str, Any], owner: str = "") -> SkipRule:
    d = _as_dict(d, "skip rule")
    return SkipRule(rule=rule_from_dict(d, owner), target_page_id=_target_page(d, owner))


def hide_rule_to_dict(h: HidePageRule) -> Dict[str, Any]:
    return {"conditions": rule_to_list(h.rule), "target_page_id": h.target_page_id}


def hide_rule_from_dict(d: Dict[str, Any], owner: str = "") -> HidePageRule:
    d = _as_dict(d, "hide rule")
    return HidePageRule(rule=rule_from_dict(d, owner), target_page_id=_target_page(d, owner))


# ---------------------------------------------------------------------------
# Fields and pages
# ---------------------------------------------------------------------------


def subfield_to_dict(s: SubField) -> Dict[str, Any]:
    return {"name": s.name, "label": s.label, "required": s.required}


def subfield_from_dict(d: Dict[str, Any]) -> SubField:
    d = _as_dict(d, "subfield")
    if not d.get("name"):
        raise FormDefinitionError("Subfield without a name")
    return SubField(name=str(d["name"]), label=d.get("label") or "", required=bool(d.get("required", False)))


def _field_type(raw: Any, field_id: str):
    if isinstance(raw, FieldType):
        return raw
    text = str(raw or "text").strip().lower()
    try:
        return FieldType(text)
    except ValueError:
        warnings.warn(f"Unknown field type '{text}' on field '{field_id}'", UserWarning)
        return text


def field_to_dict(f: Field) -> Dict[str, Any]:
    return {
        "id": f.id,
        "type": f.type.value if isinstance(f.type, FieldType) else f.type,
        "label": f.label,
        "required": f.required,
        "options": list(f.options),
        "visibility_rules": [visibility_rule_to_dict(v) for v in f.visibility_rules],
        "subfields": [subfield_to_dict(s) for s in f.subfields],
    }


def field_from_dict(d: Dict[str, Any]) -> Field:
    d = _as_dict(d, "field")
    if not d.get("id"):
        raise FormDefinitionError(f"Field without an id: {d!r}")
    field_id = str(d["id"])
    rules = _as_list(_first(d, "visibility_rules", "visibilityRules"), f"visibility rules of '{field_id}'")
    return Field(
        id=field_id,
        type=_field_type(d.get("type"), field_id),
        label=d.get("label") or "",
        required=bool(d.get("required", False)),
        options=[str(o) for o in _as_list(d.get("options"), f"options of '{field_id}'")],
        visibility_rules=[visibility_rule_from_dict(r, field_id) for r in rules],
        subfields=[subfield_from_dict(s) for s in _as_list(d.get("subfields"), f"subfields of '{field_id}'")],
    )


def page_to_dict(p: Page) -> Dict[str, Any]:
    return {
        "id": p.id,
        "title": p.title,
        "fields": [field_to_dict(f) for f in p.fields],
        "skip_rules": [skip_rule_to_dict(s) for s in p.skip_rules],
        "hide_rules": [hide_rule_to_dict(h) for h in p.hide_rules],
    }


def page_from_dict(d: Dict[str, Any]) -> Page:
    d = _as_dict(d, "page")
    if not d.get("id"):
        raise FormDefinitionError(f"Page without an id: {d!r}")
    page_id = str(d["id"])
    logic = _as_dict(d.get("logic") or {}, f"logic of page '{page_id}'")

    skips = _first(d, "skip_rules", "skipRules", "skipTo", default=logic.get("skipTo"))
    hides = _first(d, "hide_rules", "hideRules", "hidePage", default=logic.get("hidePage"))

    return Page(
        id=page_id,
        title=_first(d, "title", "name", default=""),
        fields=[field_from_dict(f) for f in _as_list(d.get("fields"), f"fields of page '{page_id}'")],
        skip_rules=[skip_rule_from_dict(s, page_id) for s in _as_list(skips, f"skip rules of '{page_id}'")],
        hide_rules=[hide_rule_from_dict(h, page_id) for h in _as_list(hides, f"hide rules of '{page_id}'")],
    )


# ---------------------------------------------------------------------------
# Editor condition lists
# ---------------------------------------------------------------------------


def _attach_field_condition(form: FormDefinition, d: Dict[str, Any]) -> None:
    vis = visibility_rule_from_dict(d, owner=str(d.get("targetFieldId") or ""))
    target = form.get_field(vis.target_field_id) if vis.target_field_id else None
    owner = target
    if owner is None and vis.rule.conditions:
        owner = form.get_field(vis.rule.conditions[0].trigger_field_id)
    if owner is None:
        warnings.warn(f"Field condition targets unknown field '{vis.target_field_id}'; dropped", UserWarning)
        return
    owner.visibility_rules.append(vis)


def _attach_page_condition(form: FormDefinition, d: Dict[str, Any]) -> None:
    action = str(d.get("action") or "").strip().lower()
    rule = rule_from_dict(d, owner=str(d.get("targetPageId") or ""))
    owner = None
    if rule.conditions:
        owner = form.page_of(rule.conditions[0].trigger_field_id)

    if action in ("skip to", "skip_to", "skip"):
        if owner is None:
            warnings.warn("Skip condition whose trigger field is on no page; dropped", UserWarning)
            return
        owner.skip_rules.append(SkipRule(rule=rule, target_page_id=_target_page(d, owner.id)))
    elif action in ("hide page", "hide_page", "hide"):
        target_id = _target_page(d, owner.id if owner else "")
        owner = owner or form.get_page(target_id)
        if owner is None:
            warnings.warn(f"Hide condition for unknown page '{target_id}'; dropped", UserWarning)
            return
        owner.hide_rules.append(HidePageRule(rule=rule, target_page_id=target_id))
    else:
        warnings.warn(f"Unknown page condition action '{action}'; dropped", UserWarning)


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


def form_to_dict(f: FormDefinition) -> Dict[str, Any]:
    return {
        "name": f.name,
        "pages": [page_to_dict(p) for p in f.pages],
        "metadata": f.metadata,
    }


def form_from_dict(d: Dict[str, Any]) -> FormDefinition:
    d = _as_dict(d, "form")
    form = FormDefinition(name=_first(d, "name", "title", default=""))

    pages = _as_list(d.get("pages"), "pages")
    if pages:
        form.pages = [page_from_dict(p) for p in pages]
    elif d.get("fields"):
        form.pages = [page_from_dict({"id": "page-1", "name": "Page 1", "fields": d["fields"]})]

    form.metadata = dict(d.get("metadata") or {})

    for cond in _as_list(_first(d, "fieldConditions", "field_conditions"), "fieldConditions"):
        _attach_field_condition(form, _as_dict(cond, "field condition"))
    for cond in _as_list(_first(d, "pageConditions", "page_conditions"), "pageConditions"):
        _attach_page_condition(form, _as_dict(cond, "page condition"))
    return form


def form_to_json(f: FormDefinition) -> str:
    return json.dumps(form_to_dict(f), sort_keys=True)


def form_from_json(s: str) -> FormDefinition:
    d = json.loads(s)
    return form_from_dict(d)


def form_to_yaml(f: FormDefinition) -> str:
    return yaml.safe_dump(form_to_dict(f), sort_keys=False)


def form_from_yaml(s: str) -> FormDefinition:
    d = yaml.safe_load(s)
    return form_from_dict(d)


def _read_document(path: str | Path) -> Any:
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_form(path: str | Path) -> FormDefinition:
    """Load a form definition from a .json, .yaml or .yml file."""
    return form_from_dict(_read_document(path))


def load_record(path: str | Path) -> Dict[str, Any]:
    """
    Load a data record (answers keyed by field id) from JSON or YAML.

    A submission envelope of the form {"data": {...}} is unwrapped.
    """
    doc = _read_document(path)
    if doc is None:
        return {}
    doc = _as_dict(doc, "data record")
    if isinstance(doc.get("data"), dict):
        return doc["data"]
    return doc


def save_form(f: FormDefinition, path: str | Path) -> None:
    path = Path(path)
    if path.suffix.lower() == ".json":
        text = json.dumps(form_to_dict(f), indent=2)
    else:
        text = form_to_yaml(f)
    path.write_text(text, encoding="utf-8")

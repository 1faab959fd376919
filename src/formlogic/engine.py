"""
FormLogic: one form definition bound to the logic engine.

Both the interactive preview and the submission handler use this class, so
a form is always judged by the same code. The definition is indexed once
(field ids, visibility rule index); every call receives a fresh data record
and returns a fresh result.

Reachability can be memoized per data snapshot (see formlogic.settings).
The memo is keyed by a frozen copy of the data record and never changes a
result, it only skips recomputation on repeated identical calls.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple

from formlogic.model import FormDefinition
from formlogic.navigation import (
    hidden_page_ids,
    next_page_id,
    previous_page_id,
    reachable_page_ids,
)
from formlogic.settings import get_settings
from formlogic.validation import ValidationResult, validate_page, validate_submission
from formlogic.visibility import build_rule_index, visible_field_ids

_LIST = "list"
_DICT = "dict"


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple, set, frozenset)):
        return (_LIST, tuple(_freeze(v) for v in value))
    if isinstance(value, dict):
        return (_DICT, tuple(sorted((str(k), _freeze(v)) for k, v in value.items())))
    try:
        hash(value)
    except TypeError:
        return ("repr", repr(value))
    # Tag with the type so 1, 1.0 and True stay distinct keys.
    return (type(value).__name__, value)


def _thaw(frozen: Any) -> Any:
    tag, payload = frozen
    if tag == _LIST:
        return [_thaw(v) for v in payload]
    if tag == _DICT:
        return {k: _thaw(v) for k, v in payload}
    return payload


def freeze_record(data: Optional[Mapping[str, Any]]) -> Tuple:
    """Hashable, order-independent snapshot of a data record."""
    return tuple(sorted((str(k), _freeze(v)) for k, v in (data or {}).items()))


def thaw_record(key: Tuple) -> Dict[str, Any]:
    return {k: _thaw(v) for k, v in key}


@dataclass
class FormEvaluation:
    """Everything a renderer needs for one data record."""

    reachable_page_ids: List[str] = field(default_factory=list)
    visible_page_ids: List[str] = field(default_factory=list)
    visible_field_ids: Dict[str, List[str]] = field(default_factory=dict)


class FormLogic:
    """
    Conditional logic for one FormDefinition.

    Args:
        form: The form definition (not mutated)
        cache_size: Reachability memo size; None reads FORMLOGIC_CACHE_SIZE,
            0 disables memoization
    """

    def __init__(self, form: FormDefinition, cache_size: Optional[int] = None):
        self.form = form
        self.known_field_ids = frozenset(form.field_ids)
        self.rule_index = build_rule_index(form)

        if cache_size is None:
            cache_size = get_settings().cache_size
        self.cache_size = cache_size
        if cache_size > 0:
            self._walk = lru_cache(maxsize=cache_size)(self._walk_uncached)
        else:
            self._walk = self._walk_uncached

    def _walk_uncached(self, key: Tuple) -> Tuple[Tuple[str, ...], frozenset]:
        data = thaw_record(key)
        reachable = reachable_page_ids(self.form.pages, data, self.known_field_ids)
        hidden = hidden_page_ids(self.form.pages, data, self.known_field_ids)
        return tuple(reachable), frozenset(hidden)

    def cache_info(self):
        """functools cache statistics, or None when memoization is off."""
        info = getattr(self._walk, "cache_info", None)
        return info() if info else None

    def reachable_pages(self, data: Optional[Mapping[str, Any]]) -> List[str]:
        reachable, _ = self._walk(freeze_record(data))
        return list(reachable)

    def hidden_pages(self, data: Optional[Mapping[str, Any]]) -> List[str]:
        _, hidden = self._walk(freeze_record(data))
        return [p.id for p in self.form.pages if p.id in hidden]

    def visible_pages(self, data: Optional[Mapping[str, Any]]) -> List[str]:
        reachable, hidden = self._walk(freeze_record(data))
        return [pid for pid in reachable if pid not in hidden]

    def visible_fields(self, page_id: str, data: Optional[Mapping[str, Any]]) -> List[str]:
        """Visible field ids of one page; empty for an unknown page."""
        page = self.form.get_page(page_id)
        if page is None:
            return []
        return visible_field_ids(self.form, page, data, self.rule_index, self.known_field_ids)

    def next_page(self, current_page_id: str, data: Optional[Mapping[str, Any]]) -> Optional[str]:
        return next_page_id(self.form.pages, current_page_id, data, self.known_field_ids)

    def previous_page(self, current_page_id: str, data: Optional[Mapping[str, Any]]) -> Optional[str]:
        return previous_page_id(self.form.pages, current_page_id, data, self.known_field_ids)

    def evaluate(self, data: Optional[Mapping[str, Any]]) -> FormEvaluation:
        """Snapshot of reachable/visible pages and visible fields."""
        result = FormEvaluation(
            reachable_page_ids=self.reachable_pages(data),
            visible_page_ids=self.visible_pages(data),
        )
        for page_id in result.visible_page_ids:
            result.visible_field_ids[page_id] = self.visible_fields(page_id, data)
        return result

    def validate(
        self,
        data: Optional[Mapping[str, Any]],
        respect_hidden_pages: Optional[bool] = None,
    ) -> ValidationResult:
        """Validate a submission (see formlogic.validation.validate_submission)."""
        if respect_hidden_pages is None:
            respect_hidden_pages = get_settings().respect_hidden_pages
        return validate_submission(self.form, data, respect_hidden_pages=respect_hidden_pages)

    def validate_page(self, page_id: str, data: Optional[Mapping[str, Any]]) -> ValidationResult:
        return validate_page(self.form, page_id, data)

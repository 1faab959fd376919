"""
Page reachability and navigation.

The page sequence is walked as an index-based state machine:

    states:      pages (by index)
    initial:     page 0
    transitions: first matching skip rule with an existing target,
                 otherwise the next page in order
    terminal:    running past the last page, or revisiting a page

The revisit check makes every walk terminate after at most len(pages)
steps, whatever the skip rules say. Nothing is cached between calls;
the walk is rerun in full for every data record.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set

from formlogic.evaluator import evaluate_rule
from formlogic.model import Page

logger = logging.getLogger(__name__)


def _known_ids(pages: Sequence[Page], known_field_ids: Optional[Iterable[str]]) -> Set[str]:
    if known_field_ids is not None:
        return set(known_field_ids)
    return {f.id for page in pages for f in page.fields}


def _index_by_id(pages: Sequence[Page]) -> dict:
    # First occurrence wins when ids are duplicated.
    index: dict = {}
    for idx, page in enumerate(pages):
        index.setdefault(page.id, idx)
    return index


def _skip_target(page: Page, index: dict, data, known: Set[str]) -> Optional[int]:
    """Index the first matching skip rule of `page` redirects to, if any."""
    for skip in page.skip_rules:
        if not evaluate_rule(skip.rule, data, known):
            continue
        target = index.get(skip.target_page_id)
        if target is not None:
            return target
        logger.debug("page %r skips to unknown page %r; rule ignored", page.id, skip.target_page_id)
    return None


def reachable_page_ids(
    pages: Sequence[Page],
    data: Optional[Mapping[str, Any]],
    known_field_ids: Optional[Iterable[str]] = None,
) -> List[str]:
    """
    Walk the pages from the first one, following skip rules.

    Args:
        pages: Pages in form order
        data: Current answers
        known_field_ids: Field ids that exist in the form (defaults to the
            fields found on `pages`)

    Returns:
        Ids of the pages a respondent passes through, in visiting order
    """
    known = _known_ids(pages, known_field_ids)
    index = _index_by_id(pages)
    visited: Set[str] = set()
    reachable: List[str] = []

    cursor = 0
    while 0 <= cursor < len(pages):
        page = pages[cursor]
        if page.id in visited:
            logger.debug("page %r already visited; stopping walk", page.id)
            break
        visited.add(page.id)
        reachable.append(page.id)

        target = _skip_target(page, index, data, known)
        cursor = target if target is not None else cursor + 1

    return reachable


def hidden_page_ids(
    pages: Sequence[Page],
    data: Optional[Mapping[str, Any]],
    known_field_ids: Optional[Iterable[str]] = None,
) -> Set[str]:
    """Targets of every hide-page rule (on any page) whose rule matches."""
    known = _known_ids(pages, known_field_ids)
    hidden: Set[str] = set()
    for page in pages:
        for hide in page.hide_rules:
            if hide.target_page_id not in hidden and evaluate_rule(hide.rule, data, known):
                hidden.add(hide.target_page_id)
    return hidden


def visible_page_ids(
    pages: Sequence[Page],
    data: Optional[Mapping[str, Any]],
    known_field_ids: Optional[Iterable[str]] = None,
) -> List[str]:
    """Reachable pages minus the ones a hide-page rule removes, in order."""
    known = _known_ids(pages, known_field_ids)
    hidden = hidden_page_ids(pages, data, known)
    return [pid for pid in reachable_page_ids(pages, data, known) if pid not in hidden]


def next_page_id(
    pages: Sequence[Page],
    current_page_id: str,
    data: Optional[Mapping[str, Any]],
    known_field_ids: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """
    Page the respondent moves to when leaving `current_page_id`.

    The first matching skip rule with an existing target wins; otherwise the
    next page in order. Hidden pages are stepped over in order.

    Returns:
        Page id, or None when the current page is the last one (or unknown)
    """
    known = _known_ids(pages, known_field_ids)
    index = _index_by_id(pages)
    current = index.get(current_page_id)
    if current is None:
        return None

    hidden = hidden_page_ids(pages, data, known)
    target = _skip_target(pages[current], index, data, known)
    cursor = target if target is not None else current + 1

    while 0 <= cursor < len(pages) and pages[cursor].id in hidden:
        cursor += 1

    if not 0 <= cursor < len(pages) or cursor == current:
        return None
    return pages[cursor].id


def previous_page_id(
    pages: Sequence[Page],
    current_page_id: str,
    data: Optional[Mapping[str, Any]],
    known_field_ids: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """
    Page before `current_page_id` on the visible path, or None.

    Pages that are not on the visible path have no previous page.
    """
    path = visible_page_ids(pages, data, known_field_ids)
    if current_page_id not in path:
        return None
    pos = path.index(current_page_id)
    return path[pos - 1] if pos > 0 else None

"""
Condition and rule evaluation.

    evaluate_condition: one Condition against a DataRecord
    evaluate_rule:      an ordered Condition list folded left to right

Both are pure functions. They never raise for plausible input: an unknown
operator, a missing trigger field or a non-numeric operand to a numeric
operator all make the condition False.
"""

import logging
import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from formlogic.conditions import (
    Combinator,
    Condition,
    Operator,
    Rule,
    normalize_combinator,
    normalize_operator,
)

logger = logging.getLogger(__name__)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _text(value: Any) -> str:
    """Text form of a scalar answer, as a browser would stringify it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _fold(value: Any) -> str:
    return _text(value).strip().lower()


def _to_number(value: Any) -> Optional[float]:
    """Strict numeric coercion; None when the value is not a number."""
    if value is None or isinstance(value, bool) or _is_list(value):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def has_value(value: Any) -> bool:
    """
    Whether an answer counts as present.

    Lists are present when non-empty; scalars when not None and not
    whitespace-only. Zero is a present answer.
    """
    if _is_list(value):
        return len(value) > 0
    if value is None:
        return False
    return _text(value).strip() != ""


def _member(items: Iterable[Any], target: Any) -> bool:
    wanted = _fold(target)
    return any(_fold(item) == wanted for item in items)


def _choices(value: Any) -> List[Any]:
    """Comparison value of in-list as a list (comma-separated text is split)."""
    if _is_list(value):
        return list(value)
    if value is None:
        return []
    return [part for part in _text(value).split(",") if part.strip()]


def _equals(left: Any, right: Any) -> bool:
    if _is_list(left):
        return _member(left, right)
    return _fold(left) == _fold(right)


def _contains(left: Any, right: Any) -> bool:
    if _is_list(left):
        return _member(left, right)
    return _fold(right) in _fold(left)


def _affix(left: Any, right: Any, test) -> bool:
    needle = _fold(right)
    if _is_list(left):
        return any(test(_fold(item), needle) for item in left)
    return test(_fold(left), needle)


def _compare(left: Any, right: Any, test) -> bool:
    a = _to_number(left)
    b = _to_number(right)
    if a is None or b is None:
        return False
    return test(a, b)


def _in_list(left: Any, right: Any) -> bool:
    choices = _choices(right)
    if _is_list(left):
        return any(_member(choices, item) for item in left)
    if not has_value(left):
        return False
    return _member(choices, left)


_EVALUATORS = {
    Operator.EQUALS: _equals,
    Operator.NOT_EQUALS: lambda left, right: not _equals(left, right),
    Operator.HAS_SPECIFIC_VALUE: _equals,
    Operator.CONTAINS: _contains,
    Operator.NOT_CONTAINS: lambda left, right: not _contains(left, right),
    Operator.STARTS_WITH: lambda left, right: _affix(left, right, str.startswith),
    Operator.ENDS_WITH: lambda left, right: _affix(left, right, str.endswith),
    Operator.GREATER_THAN: lambda left, right: _compare(left, right, lambda a, b: a > b),
    Operator.LESS_THAN: lambda left, right: _compare(left, right, lambda a, b: a < b),
    Operator.GREATER_EQUAL: lambda left, right: _compare(left, right, lambda a, b: a >= b),
    Operator.LESS_EQUAL: lambda left, right: _compare(left, right, lambda a, b: a <= b),
    Operator.IS_EMPTY: lambda left, right: not has_value(left),
    Operator.IS_NOT_EMPTY: lambda left, right: has_value(left),
    Operator.IS_SELECTED: lambda left, right: has_value(left),
    Operator.IS_NOT_SELECTED: lambda left, right: not has_value(left),
    Operator.HAS_ANY_VALUE: lambda left, right: has_value(left),
    Operator.IN_LIST: _in_list,
}


def evaluate_condition(
    condition: Condition,
    data: Optional[Mapping[str, Any]],
    known_field_ids: Optional[Iterable[str]] = None,
) -> bool:
    """
    Evaluate one condition against the current answers.

    Args:
        condition: Condition to evaluate
        data: Answers keyed by field id; absent keys are empty
        known_field_ids: When given, a trigger field outside this set makes
            the condition False. When None, existence cannot be checked and
            a trigger absent from `data` is treated as an empty answer, so
            is-empty style operators hold. Pass the form's field ids (as
            FormLogic and the validators do) to get dangling-trigger
            conditions rejected.

    Returns:
        True if the condition holds
    """
    if known_field_ids is not None and condition.trigger_field_id not in known_field_ids:
        logger.debug("condition references unknown field %r", condition.trigger_field_id)
        return False

    op = normalize_operator(condition.operator)
    if op is None:
        logger.debug("unknown operator %r evaluates to False", condition.operator_name)
        return False

    left = (data or {}).get(condition.trigger_field_id)
    return _EVALUATORS[op](left, condition.value)


def evaluate_rule(
    rule: Union[Rule, Sequence[Condition]],
    data: Optional[Mapping[str, Any]],
    known_field_ids: Optional[Iterable[str]] = None,
) -> bool:
    """
    Fold a rule's conditions strictly left to right.

        result = eval(c0)
        result = result AND/OR eval(ci)   for each following ci

    There is no precedence between AND and OR. A condition is only left
    unevaluated when its combinator cannot change the running result
    (AND after False, OR after True). An empty rule is False.
    """
    conditions = rule.conditions if isinstance(rule, Rule) else tuple(rule)
    if not conditions:
        return False

    if known_field_ids is not None and not isinstance(known_field_ids, (set, frozenset)):
        known_field_ids = set(known_field_ids)

    result = evaluate_condition(conditions[0], data, known_field_ids)
    for condition in conditions[1:]:
        if normalize_combinator(condition.combinator) is Combinator.OR:
            if not result:
                result = evaluate_condition(condition, data, known_field_ids)
        else:
            if result:
                result = evaluate_condition(condition, data, known_field_ids)
    return result

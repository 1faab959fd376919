"""
Condition vocabulary for form logic.

Every piece of conditional logic in a form (field visibility, page skips,
page hiding) is built from the same two objects:

    - Condition: one comparison between a field's current answer and a literal
    - Rule: an ordered sequence of Conditions folded left to right

ARCHITECTURAL RULE:
    This module defines structure and vocabulary only.
    Evaluation lives in `formlogic.evaluator`.

The operator vocabulary is a static table (`OPERATORS`). Adding an operator
means one `Operator` member, one table entry and one evaluator branch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union


class Operator(Enum):
    """
    Comparison operators usable in a Condition.

    Values are the canonical hyphenated names used in serialized forms.
    """

    EQUALS = "equals"
    NOT_EQUALS = "not-equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not-contains"
    STARTS_WITH = "starts-with"
    ENDS_WITH = "ends-with"
    GREATER_THAN = "greater-than"
    LESS_THAN = "less-than"
    GREATER_EQUAL = "greater-or-equal"
    LESS_EQUAL = "less-or-equal"
    IS_EMPTY = "is-empty"
    IS_NOT_EMPTY = "is-not-empty"
    IS_SELECTED = "is-selected"
    IS_NOT_SELECTED = "is-not-selected"
    HAS_ANY_VALUE = "has-any-value"
    HAS_SPECIFIC_VALUE = "has-specific-value"
    IN_LIST = "in-list"


class Combinator(Enum):
    """How a condition folds with the running result of its rule."""

    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class OperatorSpec:
    """
    Static description of one operator.

    Properties:
        operator: The Operator member described
        label: Human-readable label (what a form editor shows)
        requires_value: Whether a comparison value must be supplied
        numeric: Whether both sides are coerced to numbers
        aliases: Other names accepted for this operator on input
    """

    operator: Operator
    label: str
    requires_value: bool
    numeric: bool = False
    aliases: Tuple[str, ...] = ()


OPERATORS: Dict[Operator, OperatorSpec] = {
    spec.operator: spec
    for spec in (
        OperatorSpec(Operator.EQUALS, "is equal to", True,
                     aliases=("eq", "==", "equal", "is equal to", "is")),
        OperatorSpec(Operator.NOT_EQUALS, "is not equal to", True,
                     aliases=("neq", "ne", "!=", "not equal", "is not equal to", "is not")),
        OperatorSpec(Operator.CONTAINS, "contains", True,
                     aliases=("includes",)),
        OperatorSpec(Operator.NOT_CONTAINS, "does not contain", True,
                     aliases=("does not contain", "not contains", "excludes")),
        OperatorSpec(Operator.STARTS_WITH, "starts with", True,
                     aliases=("starts with", "begins with")),
        OperatorSpec(Operator.ENDS_WITH, "ends with", True,
                     aliases=("ends with",)),
        OperatorSpec(Operator.GREATER_THAN, "is greater than", True, numeric=True,
                     aliases=("gt", ">", "is greater than")),
        OperatorSpec(Operator.LESS_THAN, "is less than", True, numeric=True,
                     aliases=("lt", "<", "is less than")),
        OperatorSpec(Operator.GREATER_EQUAL, "is greater than or equal to", True, numeric=True,
                     aliases=("gte", "ge", ">=", "is greater than or equal to")),
        OperatorSpec(Operator.LESS_EQUAL, "is less than or equal to", True, numeric=True,
                     aliases=("lte", "le", "<=", "is less than or equal to")),
        OperatorSpec(Operator.IS_EMPTY, "is empty", False,
                     aliases=("empty", "is empty")),
        OperatorSpec(Operator.IS_NOT_EMPTY, "is not empty", False,
                     aliases=("not empty", "is not empty")),
        OperatorSpec(Operator.IS_SELECTED, "is selected", False,
                     aliases=("selected", "is selected", "is checked")),
        OperatorSpec(Operator.IS_NOT_SELECTED, "is not selected", False,
                     aliases=("not selected", "is not selected", "is not checked")),
        OperatorSpec(Operator.HAS_ANY_VALUE, "has any value", False,
                     aliases=("has any value", "answered")),
        OperatorSpec(Operator.HAS_SPECIFIC_VALUE, "has specific value", True,
                     aliases=("has specific value",)),
        OperatorSpec(Operator.IN_LIST, "is one of", True,
                     aliases=("in", "one of", "is one of", "in list")),
    )
}


def _alias_key(name: str) -> str:
    return " ".join(name.strip().lower().replace("_", " ").replace("-", " ").split())


_ALIASES: Dict[str, Operator] = {}
for _spec in OPERATORS.values():
    _ALIASES[_alias_key(_spec.operator.value)] = _spec.operator
    _ALIASES[_alias_key(_spec.operator.name)] = _spec.operator
    for _alias in _spec.aliases:
        _ALIASES[_alias_key(_alias)] = _spec.operator


def normalize_operator(name: Union[str, Operator, None]) -> Optional[Operator]:
    """
    Map any accepted operator spelling onto an Operator.

    Accepts the canonical names ("greater-than"), enum names ("GREATER_THAN"),
    snake_case ("greater_than"), the short backend codes ("gt") and the
    editor labels ("is greater than").

    Returns:
        Operator or None when the name is unknown
    """
    if isinstance(name, Operator):
        return name
    if not isinstance(name, str) or not name.strip():
        return None
    return _ALIASES.get(_alias_key(name))


def normalize_combinator(name: Union[str, Combinator, None]) -> Combinator:
    """Map "and"/"or" (any case) onto a Combinator; anything else is AND."""
    if isinstance(name, Combinator):
        return name
    if isinstance(name, str) and name.strip().upper() in ("OR", "||", "ANY"):
        return Combinator.OR
    return Combinator.AND


def requires_value(operator: Union[str, Operator, None]) -> bool:
    """Whether a condition using this operator needs a comparison value."""
    op = normalize_operator(operator)
    if op is None:
        return False
    return OPERATORS[op].requires_value


@dataclass(frozen=True)
class Condition:
    """
    Atomic comparison between one field's current answer and a literal.

    Example:
        age is greater than 18

    Becomes:
        Condition(trigger_field_id="age", operator=Operator.GREATER_THAN, value="18")

    Properties:
        trigger_field_id:
            Id of the field whose answer is compared (any page of the form)

        operator:
            Operator member. Unknown operator names are kept as the raw
            string so the form still loads; such a condition is always false.

        value:
            Comparison literal (str, number, or a list for in-list).
            None for operators that take no value.

        combinator:
            How this condition folds with the result so far.
            Ignored on the first condition of a rule.

    IMPORTANT:
        This object is immutable (frozen=True).
        It does NOT evaluate itself.
    """

    trigger_field_id: str
    operator: Union[Operator, str]
    value: object = None
    combinator: Combinator = Combinator.AND

    @property
    def operator_name(self) -> str:
        if isinstance(self.operator, Operator):
            return self.operator.value
        return str(self.operator)


@dataclass(frozen=True)
class Rule:
    """
    Ordered sequence of Conditions producing one boolean.

    The sequence is folded strictly left to right with no precedence
    between AND and OR:

        A OR B AND C  ==  ((A OR B) AND C)

    An empty rule evaluates to False.
    """

    conditions: Tuple[Condition, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.conditions, tuple):
            object.__setattr__(self, "conditions", tuple(self.conditions))

    def __len__(self) -> int:
        return len(self.conditions)

    def __iter__(self):
        return iter(self.conditions)

    @property
    def trigger_field_ids(self) -> List[str]:
        """Field ids referenced by this rule, in order, without duplicates."""
        seen: List[str] = []
        for cond in self.conditions:
            if cond.trigger_field_id not in seen:
                seen.append(cond.trigger_field_id)
        return seen


def all_of(*conditions: Condition) -> Rule:
    """Build a rule joining every condition with AND."""
    return Rule(tuple(_with_combinator(c, Combinator.AND) for c in conditions))


def any_of(*conditions: Condition) -> Rule:
    """Build a rule joining every condition with OR."""
    return Rule(tuple(_with_combinator(c, Combinator.OR) for c in conditions))


def _with_combinator(condition: Condition, combinator: Combinator) -> Condition:
    return Condition(
        trigger_field_id=condition.trigger_field_id,
        operator=condition.operator,
        value=condition.value,
        combinator=combinator,
    )


MISSING_TRIGGER = "missing-trigger"
UNKNOWN_TRIGGER = "unknown-trigger"
UNKNOWN_OPERATOR = "unknown-operator"
MISSING_VALUE = "missing-value"


@dataclass(frozen=True)
class ConditionProblem:
    code: str
    message: str


def check_condition(
    condition: Condition,
    known_field_ids: Optional[Iterable[str]] = None,
) -> List[ConditionProblem]:
    """
    List the problems a form editor should report for one condition.

    Returns an empty list for a well-formed condition. Evaluation never
    depends on this check; it only feeds save-time validation.
    """
    problems: List[ConditionProblem] = []
    if not condition.trigger_field_id:
        problems.append(ConditionProblem(MISSING_TRIGGER, "condition has no trigger field"))
    elif known_field_ids is not None and condition.trigger_field_id not in set(known_field_ids):
        problems.append(ConditionProblem(
            UNKNOWN_TRIGGER, f"trigger field '{condition.trigger_field_id}' does not exist"))

    op = normalize_operator(condition.operator)
    if op is None:
        problems.append(ConditionProblem(
            UNKNOWN_OPERATOR, f"unknown operator '{condition.operator_name}'"))
    elif OPERATORS[op].requires_value and _is_blank(condition.value):
        problems.append(ConditionProblem(
            MISSING_VALUE, f"operator '{op.value}' needs a comparison value"))
    return problems


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False

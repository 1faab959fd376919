"""
Core Form Model Objects

Defines the declarative form definition consumed by the logic engine:
    - Fields (answer slots, optionally carrying visibility rules)
    - Pages (ordered groups of fields, optionally carrying skip/hide rules)
    - Rules attached to fields and pages
    - FormDefinition (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about rendering, storage or transport
        - Are built once when the form is saved and not mutated while evaluating
        - Are fully serializable (see formlogic.serialization)
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from formlogic.conditions import Rule


class FieldType(Enum):
    """Field types the form builder offers."""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    DATE = "date"
    TIME = "time"
    RATING = "rating"
    ADDRESS = "address"
    LOCATION = "location"
    FILE = "file"


# Field types whose answers make sensible rule triggers in the editor.
CONDITIONAL_LOGIC_FIELD_TYPES = frozenset({
    FieldType.SELECT,
    FieldType.RADIO,
    FieldType.CHECKBOX,
    FieldType.DATE,
    FieldType.TIME,
    FieldType.RATING,
})


def supports_conditional_logic(field_type: Union[FieldType, str]) -> bool:
    """Whether answers of this field type are offered as rule triggers."""
    if isinstance(field_type, str):
        try:
            field_type = FieldType(field_type.strip().lower())
        except ValueError:
            return False
    return field_type in CONDITIONAL_LOGIC_FIELD_TYPES


class VisibilityAction(Enum):
    SHOW = "show"
    HIDE = "hide"


@dataclass(frozen=True)
class VisibilityRule:
    """
    Shows or hides a field when its rule matches.

    Properties:
        rule: Rule deciding whether this visibility rule applies
        action: SHOW or HIDE
        target_field_id:
            Field affected. May live on another page than the rule's
            trigger fields. None means the field that owns the rule.
    """

    rule: Rule
    action: VisibilityAction = VisibilityAction.SHOW
    target_field_id: Optional[str] = None


@dataclass(frozen=True)
class SkipRule:
    """
    Redirects navigation from the owning page to `target_page_id`
    when its rule matches.
    """

    rule: Rule
    target_page_id: str


@dataclass(frozen=True)
class HidePageRule:
    """
    Removes `target_page_id` from the visible pages when its rule matches.

    Evaluated independently of page sequencing.
    """

    rule: Rule
    target_page_id: str


@dataclass
class SubField:
    """One part of a compound (address) field, stored as `<field id>_<name>`."""

    name: str
    label: str = ""
    required: bool = False


@dataclass
class Field:
    """
    A single question on a page.

    Properties:
        id:
            Unique identifier within the form; the DataRecord key

        type:
            FieldType, or the raw string for types this package does not know

        label:
            Human-readable label used in validation messages

        required:
            Whether an answer is mandatory (only enforced when the field
            is actually shown, see formlogic.validation)

        options:
            Choices for select/radio/checkbox fields

        visibility_rules:
            Ordered VisibilityRules; the first matching rule wins

        subfields:
            Parts of an address field
    """

    id: str
    type: Union[FieldType, str] = FieldType.TEXT
    label: str = ""
    required: bool = False
    options: List[str] = field(default_factory=list)
    visibility_rules: List[VisibilityRule] = field(default_factory=list)
    subfields: List[SubField] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.label or self.id

    def subfield_key(self, subfield: SubField) -> str:
        """DataRecord key holding the answer of one subfield."""
        return f"{self.id}_{subfield.name}"


@dataclass
class Page:
    """
    An ordered group of fields shown together.

    Properties:
        id: Unique identifier within the form
        title: Human-readable page title
        fields: Ordered fields on this page
        skip_rules: Ordered SkipRules evaluated when leaving this page
        hide_rules: HidePageRules owned by this page (may target any page)
    """

    id: str
    title: str = ""
    fields: List[Field] = field(default_factory=list)
    skip_rules: List[SkipRule] = field(default_factory=list)
    hide_rules: List[HidePageRule] = field(default_factory=list)

    def get_field(self, field_id: str) -> Optional[Field]:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


@dataclass
class FormDefinition:
    """
    Root container for a form as the engine sees it.

    The form-editing collaborator owns this object; the engine only reads it.

    INVARIANTS (checked at save time by formlogic.analyzer, tolerated at
    evaluation time):
        - Field ids and page ids are unique
        - Every condition references an existing field
        - Every skip/hide target references an existing page
    """

    name: str = ""
    pages: List[Page] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)

    def get_page(self, page_id: str) -> Optional[Page]:
        """
        Retrieve a page by ID.

        Returns:
            Page object or None if not found
        """
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    def page_index(self, page_id: str) -> Optional[int]:
        for idx, page in enumerate(self.pages):
            if page.id == page_id:
                return idx
        return None

    def iter_fields(self) -> Iterator[Tuple[Page, Field]]:
        """Yield (page, field) pairs in form order."""
        for page in self.pages:
            for f in page.fields:
                yield page, f

    @property
    def all_fields(self) -> List[Field]:
        return [f for _, f in self.iter_fields()]

    @property
    def field_ids(self) -> List[str]:
        return [f.id for f in self.all_fields]

    def get_field(self, field_id: str) -> Optional[Field]:
        """
        Retrieve a field by ID from any page.

        Returns:
            Field object or None if not found
        """
        for _, f in self.iter_fields():
            if f.id == field_id:
                return f
        return None

    def page_of(self, field_id: str) -> Optional[Page]:
        """Return the page that holds `field_id`, or None."""
        for page, f in self.iter_fields():
            if f.id == field_id:
                return page
        return None

"""
Submission validation.

Decides which answers are mandatory for a given data record and reports the
ones that are missing or malformed. A required field is enforced only when
    - its page is on the respondent's path (reachable, and by default not
      removed by a hide-page rule), and
    - the field itself is visible.
A respondent is never blocked by a field they were never shown.

Validation failures are data (ValidationResult), not exceptions; callers
that prefer to abort a write with an exception use `raise_for_errors()`.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

from formlogic.evaluator import has_value
from formlogic.model import Field, FieldType, FormDefinition, Page
from formlogic.navigation import hidden_page_ids, reachable_page_ids
from formlogic.visibility import RuleIndex, build_rule_index, is_field_visible

REQUIRED = "required"
INVALID_EMAIL = "invalid_email"
INVALID_PHONE = "invalid_phone"
NOT_A_NUMBER = "not_a_number"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
_PHONE_MIN_LENGTH = 10


@dataclass(frozen=True)
class FieldError:
    """One failing field: id, label shown to the user, machine reason, message."""

    field_id: str
    label: str
    reason: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of validating one data record."""

    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok

    @property
    def failing_field_ids(self) -> List[str]:
        ids: List[str] = []
        for err in self.errors:
            if err.field_id not in ids:
                ids.append(err.field_id)
        return ids

    @property
    def messages(self) -> List[str]:
        return [err.message for err in self.errors]

    def raise_for_errors(self) -> None:
        """Raise SubmissionRejected when validation failed."""
        if self.errors:
            raise SubmissionRejected(self)


class SubmissionRejected(Exception):
    """Raised by ValidationResult.raise_for_errors(); carries the result."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.messages) or "submission rejected")


def _required_error(field_id: str, label: str) -> FieldError:
    return FieldError(field_id, label, REQUIRED, f"{label} is required")


def _format_error(f: Field, value: Any) -> Optional[FieldError]:
    """Type-specific check of a present answer."""
    if not has_value(value) or isinstance(value, (list, tuple)):
        return None
    text = str(value).strip()
    if f.type == FieldType.EMAIL and not _EMAIL_RE.match(text):
        return FieldError(f.id, f.display_name, INVALID_EMAIL, "Please enter a valid email address")
    if f.type == FieldType.PHONE and (not _PHONE_RE.match(text) or len(text) < _PHONE_MIN_LENGTH):
        return FieldError(f.id, f.display_name, INVALID_PHONE, "Please enter a valid phone number")
    if f.type == FieldType.NUMBER and not isinstance(value, (int, float)):
        try:
            float(text)
        except ValueError:
            return FieldError(f.id, f.display_name, NOT_A_NUMBER, f"{f.display_name} must be a number")
    return None


def check_field(f: Field, data: Mapping[str, Any]) -> List[FieldError]:
    """
    Validate one field that is known to be shown.

    Checks presence when required, the required parts of address fields,
    and the format of email/phone/number answers. A required field with
    subfields counts as answered when any of its subfields is.
    """
    errors: List[FieldError] = []
    value = data.get(f.id)

    if f.required:
        answered = has_value(value) or any(has_value(data.get(f.subfield_key(sub))) for sub in f.subfields)
        if not answered:
            errors.append(_required_error(f.id, f.display_name))

    for sub in f.subfields:
        if sub.required and not has_value(data.get(f.subfield_key(sub))):
            errors.append(_required_error(f.subfield_key(sub), sub.label or sub.name))

    format_error = _format_error(f, value)
    if format_error is not None:
        errors.append(format_error)
    return errors


def _check_page(
    page: Page,
    data: Mapping[str, Any],
    rule_index: RuleIndex,
    known: Iterable[str],
) -> List[FieldError]:
    errors: List[FieldError] = []
    for f in page.fields:
        if is_field_visible(f, rule_index.get(f.id), data, known):
            errors.extend(check_field(f, data))
    return errors


def validate_submission(
    form: FormDefinition,
    data: Optional[Mapping[str, Any]],
    respect_hidden_pages: bool = True,
) -> ValidationResult:
    """
    Validate a complete submission.

    Args:
        form: Form definition
        data: Submitted answers keyed by field id
        respect_hidden_pages: Skip pages removed by a hide-page rule as well
            as unreachable ones

    Returns:
        ValidationResult listing every failing field in form order
    """
    data = data or {}
    known = set(form.field_ids)
    rule_index = build_rule_index(form)

    on_path = set(reachable_page_ids(form.pages, data, known))
    if respect_hidden_pages:
        on_path -= hidden_page_ids(form.pages, data, known)

    result = ValidationResult()
    for page in form.pages:
        if page.id in on_path:
            result.errors.extend(_check_page(page, data, rule_index, known))
    return result


def validate_page(
    form: FormDefinition,
    page_id: str,
    data: Optional[Mapping[str, Any]],
) -> ValidationResult:
    """
    Validate the visible fields of one page (the preview's Next button).

    An unknown page id validates cleanly.
    """
    data = data or {}
    page = form.get_page(page_id)
    if page is None:
        return ValidationResult()
    errors = _check_page(page, data, build_rule_index(form), set(form.field_ids))
    return ValidationResult(errors=errors)

"""
formlogic: conditional logic engine for multi-page forms.

Given a declarative form definition and the answers entered so far, decides
    - which fields on a page are visible
    - which pages are reachable, and which page comes next
    - which fields must be answered before a submission is accepted

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Rendering
    - Storage of forms or responses
    - Network transport

The same code runs for the interactive preview and for server-side
revalidation of a submission.
"""

from formlogic.conditions import Combinator, Condition, Operator, Rule
from formlogic.engine import FormEvaluation, FormLogic
from formlogic.evaluator import evaluate_condition, evaluate_rule
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
from formlogic.navigation import next_page_id, reachable_page_ids, visible_page_ids
from formlogic.validation import FieldError, SubmissionRejected, ValidationResult, validate_submission
from formlogic.visibility import is_field_visible, visible_field_ids

__version__ = "0.1.0"

"""
Graphviz DOT diagram generator for form page flow.

Converts a FormDefinition into Graphviz DOT format for visualization.

Supports two modes:
    - SIMPLE: Pages with sequential and skip edges
    - DETAILED: Adds rule labels on skip edges, hide-page edges and
      per-page field counts
"""

from enum import Enum
from typing import List

from formlogic.conditions import Combinator, Rule
from formlogic.model import FormDefinition


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"          # Just page flow
    DETAILED = "detailed"      # Include rule labels and hide rules


_MAX_LABEL = 40


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _escape_dot_id(identifier: str) -> str:
    """Quote an identifier unless it is a plain DOT id."""
    if identifier and not identifier[0].isdigit() and identifier.replace('_', '').isalnum():
        return identifier
    return _escape_dot_string(identifier)


def _page_node_id(page_id: str) -> str:
    """Node id of a page; the prefix keeps pages apart from START, END and DOT keywords."""
    return _escape_dot_id(f"page_{page_id}")


def rule_to_label(rule: Rule) -> str:
    """Readable one-line form of a rule, e.g. `age greater-than 18 OR pet equals yes`."""
    parts: List[str] = []
    for i, cond in enumerate(rule.conditions):
        if i > 0:
            parts.append("OR" if cond.combinator == Combinator.OR else "AND")
        text = f"{cond.trigger_field_id} {cond.operator_name}"
        if cond.value is not None and cond.value != "":
            text += f" {cond.value}"
        parts.append(text)
    return " ".join(parts)


def _shorten(label: str) -> str:
    if len(label) > _MAX_LABEL:
        return label[:_MAX_LABEL - 3] + "..."
    return label


def generate_dot(form: FormDefinition, mode: DotMode = DotMode.SIMPLE) -> str:
    """
    Generate Graphviz DOT format for a form's page flow.

    Args:
        form: Form to visualize
        mode: Visualization mode (SIMPLE, DETAILED)

    Returns:
        String containing DOT graph definition
    """
    lines = []

    lines.append("digraph form {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    lines.append('  START [shape=ellipse, fillcolor=lightgreen, label="START"];')
    lines.append('  END [shape=ellipse, fillcolor=lightgrey, label="END"];')

    # =========================================================================
    # NODES
    # =========================================================================

    for page in form.pages:
        label = page.title or page.id
        if mode == DotMode.DETAILED:
            required = sum(1 for f in page.fields if f.required)
            label = f"{label}\n{len(page.fields)} fields, {required} required"
        lines.append(f"  {_page_node_id(page.id)} [label={_escape_dot_string(label)}];")

    # =========================================================================
    # EDGES
    # =========================================================================

    page_ids = {p.id for p in form.pages}
    if form.pages:
        lines.append(f"  START -> {_page_node_id(form.pages[0].id)};")
    else:
        lines.append("  START -> END;")

    for idx, page in enumerate(form.pages):
        from_id = _page_node_id(page.id)

        for skip in page.skip_rules:
            if skip.target_page_id not in page_ids:
                continue
            attrs = ["color=blue"]
            if mode == DotMode.DETAILED:
                attrs.append(f"label={_escape_dot_string(_shorten(rule_to_label(skip.rule)))}")
            lines.append(f"  {from_id} -> {_page_node_id(skip.target_page_id)} [{', '.join(attrs)}];")

        if idx + 1 < len(form.pages):
            next_id = _page_node_id(form.pages[idx + 1].id)
        else:
            next_id = "END"
        lines.append(f"  {from_id} -> {next_id} [style=dashed];")

        if mode == DotMode.DETAILED:
            for hide in page.hide_rules:
                if hide.target_page_id not in page_ids:
                    continue
                label = _escape_dot_string("hide if " + _shorten(rule_to_label(hide.rule)))
                lines.append(
                    f"  {from_id} -> {_page_node_id(hide.target_page_id)} "
                    f"[style=dotted, color=red, label={label}];"
                )

    lines.append("}")

    return "\n".join(lines)


def save_dot_file(form: FormDefinition, filename: str, mode: DotMode = DotMode.SIMPLE) -> None:
    """
    Generate DOT and save to file.

    Args:
        form: Form to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
    """
    dot = generate_dot(form, mode=mode)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file", "rule_to_label"]

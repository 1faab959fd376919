"""
Command line interface.

    formlogic check FORM              integrity report (exit 1 on errors)
    formlogic validate FORM DATA      validate a submission (exit 1 on failures)
    formlogic pages FORM DATA         reachable and visible pages for a record
    formlogic dot FORM [-o OUT]       page flow diagram in Graphviz DOT
"""
import argparse
import logging
import sys
from typing import List, Optional

import yaml

from formlogic.analyzer import analyze_form
from formlogic.backends.dot_generator import DotMode, generate_dot, save_dot_file
from formlogic.engine import FormLogic
from formlogic.serialization import load_form, load_record
from formlogic.settings import get_settings


def _cmd_check(args) -> int:
    form = load_form(args.form)
    report = analyze_form(form)
    print(f"Form: {report.form_name or args.form}")
    print(f"  Pages: {report.total_pages}  Fields: {report.total_fields}  "
          f"Rules: {report.total_rules}  Conditions: {report.total_conditions}")
    for msg in report.errors:
        print(f"  ERROR: {msg}")
    for msg in report.warnings:
        print(f"  WARNING: {msg}")
    if report.is_valid:
        print("  OK")
    return 0 if report.is_valid else 1


def _cmd_validate(args) -> int:
    logic = FormLogic(load_form(args.form))
    # None defers to FORMLOGIC_RESPECT_HIDDEN_PAGES.
    respect = False if args.enforce_hidden_pages else None
    result = logic.validate(load_record(args.data), respect_hidden_pages=respect)
    if result.ok:
        print("OK")
        return 0
    for err in result.errors:
        print(f"{err.field_id}: {err.message} ({err.reason})")
    return 1


def _cmd_pages(args) -> int:
    logic = FormLogic(load_form(args.form))
    evaluation = logic.evaluate(load_record(args.data))
    print("reachable: " + ", ".join(evaluation.reachable_page_ids))
    print("visible:   " + ", ".join(evaluation.visible_page_ids))
    for page_id, field_ids in evaluation.visible_field_ids.items():
        print(f"  {page_id}: {', '.join(field_ids)}")
    return 0


def _cmd_dot(args) -> int:
    form = load_form(args.form)
    mode = DotMode.DETAILED if args.detailed else DotMode.SIMPLE
    if args.output:
        save_dot_file(form, args.output, mode=mode)
        print(f"DOT written to {args.output}")
    else:
        print(generate_dot(form, mode=mode))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="formlogic", description="Conditional form logic tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("check", help="Check a form definition for broken logic")
    p.add_argument("form", help="Form definition (.json, .yaml)")
    p.set_defaults(func=_cmd_check)

    p = sub.add_parser("validate", help="Validate a submission against a form")
    p.add_argument("form", help="Form definition (.json, .yaml)")
    p.add_argument("data", help="Answers keyed by field id (.json, .yaml)")
    p.add_argument("--enforce-hidden-pages", action="store_true",
                   help="Also enforce required fields on pages hidden by a hide-page rule")
    p.set_defaults(func=_cmd_validate)

    p = sub.add_parser("pages", help="Show reachable and visible pages for a record")
    p.add_argument("form", help="Form definition (.json, .yaml)")
    p.add_argument("data", help="Answers keyed by field id (.json, .yaml)")
    p.set_defaults(func=_cmd_pages)

    p = sub.add_parser("dot", help="Render the page flow as Graphviz DOT")
    p.add_argument("form", help="Form definition (.json, .yaml)")
    p.add_argument("-o", "--output", help="Write to this file instead of stdout")
    p.add_argument("--detailed", action="store_true", help="Label edges with rules")
    p.set_defaults(func=_cmd_dot)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    level = getattr(logging, get_settings().log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

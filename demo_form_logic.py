#!/usr/bin/env python3
"""
Form Logic Demo: definition → analysis → respondent paths → validation

Walks the example pet survey through the engine:
1. Check the definition
2. Show the page path and visible fields for a few respondents
3. Validate their submissions
4. Write page flow diagrams
"""

from formlogic.analyzer import analyze_form
from formlogic.backends import DotMode, save_dot_file
from formlogic.engine import FormLogic
from formlogic.examples import build_example_pet_form

RESPONDENTS = {
    "adult with a cat": {
        "name": "Ann", "age": "34", "hasPet": "yes", "petName": "Tom", "petType": "cat",
        "occupation": "Nurse", "email": "ann@example.com",
        "address_street": "1 Main St", "address_city": "Springfield",
    },
    "teenager without a pet": {
        "name": "Kim", "age": "15", "hasPet": "no", "email": "kim@example.com",
        "address_street": "2 Elm St", "address_city": "Springfield",
    },
    "incomplete": {"name": "Bo", "age": "40", "hasPet": "yes", "petType": "other", "email": "bo@"},
}


def main():
    form = build_example_pet_form()
    logic = FormLogic(form)

    print("=" * 80)
    print(f"FORM LOGIC DEMO: {form.name}")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Analyze
    # =========================================================================
    print("\n1. CHECKING DEFINITION...")
    report = analyze_form(form)
    print(f"   Pages: {report.total_pages}  Fields: {report.total_fields}  Rules: {report.total_rules}")
    print(f"   Valid: {report.is_valid}")
    for warning in report.warnings:
        print(f"      - {warning}")

    # =========================================================================
    # STEP 2: Paths
    # =========================================================================
    print("\n2. RESPONDENT PATHS...")
    for who, data in RESPONDENTS.items():
        evaluation = logic.evaluate(data)
        print(f"   {who}: {' -> '.join(evaluation.visible_page_ids)}")
        for page_id, field_ids in evaluation.visible_field_ids.items():
            print(f"      {page_id}: {', '.join(field_ids) or '(nothing shown)'}")

    # =========================================================================
    # STEP 3: Validation
    # =========================================================================
    print("\n3. VALIDATING SUBMISSIONS...")
    for who, data in RESPONDENTS.items():
        result = logic.validate(data)
        status = "OK" if result.ok else "; ".join(result.messages)
        print(f"   {who}: {status}")

    # =========================================================================
    # STEP 4: Diagrams
    # =========================================================================
    print("\n4. GENERATING DIAGRAMS...")
    for mode in (DotMode.SIMPLE, DotMode.DETAILED):
        filename = f"form_{mode.value}.dot"
        save_dot_file(form, filename, mode=mode)
        print(f"   Saved {filename}")

    print("\nTo render: dot -Tpng form_detailed.dot -o form_detailed.png")


if __name__ == "__main__":
    main()

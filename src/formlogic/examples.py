"""
Example form builders.

    build_example_pet_form: a four-page pet-owner survey exercising field
        visibility, a skip rule and a hide-page rule
    build_age_gate_form: three pages where adults skip page 2
"""
from formlogic.conditions import Condition, Operator, Rule, all_of
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


def build_example_pet_form() -> FormDefinition:
    form = FormDefinition(name="Pet Owner Survey")

    has_pet_yes = Rule((Condition("hasPet", Operator.EQUALS, "yes"),))

    about = Page(
        id="about",
        title="About you",
        fields=[
            Field(id="name", type=FieldType.TEXT, label="Name", required=True),
            Field(id="age", type=FieldType.NUMBER, label="Age", required=True),
            Field(id="hasPet", type=FieldType.RADIO, label="Do you have a pet?",
                  required=True, options=["yes", "no"]),
        ],
        # Respondents without a pet go straight to the adult questions.
        skip_rules=[
            SkipRule(rule=Rule((Condition("hasPet", Operator.EQUALS, "no"),)), target_page_id="adult"),
        ],
        # Minors never see the adult questions.
        hide_rules=[
            HidePageRule(rule=Rule((Condition("age", Operator.LESS_THAN, "18"),)), target_page_id="adult"),
        ],
    )

    pets = Page(
        id="pets",
        title="Your pet",
        fields=[
            Field(id="petName", type=FieldType.TEXT, label="Pet name", required=True,
                  visibility_rules=[VisibilityRule(rule=has_pet_yes, action=VisibilityAction.SHOW)]),
            Field(id="petType", type=FieldType.SELECT, label="Pet type", required=True,
                  options=["dog", "cat", "other"],
                  visibility_rules=[VisibilityRule(rule=has_pet_yes, action=VisibilityAction.SHOW)]),
            Field(id="petOther", type=FieldType.TEXT, label="What kind of pet?", required=True,
                  visibility_rules=[VisibilityRule(
                      rule=all_of(
                          Condition("hasPet", Operator.EQUALS, "yes"),
                          Condition("petType", Operator.EQUALS, "other"),
                      ),
                      action=VisibilityAction.SHOW,
                  )]),
        ],
    )

    adult = Page(
        id="adult",
        title="Work",
        fields=[
            Field(id="occupation", type=FieldType.TEXT, label="Occupation", required=True),
        ],
    )

    contact = Page(
        id="contact",
        title="Contact",
        fields=[
            Field(id="email", type=FieldType.EMAIL, label="Email", required=True),
            Field(id="phone", type=FieldType.PHONE, label="Phone"),
            Field(id="address", type=FieldType.ADDRESS, label="Address", subfields=[
                SubField(name="street", label="Street", required=True),
                SubField(name="city", label="City", required=True),
                SubField(name="zip", label="ZIP"),
            ]),
        ],
    )

    form.pages = [about, pets, adult, contact]
    form.metadata = {"source": "examples"}
    return form


def build_age_gate_form() -> FormDefinition:
    pages = [
        Page(id="1", fields=[Field(id="age", type=FieldType.NUMBER, label="Age")],
             skip_rules=[SkipRule(
                 rule=Rule((Condition("age", Operator.GREATER_THAN, "18"),)),
                 target_page_id="3",
             )]),
        Page(id="2", fields=[Field(id="guardian", type=FieldType.TEXT, label="Guardian", required=True)]),
        Page(id="3", fields=[Field(id="consent", type=FieldType.CHECKBOX, label="Consent",
                                   options=["agree"])]),
    ]
    return FormDefinition(name="Age Gate", pages=pages)

import pandas as pd

from app.services.activity_catalog import ActivityCatalog, ActivityEntry, get_activity_catalog


def test_programs_are_listed():
    assert get_activity_catalog().programs() == ["HIV", "MALARIA", "TB"]


def test_hiv_template_order_and_content():
    template = get_activity_catalog().template_for("HIV")

    assert len(template) == 10
    assert template[0] == ActivityEntry(
        category="Human Resources (HR)",
        activity="Salaries",
        description="Salaries of health workers supporting HIV services (nurses and data managers)",
    )
    assert [entry.activity for entry in template[-4:]] == [
        "Bank charges", "Communication", "Office supplies", "Maintenance",
    ]


def test_program_lookup_is_case_insensitive():
    catalog = get_activity_catalog()
    assert catalog.template_for("malaria") == catalog.template_for("MALARIA")


def test_unknown_program_has_empty_template():
    assert get_activity_catalog().template_for("POLIO") == ()


def test_categories_keep_first_appearance_order():
    assert get_activity_catalog().categories_for("HIV") == [
        "Human Resources (HR)",
        "Travel Related Costs (TRC)",
        "Health Products & Equipment (HPE)",
        "Program Administration Costs (PA)",
    ]


def test_facility_type_scope_filters_entries():
    catalog = ActivityCatalog.from_frame(
        pd.DataFrame(
            {
                "program": ["HIV", "HIV", "HIV"],
                "facility_type": ["all", "Hospital", "Health Center"],
                "category": ["A", "B", "C"],
                "activity": ["Shared", "Ward rounds", "Outreach"],
                "description": ["", "", ""],
            }
        )
    )

    assert [e.activity for e in catalog.template_for("HIV", is_hospital=True)] == ["Shared", "Ward rounds"]
    assert [e.activity for e in catalog.template_for("HIV", is_hospital=False)] == ["Shared", "Outreach"]

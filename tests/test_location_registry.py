import pandas as pd
import pytest

from app.services.location_registry import LocationRegistry, display_label, get_location_registry


@pytest.fixture
def registry():
    return get_location_registry()


def test_display_label_capitalises_first_letter():
    assert display_label("  gasabo ") == "Gasabo"
    assert display_label("") == ""


def test_hospital_district_lookup(registry):
    assert registry.district_of("BUTARO HOSPITAL") == "Burera"
    assert registry.district_of("KIGEME Hospital") == "Nyamagabe"
    assert registry.district_of("Unknown Hospital") is None


def test_provinces_are_sorted(registry):
    assert registry.list_provinces() == ["Eastern", "Kigali", "Northern", "Southern", "Western"]


def test_districts_are_deduplicated_and_sorted(registry):
    districts = registry.list_districts("Kigali")
    assert districts == sorted(districts)
    assert districts.count("Gasabo") == 1
    assert "gasabo" not in districts


def test_unknown_province_has_no_districts(registry):
    assert registry.list_districts("Atlantis") == []


def test_province_of_district(registry):
    assert registry.province_of_district("Burera") == "Northern"
    assert registry.province_of_district("burera") == "Northern"
    assert registry.province_of_district("Nowhere") is None


def test_hospitals_in_district(registry):
    assert registry.hospitals_in("Northern", "Burera") == ["BUTARO HOSPITAL"]
    # District exists but belongs to another province
    assert registry.hospitals_in("Kigali", "Burera") == []


def test_facilities_keep_table_order(registry):
    assert registry.facilities_for("HIV", "BUTARO HOSPITAL") == [
        "BUTARO", "Kivuye", "RUSASA", "Rugarama", "Butaro", "Burera",
    ]
    assert registry.facilities_for("hiv", "BUTARO HOSPITAL")[0] == "BUTARO"


@pytest.mark.parametrize("hospital", ["BUTARO HOSPITAL", "KIGEME Hospital", "MURUNDA HOSPITAL"])
def test_tb_has_no_sub_facilities(registry, hospital):
    assert registry.facilities_for("TB", hospital) == []


def test_hospitals_for_program(registry):
    assert registry.hospitals_for_program("tb") == ["BUTARO HOSPITAL", "KIGEME Hospital", "MURUNDA HOSPITAL"]
    assert registry.hospitals_for_program("POLIO") == []


def test_programs_for_hospital(registry):
    assert registry.programs_for("BUTARO HOSPITAL") == ["HIV", "MALARIA", "TB"]
    assert registry.programs_for("Unknown Hospital") == []


def test_from_frames_with_minimal_tables():
    registry = LocationRegistry.from_frames(
        pd.DataFrame({"province": ["North", "North"], "district": ["alpha", "Alpha"]}),
        pd.DataFrame({"hospital": ["H1"], "district": ["Alpha"]}),
        pd.DataFrame({"program": ["HIV", "TB"], "hospital": ["H1", "H1"], "facility": ["HC1", "HC2"]}),
    )

    assert registry.list_districts("North") == ["Alpha"]
    assert registry.facilities_for("HIV", "H1") == ["HC1"]
    assert registry.facilities_for("TB", "H1") == []

import pytest

from evie.models import EMPTY_CRITERIA, FilterCriteria, RangeBounds, VehicleRecord, parse_int, resolve_field


@pytest.mark.parametrize("text,expected", [
    ("215", 215),
    ("0", 0),
    ("12.9", 12),
    ("215 mi", 215),
    ("  42", 42),
    ("-5", -5),
    ("", 0),
    ("n/a", 0),
    (None, 0),
])
def test_parse_int_falls_back_to_zero(text, expected):
    assert parse_int(text) == expected


def test_record_numeric_properties(make_record):
    r = make_record(year="2021", rng="bad")
    assert r.year == 2021
    assert r.range == 0
    assert r.make_model == "TESLAMODEL 3"


def test_record_is_immutable(make_record):
    r = make_record()
    with pytest.raises(Exception):
        r.make = "NISSAN"


def test_value_accepts_canonical_and_header_names(make_record):
    r = make_record(year="2019", rng="100")
    assert r.value("ModelYear") == "2019"
    assert r.value("Model Year") == "2019"
    assert r.value("electric_range") == "100"
    assert resolve_field("Electric Vehicle Type") == "ev_type"
    with pytest.raises(ValueError):
        r.value("VIN")


def test_as_row_uses_source_headers(make_record):
    row = make_record().as_row()
    assert list(row) == ["Make", "Model", "Model Year", "Electric Range", "Electric Vehicle Type", "County", "City"]


def test_criteria_emptiness():
    assert EMPTY_CRITERIA.is_empty()
    assert not FilterCriteria(years=frozenset({"2020"})).is_empty()
    assert not FilterCriteria(range=RangeBounds(min=0)).is_empty()


def test_criteria_replace_returns_new_value():
    c = EMPTY_CRITERIA.replace(makes=["TESLA", "TESLA"])
    assert c.makes == frozenset({"TESLA"})
    assert EMPTY_CRITERIA.makes == frozenset()
    assert VehicleRecord().make == ""

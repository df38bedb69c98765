import math
import os
import sys

import pytest

sys.path.append(os.path.abspath("."))

from backend.app.BitFit.Assessments.exceptions import ReferenceDataError  # noqa: E402
from backend.app.BitFit.reference_data import (  # noqa: E402
    load_cardio_table,
    load_reference_table,
    load_strength_table,
    match_band,
    parse_range,
    select_age_range,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("> 60", ("gt", 60.0, math.inf)),
        ("< 30", ("lt", -math.inf, 30.0)),
        ("36+", ("plus", 36.0, math.inf)),
        ("1.32+", ("plus", 1.32, math.inf)),
        ("42-46", ("range", 42.0, 46.0)),
        ("18-25 years", ("range", 18.0, 25.0)),
        ("65+ years", ("plus", 65.0, math.inf)),
    ],
)
def test_parse_range(text, expected):
    assert parse_range(text) == expected


def test_parse_range_rejects_garbage():
    with pytest.raises(ReferenceDataError):
        parse_range("about forty")


def test_select_age_range_truncates_age():
    labels = ["18-25 years", "26-35 years", "65+ years"]
    assert select_age_range(25.9, labels) == "18-25 years"
    assert select_age_range(70, labels) == "65+ years"
    assert select_age_range(12, labels, default="18-25 years") == "18-25 years"


def test_match_band_higher_is_better():
    bands = [("Excellent", "> 60"), ("Good", "52-60"), ("Above Average", "47-51"), ("Very Poor", "< 30")]
    assert match_band(61, bands) == "Excellent"
    assert match_band(60, bands) == "Good"
    assert match_band(51.5, bands) == "Above Average"
    assert match_band(10, bands) == "Very Poor"


def test_match_band_lower_is_better():
    bands = [("Excellent", "< 79"), ("Good", "79-87"), ("Poor", "> 110")]
    assert match_band(78, bands, higher_is_better=False) == "Excellent"
    assert match_band(87, bands, higher_is_better=False) == "Good"
    assert match_band(120, bands, higher_is_better=False) == "Poor"


def test_bundled_tables_load():
    cardio = load_cardio_table()
    strength = load_strength_table()
    assert {"rockportWalkTest", "cooper12MinuteRun", "mile15Run", "stepTest3Minute"} <= set(cardio)
    assert {"benchPressBenchmarking", "legPressBenchmarking", "pushUpBenchmarking"} <= set(strength)


def test_every_band_string_parses():
    for test in load_cardio_table().values():
        if not isinstance(test, dict) or "maleStandards" not in test:
            continue
        for row in test["maleStandards"] + test["femaleStandards"]:
            for value in row.values():
                parse_range(value)
    for test in load_strength_table().values():
        for standards in test["standards"].values():
            for standard in standards:
                for value in standard["ageRanges"].values():
                    parse_range(value)


def test_missing_table_raises():
    with pytest.raises(ReferenceDataError):
        load_reference_table("does_not_exist.json")

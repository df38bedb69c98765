import os
import sys

import pytest

sys.path.append(os.path.abspath("."))

from backend.app.BitFit.Assessments.exceptions import InvalidInputError, UnknownAssessmentError  # noqa: E402
from backend.app.BitFit.Assessments.strength import (  # noqa: E402
    assess_strength,
    benchmark_strength,
    brzycki,
    epley,
    estimate_one_rep_max,
    lombardi,
)


def test_one_rep_max_formulas():
    assert epley(100, 10) == pytest.approx(133.33, abs=0.01)
    assert brzycki(100, 10) == pytest.approx(133.33, abs=0.01)
    assert lombardi(100, 10) == pytest.approx(125.89, abs=0.01)


def test_brzycki_rejects_high_reps():
    with pytest.raises(InvalidInputError):
        brzycki(100, 37)


def test_unknown_formula_falls_back_to_epley():
    assert estimate_one_rep_max(100, 10, "mystery") == pytest.approx(epley(100, 10))


def test_bench_press_direct_excellent():
    result = assess_strength("bench_press", {
        "age": 25, "gender": "male", "unit": "lb", "body_weight": 180,
        "method": "direct", "one_rep_max": 240,
    })
    assert result["ratio"] == 1.33
    assert result["category"] == "Excellent"
    assert result["status"] == "excellent"
    assert result["formula"] is None
    assert "1.33" in result["description"]


def test_bench_press_calculated_average():
    result = assess_strength("bench_press", {
        "age": 25, "gender": "male", "body_weight": 200,
        "weight_lifted": 150, "reps": 10, "formula": "epley",
    })
    assert result["one_rep_max"] == 200
    assert result["ratio"] == 1.0
    assert result["category"] == "Average"
    assert result["recommendations"][0].startswith("Start with bodyweight exercises")


def test_ratio_in_gap_goes_to_lower_band():
    assert benchmark_strength("bench_press", 1.135, 25, "male")["category"] == "Average"


def test_push_up_percentile_and_hyphenated_key():
    result = assess_strength("push-up", {"age": 35, "gender": "female", "push_ups": 22})
    assert result["test"] == "push_up"
    assert result["category"] == "Above Average"
    assert result["percentile"] == "70th-89th"
    assert result["status"] == "good"


def test_push_up_oldest_bracket():
    result = assess_strength("push_up", {"age": 64, "gender": "male", "push_ups": 22})
    assert result["age_range"] == "60+"
    assert result["category"] == "Excellent"


def test_age_below_table_uses_default_bracket():
    assert benchmark_strength("leg_press", 2.3, 15, "male")["age_range"] == "20-29"


def test_reps_bounded():
    with pytest.raises(InvalidInputError) as exc:
        assess_strength("leg_press", {
            "age": 30, "gender": "male", "body_weight": 180, "weight_lifted": 200, "reps": 25,
        })
    assert exc.value.field == "reps"


def test_unit_validated():
    with pytest.raises(InvalidInputError) as exc:
        assess_strength("bench_press", {"age": 30, "gender": "male", "unit": "stone", "body_weight": 12})
    assert exc.value.field == "unit"


def test_unknown_strength_test():
    with pytest.raises(UnknownAssessmentError):
        assess_strength("deadlift", {"age": 30, "gender": "male"})

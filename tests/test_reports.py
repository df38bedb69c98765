import os
import sys
from datetime import date

import pytest

sys.path.append(os.path.abspath("."))

from backend.app.BitFit.Assessments.body_assessment import assess_body  # noqa: E402
from backend.app.BitFit.Assessments.body_fat import assess_body_fat  # noqa: E402
from backend.app.BitFit.Assessments.calories import plan_calories  # noqa: E402
from backend.app.BitFit.Assessments.cardio import assess_cardio  # noqa: E402
from backend.app.BitFit.Assessments.exceptions import UnknownAssessmentError  # noqa: E402
from backend.app.BitFit.Assessments.strength import assess_strength  # noqa: E402
from backend.app.BitFit.reports import FOOTER, build_report  # noqa: E402

GENERATED_ON = date(2026, 1, 5)


def test_body_report_layout():
    result = assess_body({
        "age": 30, "gender": "male", "height": 170, "weight": 70, "waist": 85, "hip": 100,
        "systolic": 118, "diastolic": 76, "resting_heart_rate": 64,
    })
    file_name, text = build_report("body", result, GENERATED_ON)

    assert file_name == "Body-Assessment-Report-2026-01-05.txt"
    lines = text.splitlines()
    assert lines[0] == "BODY COMPOSITION ASSESSMENT REPORT - BitFit Pro"
    assert lines[1] == "Generated on: 2026-01-05"
    assert "- Reading: 118/76 mmHg" in lines
    assert "- Description: You have a healthy weight for your height. Keep up the good work!" in lines
    assert "OVERALL HEALTH SCORE: 94/100" in lines
    assert f"1. {result['recommendations'][0]}" in lines
    assert lines[-1] == FOOTER


def test_cardio_report_file_name_uses_test_name():
    result = assess_cardio("rockport", {
        "age": 30, "gender": "female", "weight": 62,
        "time_minutes": 14, "time_seconds": 30, "heart_rate": 130,
    })
    file_name, text = build_report("cardio", result, GENERATED_ON)
    assert file_name == "Cardiovascular-Assessment-Rockport-1-Mile-Walk-Test-2026-01-05.txt"
    assert "Test: Rockport 1-Mile Walk Test" in text
    assert "VO2 Max: 43.0 ml/kg/min" in text


def test_strength_report_shows_method():
    result = assess_strength("bench_press", {
        "age": 25, "gender": "male", "body_weight": 200,
        "weight_lifted": 150, "reps": 10, "formula": "epley",
    })
    file_name, text = build_report("strength", result, GENERATED_ON)
    assert file_name == "Strength-Assessment-Bench-Press-Strength-Assessment-2026-01-05.txt"
    assert "Strength Ratio: 1.00" in text
    assert "Method: Calculated from reps (epley)" in text


def test_body_fat_report_lists_categories():
    result = assess_body_fat({"gender": "male", "age": 30, "height": 175, "neck": 38, "waist": 85})
    file_name, text = build_report("body_fat", result, GENERATED_ON)
    assert file_name == "Body-Fat-Report-2026-01-05.txt"
    assert "BODY FAT CATEGORIES (MALE):" in text
    assert "- Essential Fat:" in text


def test_calorie_report_includes_timeline():
    result = plan_calories({
        "gender": "female", "age": 35, "height": 165, "current_weight": 78,
        "target_weight": 68, "timeframe_weeks": 16, "activity_level": "light",
    }, start=GENERATED_ON)
    file_name, text = build_report("calories", result, GENERATED_ON)
    assert file_name == "Weight-Loss-Plan-2026-01-05.txt"
    assert "Target Daily Calories: 1341 calories" in text
    assert "Week 0: 78.0 kg (2026-01-05)" in text


def test_unknown_report_kind():
    with pytest.raises(UnknownAssessmentError):
        build_report("yoga", {}, GENERATED_ON)

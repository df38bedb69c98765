import os
import sys
from datetime import date

import pytest

sys.path.append(os.path.abspath("."))

from backend.app.BitFit.Assessments.engine import ASSESSMENT_KINDS, AssessmentEngine  # noqa: E402
from backend.app.BitFit.Assessments.exceptions import (  # noqa: E402
    AssessmentError,
    InvalidInputError,
    UnknownAssessmentError,
)

BODY_PAYLOAD = {
    "age": 30, "gender": "male", "height": 170, "weight": 70, "waist": 85, "hip": 100,
    "systolic": 118, "diastolic": 76, "resting_heart_rate": 64,
}


def test_body_run_returns_result_and_trace():
    result, trace = AssessmentEngine().run("body", BODY_PAYLOAD)
    assert result["overall_score"] == 94
    assert [step["stage"] for step in trace] == ["validate_input", "compute_body", "engine_total"]
    assert all(step["ms"] >= 0 for step in trace)


def test_kind_is_case_insensitive():
    _, trace = AssessmentEngine().run("BODY", BODY_PAYLOAD)
    assert trace[1]["stage"] == "compute_body"


def test_cardio_requires_test():
    with pytest.raises(InvalidInputError) as exc:
        AssessmentEngine().run("cardio", {"age": 30, "gender": "male"})
    assert exc.value.field == "test"


def test_cardio_dispatches_to_test():
    result, _ = AssessmentEngine().run("cardio", {"age": 25, "gender": "male", "distance": 1.62}, test="Cooper")
    assert result["test"] == "cooper"
    assert result["category"] == "Good"


def test_unknown_kind():
    with pytest.raises(UnknownAssessmentError) as exc:
        AssessmentEngine().run("yoga", {})
    assert exc.value.field == "kind"


def test_payload_must_be_object():
    with pytest.raises(InvalidInputError):
        AssessmentEngine().run("body", ["not", "a", "dict"])


def test_calorie_timeline_uses_engine_start():
    payload = {
        "gender": "female", "age": 35, "height": 165, "current_weight": 78,
        "target_weight": 68, "timeframe_weeks": 16, "activity_level": "light",
    }
    result, _ = AssessmentEngine(start=date(2026, 1, 5)).run("calories", payload)
    assert result["timeline"][0]["date"] == "2026-01-05"
    assert result["timeline"][1]["date"] == "2026-01-12"


def test_output_contract_violation_raises(monkeypatch):
    engine = AssessmentEngine()
    monkeypatch.setitem(engine._runners, "body", lambda _test, _payload: {"bmi": {}})
    with pytest.raises(AssessmentError) as exc:
        engine.run("body", BODY_PAYLOAD)
    assert "missing fields" in exc.value.message


def test_all_kinds_known():
    assert set(ASSESSMENT_KINDS) == {"body", "body_fat", "cardio", "strength", "calories"}

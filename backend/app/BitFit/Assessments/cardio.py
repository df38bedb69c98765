from typing import Any, Dict, List, Optional

from ..reference_data import load_cardio_table, match_band, select_age_range
from .exceptions import InvalidInputError, ReferenceDataError, UnknownAssessmentError
from .validation import normalize_gender, to_number, validate_age, validate_heart_rate, validate_weight

# ------------------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------------------
LB_PER_KG = 2.20462
MILES_PER_KM = 0.621371
MIN_WALK_MINUTES = 8
MAX_WALK_MINUTES = 40
MIN_RUN_MINUTES = 6
MAX_RUN_MINUTES = 40
MIN_COOPER_MILES = 0.5
MAX_COOPER_MILES = 3.0
MIN_RECOVERY_HR = 40
MAX_RECOVERY_HR = 220

UNKNOWN_RESULT = {
    "category": "Unknown",
    "status": "fair",
    "description": "Unable to determine fitness level.",
}

VO2_STATUS = {
    "Excellent": "excellent",
    "Good": "excellent",
    "Above Average": "good",
    "Average": "fair",
    "Below Average": "fair",
    "Poor": "poor",
    "Very Poor": "poor",
}

# Per-test metadata: reference table key, display name, status map and category descriptions
CARDIO_TESTS: Dict[str, Dict[str, Any]] = {
    "rockport": {
        "table_key": "rockportWalkTest",
        "name": "Rockport 1-Mile Walk Test",
        "higher_is_better": True,
        "walking_based": True,
        "statuses": VO2_STATUS,
        "descriptions": {
            "Excellent": "Excellent cardiovascular fitness! Outstanding performance for your age group.",
            "Good": "Good cardiovascular fitness. You have a very healthy heart and lungs.",
            "Above Average": "Above average cardiovascular fitness. You have good endurance capacity.",
            "Average": "Average cardiovascular fitness for your age group.",
            "Below Average": "Below average cardiovascular fitness. There is room for improvement with regular exercise.",
            "Poor": "Poor cardiovascular fitness. Consider starting a regular exercise program.",
            "Very Poor": "Very poor cardiovascular fitness. Please consult a healthcare provider before starting exercise.",
        },
    },
    "cooper": {
        "table_key": "cooper12MinuteRun",
        "name": "Cooper 12-Minute Run Test",
        "higher_is_better": True,
        "walking_based": False,
        "statuses": {
            "Excellent": "excellent",
            "Good": "good",
            "Average": "fair",
            "Below Average": "fair",
            "Poor": "poor",
        },
        "descriptions": {
            "Excellent": "Excellent cardiovascular endurance! Outstanding performance for your age group.",
            "Good": "Good cardiovascular endurance. Above average performance.",
            "Average": "Average cardiovascular endurance for your age group.",
            "Below Average": "Below average endurance. Regular training could improve your performance.",
            "Poor": "Poor cardiovascular endurance. Consider starting a structured exercise program.",
        },
    },
    "mile15": {
        "table_key": "mile15Run",
        "name": "1.5-Mile Run Test",
        "higher_is_better": True,
        "walking_based": False,
        "statuses": VO2_STATUS,
        "descriptions": {
            "Excellent": "Excellent running performance! Outstanding cardiovascular fitness.",
            "Good": "Good running performance. Above average cardiovascular fitness.",
            "Above Average": "Above average running performance. Good cardiovascular fitness.",
            "Average": "Average running performance for your age group.",
            "Below Average": "Below average performance. Regular training could help improve your fitness.",
            "Poor": "Poor running performance. Consider starting with walking and gradually building endurance.",
            "Very Poor": "Very poor running performance. Please consult a healthcare provider before starting exercise.",
        },
    },
    "step": {
        "table_key": "stepTest3Minute",
        "name": "3-Minute Step Test",
        "higher_is_better": False,
        "walking_based": True,
        "statuses": {
            "Excellent": "excellent",
            "Good": "good",
            "Above Average": "good",
            "Average": "fair",
            "Below Average": "fair",
            "Poor": "poor",
        },
        "descriptions": {
            "Excellent": "Excellent cardiovascular recovery! Your heart recovers very efficiently.",
            "Good": "Good cardiovascular recovery. Above average fitness level.",
            "Above Average": "Above average cardiovascular recovery.",
            "Average": "Average cardiovascular recovery for your age group.",
            "Below Average": "Below average recovery. Regular cardio exercise could improve your fitness.",
            "Poor": "Poor cardiovascular recovery. Consider starting a gradual exercise program.",
        },
    },
}


def get_test_definition(test: str) -> Dict[str, Any]:
    definition = CARDIO_TESTS.get((test or "").lower())
    if not definition:
        allowed = ", ".join(sorted(CARDIO_TESTS))
        raise UnknownAssessmentError(f"Unknown cardio test '{test}'. Allowed: {allowed}", field="test")
    return definition


def _elapsed_minutes(minutes: Any, seconds: Any, minimum: float, maximum: float) -> float:
    whole = to_number(minutes, "time_minutes", minimum=0)
    secs = to_number(seconds if seconds not in (None, "") else 0, "time_seconds", minimum=0, maximum=59.99)
    total = whole + secs / 60.0
    if not (minimum <= total <= maximum):
        raise InvalidInputError(
            f"Total time must be between {minimum} and {maximum} minutes.",
            field="time_minutes",
        )
    return total


# ------------------------------------------------------------------------------
# Field-test formulas
# ------------------------------------------------------------------------------
def rockport_vo2(weight_kg: float, age: float, gender: str, time_minutes: float, heart_rate: float) -> float:
    """Rockport 1-mile walk regression (Kline et al.). Weight is converted to pounds."""
    weight_lb = weight_kg * LB_PER_KG
    gender_value = 1 if gender == "male" else 0
    vo2 = (
        132.853
        - 0.0769 * weight_lb
        - 0.3877 * age
        + 6.315 * gender_value
        - 3.2649 * time_minutes
        - 0.1565 * heart_rate
    )
    return round(max(vo2, 0.0), 1)


def cooper_vo2(distance_miles: float) -> float:
    return round(distance_miles * 35.97 - 11.29, 1)


def mile15_vo2(time_minutes: float) -> float:
    return round(483.0 / time_minutes + 3.5, 1)


def step_test_score(recovery_hr: float) -> float:
    return round(18000.0 / (recovery_hr * 5.6), 1)


# ------------------------------------------------------------------------------
# Benchmarking
# ------------------------------------------------------------------------------
def benchmark_cardio(test: str, value: float, age: float, gender: str) -> Dict[str, Any]:
    """
    Classify a benchmark value against the age/gender table of a field test.

    The value is VO2 max for the Rockport and 1.5-mile tests, distance in
    miles for the Cooper test and recovery heart rate for the step test.
    """
    definition = get_test_definition(test)
    table = load_cardio_table().get(definition["table_key"])
    if not table:
        raise ReferenceDataError(f"Missing reference table '{definition['table_key']}'.")

    standards = table.get("maleStandards" if gender == "male" else "femaleStandards") or []
    labels = [row["Age Range"] for row in standards]
    age_range = select_age_range(age, labels, table.get("defaultAgeRange"))
    row = next((r for r in standards if r["Age Range"] == age_range), None)
    if row is None:
        return {**UNKNOWN_RESULT, "age_range": None}

    bands = [(rating, row[rating]) for rating in definition["statuses"] if rating in row]
    category = match_band(value, bands, higher_is_better=definition["higher_is_better"])
    if category is None:
        return {**UNKNOWN_RESULT, "age_range": age_range}

    return {
        "category": category,
        "status": definition["statuses"][category],
        "description": definition["descriptions"][category],
        "age_range": age_range,
    }


def cardio_recommendations(test: str, status: str) -> List[str]:
    definition = get_test_definition(test)
    recommendations: List[str] = []

    if status in ("poor", "fair"):
        if definition["walking_based"]:
            recommendations.append("Start with 20-30 minutes of brisk walking 3-4 times per week.")
            recommendations.append("Gradually increase walking intensity and duration over 4-6 weeks.")
        else:
            recommendations.append("Begin with a walk-run program, alternating walking and light jogging.")
            recommendations.append("Focus on building your aerobic base with consistent, moderate-intensity exercise.")
        recommendations.append("Include 2-3 days of strength training to support overall fitness.")
    elif status == "good":
        recommendations.append("Maintain current activity level with 150+ minutes of moderate exercise weekly.")
        recommendations.append("Add interval training 1-2 times per week to improve performance further.")
        recommendations.append("Consider cross-training activities like cycling, swimming, or rowing.")
    else:
        recommendations.append("Excellent work! Maintain your current fitness level with varied activities.")
        recommendations.append("Challenge yourself with high-intensity interval training (HIIT).")
        recommendations.append("Consider training for endurance events or competitive activities.")

    recommendations.append("Stay consistent with your exercise routine for continued cardiovascular health.")
    recommendations.append("Monitor your progress by retesting every 8-12 weeks.")
    return recommendations


def _cooper_distance_miles(payload: Dict[str, Any]) -> float:
    unit = str(payload.get("distance_unit") or "miles").lower()
    distance = to_number(payload.get("distance"), "distance", positive=True)
    if unit in ("km", "kilometers", "kilometres"):
        distance = distance * MILES_PER_KM
    elif unit in ("m", "meters", "metres"):
        distance = distance / 1000.0 * MILES_PER_KM
    elif unit not in ("mi", "mile", "miles"):
        raise InvalidInputError("distance_unit must be one of: km, meters, miles", field="distance_unit")

    if not (MIN_COOPER_MILES <= distance <= MAX_COOPER_MILES):
        raise InvalidInputError(
            f"distance must be between {MIN_COOPER_MILES} and {MAX_COOPER_MILES} miles.",
            field="distance",
        )
    return distance


def assess_cardio(test: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Estimate VO2 max from one of the four field tests and benchmark it.

    Args:
      test: rockport | cooper | mile15 | step
      payload: age, gender plus the test-specific fields
        - rockport: weight (kg), time_minutes, time_seconds, heart_rate
        - cooper: distance, distance_unit (miles by default)
        - mile15: time_minutes, time_seconds
        - step: recovery_heart_rate

    Returns:
      dict with vo2_max (or fitness_score for the step test), the benchmark
      classification and recommendations

    Raises:
      UnknownAssessmentError: unsupported test
      InvalidInputError: missing or out-of-range inputs
    """
    definition = get_test_definition(test)
    test = test.lower()
    age = validate_age(payload.get("age"))
    gender = normalize_gender(payload.get("gender"))

    result: Dict[str, Any] = {"test": test, "test_name": definition["name"], "age": int(age), "gender": gender}
    vo2_max: Optional[float] = None

    if test == "rockport":
        weight = validate_weight(payload.get("weight"))
        minutes = _elapsed_minutes(payload.get("time_minutes"), payload.get("time_seconds"), MIN_WALK_MINUTES, MAX_WALK_MINUTES)
        heart_rate = validate_heart_rate(payload.get("heart_rate"))
        vo2_max = rockport_vo2(weight, age, gender, minutes, heart_rate)
        benchmark_value = vo2_max
        result["inputs"] = {"weight": weight, "time_minutes": round(minutes, 2), "heart_rate": heart_rate}
    elif test == "cooper":
        miles = _cooper_distance_miles(payload)
        vo2_max = cooper_vo2(miles)
        benchmark_value = round(miles, 2)
        result["inputs"] = {"distance_miles": round(miles, 2)}
    elif test == "mile15":
        minutes = _elapsed_minutes(payload.get("time_minutes"), payload.get("time_seconds"), MIN_RUN_MINUTES, MAX_RUN_MINUTES)
        vo2_max = mile15_vo2(minutes)
        benchmark_value = vo2_max
        result["inputs"] = {"time_minutes": round(minutes, 2)}
    else:
        recovery_hr = to_number(
            payload.get("recovery_heart_rate"),
            "recovery_heart_rate",
            minimum=MIN_RECOVERY_HR,
            maximum=MAX_RECOVERY_HR,
        )
        result["fitness_score"] = step_test_score(recovery_hr)
        benchmark_value = recovery_hr
        result["inputs"] = {"recovery_heart_rate": recovery_hr}

    benchmark = benchmark_cardio(test, benchmark_value, age, gender)
    result.update({
        "vo2_max": vo2_max,
        "benchmark_value": benchmark_value,
        **benchmark,
        "recommendations": cardio_recommendations(test, benchmark["status"]),
    })
    return result

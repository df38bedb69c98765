from typing import Any, Callable, Dict, List, Optional

from ..reference_data import load_strength_table, match_band, select_age_range
from .exceptions import InvalidInputError, ReferenceDataError, UnknownAssessmentError
from .validation import normalize_gender, to_number, validate_age

# ------------------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------------------
MAX_REPS = 20
MAX_PUSH_UPS = 200
MIN_BODY_WEIGHT = {"kg": 20, "lb": 45}
MAX_BODY_WEIGHT = {"kg": 400, "lb": 880}
MAX_LIFT = {"kg": 700, "lb": 1550}
ALLOWED_UNITS = ("kg", "lb")
ALLOWED_METHODS = ("direct", "calculated")


def epley(weight: float, reps: float) -> float:
    return weight * (1 + reps / 30.0)


def brzycki(weight: float, reps: float) -> float:
    if reps >= 37:
        raise InvalidInputError("Brzycki formula requires fewer than 37 reps.", field="reps")
    return weight * (36.0 / (37.0 - reps))


def lombardi(weight: float, reps: float) -> float:
    return weight * reps ** 0.1


ONE_REP_MAX_FORMULAS: Dict[str, Callable[[float, float], float]] = {
    "epley": epley,
    "brzycki": brzycki,
    "lombardi": lombardi,
}

RATIO_STATUS = {"Excellent": "excellent", "Good": "good", "Average": "fair", "Fair": "fair"}
PUSH_UP_STATUS = {"Excellent": "excellent", "Above Average": "good", "Average": "fair", "Below Average": "fair"}

STRENGTH_TESTS: Dict[str, Dict[str, Any]] = {
    "bench_press": {
        "table_key": "benchPressBenchmarking",
        "name": "Bench Press Strength Assessment",
        "label": "bench press",
        "uses_one_rep_max": True,
        "statuses": RATIO_STATUS,
        "recommendations": [
            "Start with bodyweight exercises like push-ups to build foundational strength.",
            "Focus on proper bench press form with lighter weights before increasing load.",
            "Include accessory exercises like dumbbell press and tricep work.",
        ],
    },
    "leg_press": {
        "table_key": "legPressBenchmarking",
        "name": "Leg Press Strength Assessment",
        "label": "leg press",
        "uses_one_rep_max": True,
        "statuses": RATIO_STATUS,
        "recommendations": [
            "Begin with bodyweight squats and lunges to build leg strength.",
            "Focus on full range of motion and proper form in leg press.",
            "Include single-leg exercises to address muscle imbalances.",
        ],
    },
    "push_up": {
        "table_key": "pushUpBenchmarking",
        "name": "Push-Up Endurance Assessment",
        "label": "push-up",
        "uses_one_rep_max": False,
        "statuses": PUSH_UP_STATUS,
        "recommendations": [
            "Start with modified push-ups (knee push-ups) if needed.",
            "Practice incline push-ups using a bench or wall.",
            "Focus on building core strength to support proper push-up form.",
        ],
    },
}


def get_strength_test(test: str) -> Dict[str, Any]:
    key = (test or "").strip().lower().replace("-", "_")
    definition = STRENGTH_TESTS.get(key)
    if not definition:
        allowed = ", ".join(sorted(STRENGTH_TESTS))
        raise UnknownAssessmentError(f"Unknown strength test '{test}'. Allowed: {allowed}", field="test")
    return definition


def estimate_one_rep_max(weight: float, reps: float, formula: str = "epley") -> float:
    """
    Estimate a one-repetition maximum from a submaximal set.

    Unknown formula names fall back to Epley.
    """
    if weight <= 0:
        raise InvalidInputError("weight_lifted must be greater than 0.", field="weight_lifted")
    if reps < 1:
        raise InvalidInputError("reps must be at least 1.", field="reps")
    estimator = ONE_REP_MAX_FORMULAS.get((formula or "epley").lower(), epley)
    return estimator(weight, reps)


def benchmark_strength(test: str, value: float, age: float, gender: str) -> Dict[str, Any]:
    """
    Rate a strength ratio (or push-up count) against the age/gender standards.

    Returns:
      dict with category, status, age_range and percentile (push-ups only)
    """
    definition = get_strength_test(test)
    table = load_strength_table().get(definition["table_key"])
    if not table:
        raise ReferenceDataError(f"Missing reference table '{definition['table_key']}'.")

    standards = table["standards"]["men" if gender == "male" else "women"]
    labels = list(standards[0]["ageRanges"].keys()) if standards else []
    age_range = select_age_range(age, labels, table.get("defaultAgeRange"))

    bands = [
        (standard["rating"], standard["ageRanges"][age_range])
        for standard in standards
        if age_range in standard.get("ageRanges", {})
    ]
    category = match_band(value, bands, higher_is_better=True) or "Unknown"
    percentile: Optional[str] = next(
        (s.get("percentile") for s in standards if s["rating"] == category),
        None,
    )

    return {
        "category": category,
        "status": definition["statuses"].get(category, "poor"),
        "age_range": age_range,
        "percentile": percentile,
    }


def strength_recommendations(test: str, status: str) -> List[str]:
    definition = get_strength_test(test)
    recommendations: List[str] = []

    if status in ("poor", "fair"):
        recommendations.extend(definition["recommendations"])
        recommendations.append("Train 2-3 times per week with adequate rest between sessions.")
    elif status == "good":
        recommendations.append("Maintain current strength levels with consistent training.")
        recommendations.append("Consider progressive overload by gradually increasing weight or reps.")
        recommendations.append("Include variety in your training with different exercises and rep ranges.")
    else:
        recommendations.append("Excellent strength! Focus on maintaining your current level.")
        recommendations.append("Consider advanced training techniques like periodization.")
        recommendations.append("You may benefit from sport-specific or performance-oriented training.")

    recommendations.append("Always prioritize proper form over lifting heavier weights.")
    recommendations.append("Allow 48-72 hours of rest between training the same muscle groups.")
    recommendations.append("Retest every 8-12 weeks to track your progress.")
    return recommendations


def _resolve_one_rep_max(payload: Dict[str, Any], unit: str) -> Dict[str, Any]:
    method = str(payload.get("method") or "calculated").lower()
    if method not in ALLOWED_METHODS:
        raise InvalidInputError("method must be one of: calculated, direct", field="method")

    if method == "direct":
        one_rep_max = to_number(payload.get("one_rep_max"), "one_rep_max", positive=True, maximum=MAX_LIFT[unit])
        return {"one_rep_max": one_rep_max, "method": method, "formula": None}

    formula = str(payload.get("formula") or "epley").lower()
    if formula not in ONE_REP_MAX_FORMULAS:
        raise InvalidInputError(
            f"formula must be one of: {', '.join(sorted(ONE_REP_MAX_FORMULAS))}",
            field="formula",
        )
    weight_lifted = to_number(payload.get("weight_lifted"), "weight_lifted", positive=True, maximum=MAX_LIFT[unit])
    reps = to_number(payload.get("reps"), "reps", minimum=1, maximum=MAX_REPS)
    return {
        "one_rep_max": estimate_one_rep_max(weight_lifted, reps, formula),
        "method": method,
        "formula": formula,
        "weight_lifted": weight_lifted,
        "reps": int(reps),
    }


def assess_strength(test: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run a strength benchmark.

    Args:
      test: bench_press | leg_press | push_up
      payload: age, gender and
        - bench/leg press: body_weight, unit (kg|lb, default lb), method
          (calculated|direct), one_rep_max or weight_lifted + reps + formula
        - push_up: push_ups

    Returns:
      dict with the ratio (or repetition count), category, status,
      description and recommendations

    Raises:
      UnknownAssessmentError / InvalidInputError
    """
    definition = get_strength_test(test)
    test_key = (test or "").strip().lower().replace("-", "_")
    age = validate_age(payload.get("age"))
    gender = normalize_gender(payload.get("gender"))

    result: Dict[str, Any] = {"test": test_key, "test_name": definition["name"], "age": int(age), "gender": gender}

    if definition["uses_one_rep_max"]:
        unit = str(payload.get("unit") or "lb").lower()
        if unit not in ALLOWED_UNITS:
            raise InvalidInputError("unit must be one of: kg, lb", field="unit")
        body_weight = to_number(
            payload.get("body_weight"),
            "body_weight",
            minimum=MIN_BODY_WEIGHT[unit],
            maximum=MAX_BODY_WEIGHT[unit],
        )
        lift = _resolve_one_rep_max(payload, unit)
        ratio = round(lift["one_rep_max"] / body_weight, 2)
        benchmark = benchmark_strength(test_key, ratio, age, gender)
        description = (
            f"Your {definition['label']} strength ratio is {ratio:.2f}, which falls in the "
            f"{benchmark['category'].lower()} range for your age and gender."
        )
        result.update({
            "unit": unit,
            "body_weight": body_weight,
            "one_rep_max": round(lift["one_rep_max"], 1),
            "method": lift["method"],
            "formula": lift["formula"],
            "ratio": ratio,
        })
    else:
        push_ups = to_number(payload.get("push_ups"), "push_ups", minimum=0, maximum=MAX_PUSH_UPS)
        push_ups = int(push_ups)
        benchmark = benchmark_strength(test_key, push_ups, age, gender)
        percentile_text = f" ({benchmark['percentile']} percentile)" if benchmark["percentile"] else ""
        description = (
            f"You completed {push_ups} push-ups, which falls in the {benchmark['category'].lower()} "
            f"range{percentile_text} for your age and gender."
        )
        result["push_ups"] = push_ups

    result.update({
        **benchmark,
        "description": description,
        "recommendations": strength_recommendations(test_key, benchmark["status"]),
    })
    return result

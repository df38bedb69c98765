from typing import Any, Dict, List

from .exceptions import InvalidInputError
from .validation import (
    normalize_gender,
    to_number,
    validate_age,
    validate_circumference,
    validate_heart_rate,
    validate_height,
    validate_weight,
)

# ------------------------------------------------------------------------------
# Category thresholds
# ------------------------------------------------------------------------------
# (upper bound exclusive, category, status, description); the last row catches everything else
BMI_BANDS = [
    (18.5, "Underweight", "poor",
     "You may need to gain weight. Consider consulting a healthcare provider."),
    (25.0, "Normal Weight", "excellent",
     "You have a healthy weight for your height. Keep up the good work!"),
    (30.0, "Overweight", "fair",
     "You may benefit from weight loss. Consider a balanced diet and regular exercise."),
    (float("inf"), "Obese", "poor",
     "Consider consulting a healthcare provider for a weight management plan."),
]

_WAIST_HIP_DESCRIPTIONS = (
    "Excellent waist-to-hip ratio indicating low health risk.",
    "Good waist-to-hip ratio with moderate health risk.",
    "Elevated waist-to-hip ratio indicating higher health risk.",
    "High waist-to-hip ratio indicating significant health risk.",
)

WAIST_HIP_BANDS = {
    "male": [
        (0.90, "Low Risk", "excellent", _WAIST_HIP_DESCRIPTIONS[0]),
        (0.95, "Moderate Risk", "good", _WAIST_HIP_DESCRIPTIONS[1]),
        (1.0, "High Risk", "fair", _WAIST_HIP_DESCRIPTIONS[2]),
        (float("inf"), "Very High Risk", "poor", _WAIST_HIP_DESCRIPTIONS[3]),
    ],
    "female": [
        (0.80, "Low Risk", "excellent", _WAIST_HIP_DESCRIPTIONS[0]),
        (0.85, "Moderate Risk", "good", _WAIST_HIP_DESCRIPTIONS[1]),
        (0.90, "High Risk", "fair", _WAIST_HIP_DESCRIPTIONS[2]),
        (float("inf"), "Very High Risk", "poor", _WAIST_HIP_DESCRIPTIONS[3]),
    ],
}

BLOOD_PRESSURE_DESCRIPTIONS = {
    "Normal": "Your blood pressure is in the normal range. Keep up the healthy lifestyle!",
    "Elevated": "Your blood pressure is elevated. Consider lifestyle changes to prevent hypertension.",
    "Stage 1 Hypertension": "You have Stage 1 hypertension. Consider consulting a healthcare provider.",
    "Stage 2 Hypertension": "You have Stage 2 hypertension. Please consult a healthcare provider immediately.",
}

RESTING_HEART_RATE_BANDS = [
    (60, "Athlete/Excellent", "excellent",
     "Excellent cardiovascular fitness. Your heart is very efficient."),
    (70, "Good", "good",
     "Good cardiovascular fitness. Your heart rate is healthy."),
    (80, "Average", "fair",
     "Average resting heart rate. Consider improving cardiovascular fitness."),
    (100, "Below Average", "fair",
     "Below average fitness level. Regular cardio exercise could help."),
    (float("inf"), "Poor", "poor",
     "High resting heart rate. Consider consulting a healthcare provider."),
]

STATUS_SCORES = {"excellent": 4, "good": 3, "fair": 2, "poor": 1}
NEEDS_WORK = ("poor", "fair")

MIN_SYSTOLIC = 60
MAX_SYSTOLIC = 260
MIN_DIASTOLIC = 30
MAX_DIASTOLIC = 160

GENERAL_BODY_TIPS = [
    "Stay hydrated and get adequate sleep (7-9 hours) for optimal health.",
    "Consider regular health check-ups with your healthcare provider.",
]


def _pick_band(value: float, bands) -> Dict[str, Any]:
    for upper, category, status, description in bands:
        if value < upper:
            return {"category": category, "status": status, "description": description}
    # unreachable: every table ends with an infinite bound
    raise InvalidInputError("Value outside every category band.")


# ------------------------------------------------------------------------------
# Individual metrics
# ------------------------------------------------------------------------------
# Categories come from the unrounded value; only the reported value is rounded.
def calculate_bmi(height_cm: Any, weight_kg: Any) -> Dict[str, Any]:
    """BMI = weight / height(m)^2, reported to one decimal."""
    height = validate_height(height_cm)
    weight = validate_weight(weight_kg)
    height_m = height / 100.0
    bmi = weight / (height_m * height_m)
    return {"value": round(bmi, 1), **_pick_band(bmi, BMI_BANDS)}


def calculate_waist_hip_ratio(waist_cm: Any, hip_cm: Any, gender: Any) -> Dict[str, Any]:
    waist = validate_circumference(waist_cm, "waist")
    hip = validate_circumference(hip_cm, "hip")
    gender = normalize_gender(gender)
    ratio = waist / hip
    return {"value": round(ratio, 2), **_pick_band(ratio, WAIST_HIP_BANDS[gender])}


def categorize_blood_pressure(systolic: Any, diastolic: Any) -> Dict[str, Any]:
    """
    Classify a blood pressure reading (AHA 2017 categories).

    Both readings are checked together: Normal and Elevated need a diastolic
    value below 80, while Stage 1 is reached by either reading.
    """
    sys_value = to_number(systolic, "systolic", minimum=MIN_SYSTOLIC, maximum=MAX_SYSTOLIC)
    dia_value = to_number(diastolic, "diastolic", minimum=MIN_DIASTOLIC, maximum=MAX_DIASTOLIC)
    if dia_value > sys_value:
        raise InvalidInputError("diastolic must not exceed systolic.", field="diastolic")

    if sys_value < 120 and dia_value < 80:
        category, status = "Normal", "excellent"
    elif sys_value < 130 and dia_value < 80:
        category, status = "Elevated", "good"
    elif sys_value < 140 or dia_value < 90:
        category, status = "Stage 1 Hypertension", "fair"
    else:
        category, status = "Stage 2 Hypertension", "poor"

    return {
        "systolic": int(round(sys_value)),
        "diastolic": int(round(dia_value)),
        "category": category,
        "status": status,
        "description": BLOOD_PRESSURE_DESCRIPTIONS[category],
    }


def categorize_resting_heart_rate(bpm: Any) -> Dict[str, Any]:
    value = validate_heart_rate(bpm, "resting_heart_rate")
    return {"value": int(round(value)), **_pick_band(value, RESTING_HEART_RATE_BANDS)}


# ------------------------------------------------------------------------------
# Combined assessment
# ------------------------------------------------------------------------------
def overall_score(statuses: List[str]) -> int:
    """Average the status scores (excellent=4 .. poor=1) as a 0-100 percentage."""
    if not statuses:
        return 0
    total = sum(STATUS_SCORES[s] for s in statuses)
    return round(total / (len(statuses) * 4) * 100)


def body_recommendations(results: Dict[str, Dict[str, Any]]) -> List[str]:
    recommendations: List[str] = []

    bmi = results["bmi"]
    if bmi["status"] in NEEDS_WORK:
        if bmi["category"] == "Underweight":
            recommendations.append(
                "Consider a balanced diet with adequate calories and strength training to gain healthy weight."
            )
        else:
            recommendations.append(
                "Focus on a calorie-controlled diet and regular cardio exercise for weight management."
            )

    if results["waist_hip_ratio"]["status"] in NEEDS_WORK:
        recommendations.append(
            "Include core strengthening exercises and reduce abdominal fat through cardio and diet."
        )

    if results["blood_pressure"]["status"] in NEEDS_WORK:
        recommendations.append(
            "Reduce sodium intake, increase potassium-rich foods, and engage in regular aerobic exercise."
        )

    if results["resting_heart_rate"]["status"] in NEEDS_WORK:
        recommendations.append(
            "Improve cardiovascular fitness through regular aerobic exercise like walking, cycling, or swimming."
        )

    if not recommendations:
        recommendations.append(
            "Maintain your excellent health with continued regular exercise and balanced nutrition."
        )

    return recommendations + GENERAL_BODY_TIPS


def assess_body(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run the full body assessment (BMI, waist-hip ratio, blood pressure, resting HR).

    Args:
      payload: dict with age, gender, height (cm), weight (kg), waist (cm),
               hip (cm), systolic, diastolic, resting_heart_rate

    Returns:
      dict with one entry per metric (value, category, status, description),
      overall_score (0-100) and recommendations

    Raises:
      InvalidInputError: when any required field is missing or out of range
    """
    age = validate_age(payload.get("age"))
    gender = normalize_gender(payload.get("gender"))

    results = {
        "bmi": calculate_bmi(payload.get("height"), payload.get("weight")),
        "waist_hip_ratio": calculate_waist_hip_ratio(payload.get("waist"), payload.get("hip"), gender),
        "blood_pressure": categorize_blood_pressure(payload.get("systolic"), payload.get("diastolic")),
        "resting_heart_rate": categorize_resting_heart_rate(payload.get("resting_heart_rate")),
    }
    statuses = [metric["status"] for metric in results.values()]

    return {
        "age": int(age),
        "gender": gender,
        **results,
        "overall_score": overall_score(statuses),
        "recommendations": body_recommendations(results),
    }

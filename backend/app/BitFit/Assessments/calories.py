import math
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import InvalidInputError
from .validation import (
    normalize_gender,
    optional_number,
    to_number,
    validate_age,
    validate_height,
    validate_weight,
)

# ------------------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------------------
KCAL_PER_KG = 7700  # ~3500 kcal per lb
MAX_WEEKLY_LOSS_KG = 0.9  # ~2 lb per week
MIN_HEALTHY_WEEKLY_LOSS_KG = 0.25  # ~0.5 lb per week
MIN_DAILY_CALORIES = 1200
MIN_TIMEFRAME_WEEKS = 1
MAX_TIMEFRAME_WEEKS = 104
MAX_BODY_FAT_PERCENT = 60
LB_PER_KG = 2.20462

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.2

# percentage of calories and kcal per gram
MACRO_SPLIT = {
    "protein": (30, 4),
    "carbs": (40, 4),
    "fats": (30, 9),
}

GENERAL_NUTRITION_TIPS = [
    "Drink plenty of water (at least 8 glasses per day) to support metabolism and reduce hunger.",
    "Include strength training 2-3 times per week to preserve muscle mass during weight loss.",
    "Eat protein with every meal to maintain satiety and support muscle preservation.",
    "Focus on whole, minimally processed foods for better nutrition and satiety.",
    "Track your food intake and weight consistently for best results.",
]


# ------------------------------------------------------------------------------
# Energy expenditure
# ------------------------------------------------------------------------------
def mifflin_st_jeor_bmr(gender: str, weight_kg: float, height_cm: float, age: float) -> float:
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    return base + 5 if gender == "male" else base - 161


def katch_mcardle_bmr(weight_kg: float, body_fat_percent: float) -> float:
    lean_mass = weight_kg * (1 - body_fat_percent / 100.0)
    return 370 + 21.6 * lean_mass


def calculate_bmr(
    gender: str,
    weight_kg: float,
    height_cm: float,
    age: float,
    body_fat_percent: Optional[float] = None,
) -> Tuple[float, str]:
    """
    Returns (bmr, formula). Katch-McArdle is used whenever a positive body fat
    percentage is known, Mifflin-St Jeor otherwise.
    """
    if body_fat_percent and body_fat_percent > 0:
        return katch_mcardle_bmr(weight_kg, body_fat_percent), "katch_mcardle"
    return mifflin_st_jeor_bmr(gender, weight_kg, height_cm, age), "mifflin_st_jeor"


def activity_multiplier(level: Any) -> Tuple[float, Optional[str]]:
    """
    Resolve an activity level name or numeric factor string.

    Unknown levels degrade to sedentary and return a warning instead of failing.
    """
    if level is None or level == "":
        return DEFAULT_ACTIVITY_MULTIPLIER, None

    key = str(level).strip().lower().replace(" ", "_").replace("-", "_")
    if key in ACTIVITY_MULTIPLIERS:
        return ACTIVITY_MULTIPLIERS[key], None

    try:
        factor = float(key)
    except ValueError:
        factor = None
    if factor in ACTIVITY_MULTIPLIERS.values():
        return factor, None

    return DEFAULT_ACTIVITY_MULTIPLIER, f"Unknown activity_level '{level}', using sedentary (1.2)."


# ------------------------------------------------------------------------------
# Plan pieces
# ------------------------------------------------------------------------------
def calculate_macros(calories: float) -> Dict[str, Dict[str, int]]:
    macros = {}
    for name, (percentage, kcal_per_gram) in MACRO_SPLIT.items():
        macro_calories = calories * percentage / 100.0
        macros[name] = {
            "grams": round(macro_calories / kcal_per_gram),
            "calories": round(macro_calories),
            "percentage": percentage,
        }
    return macros


def build_timeline(
    current_weight: float,
    target_weight: float,
    weekly_loss: float,
    start: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Weekly projected weights from week 0 until the target is reached."""
    start = start or date.today()
    # rounding guards against 10 / (10 / 3) landing just above an integer
    total_weeks = math.ceil(round((current_weight - target_weight) / weekly_loss, 6))
    timeline = []
    for week in range(total_weeks + 1):
        weight = max(target_weight, current_weight - week * weekly_loss)
        timeline.append({
            "week": week,
            "weight": round(weight, 1),
            "date": (start + timedelta(days=7 * week)).isoformat(),
        })
    return timeline


def calorie_recommendations(requested_weekly_loss: float, weekly_loss: float, uncapped_calories: float) -> List[str]:
    recommendations: List[str] = []

    if requested_weekly_loss > MAX_WEEKLY_LOSS_KG:
        recommendations.append(
            "Your target weight loss exceeds 0.9 kg (2 lbs) per week. Consider extending your timeframe "
            "for healthier, sustainable results."
        )
    elif weekly_loss < MIN_HEALTHY_WEEKLY_LOSS_KG:
        recommendations.append(
            "Your weight loss rate is very gradual, which is excellent for maintaining muscle mass and metabolism."
        )
    else:
        recommendations.append(
            "Your weight loss rate is within the healthy range of 0.25-0.9 kg (0.5-2 lbs) per week."
        )

    if uncapped_calories < MIN_DAILY_CALORIES:
        recommendations.append(
            "Your target calories are very low. Consider consulting a healthcare provider and focus on "
            "nutrient-dense foods."
        )

    return recommendations + GENERAL_NUTRITION_TIPS


def plan_calories(payload: Dict[str, Any], start: Optional[date] = None) -> Dict[str, Any]:
    """
    Build a weight-loss calorie plan.

    Args:
      payload: gender, age, height (cm), current_weight (kg), target_weight (kg),
               timeframe_weeks, activity_level, optional body_fat (%)
      start: first day of the plan (defaults to today)

    Returns:
      dict with bmr, tdee, deficit, target calories, weekly loss, timeline,
      macro breakdown, recommendations and any soft warnings

    Raises:
      InvalidInputError: missing inputs or a target weight not below the current weight
    """
    gender = normalize_gender(payload.get("gender"))
    age = validate_age(payload.get("age"))
    height = validate_height(payload.get("height"))
    current_weight = validate_weight(payload.get("current_weight"), "current_weight")
    target_weight = validate_weight(payload.get("target_weight"), "target_weight")
    weeks = to_number(
        payload.get("timeframe_weeks"),
        "timeframe_weeks",
        minimum=MIN_TIMEFRAME_WEEKS,
        maximum=MAX_TIMEFRAME_WEEKS,
    )
    body_fat = optional_number(payload.get("body_fat"), "body_fat", minimum=0, maximum=MAX_BODY_FAT_PERCENT)

    if target_weight >= current_weight:
        raise InvalidInputError(
            "Target weight must be less than current weight for weight loss.",
            field="target_weight",
        )

    warnings: List[str] = []
    multiplier, warning = activity_multiplier(payload.get("activity_level"))
    if warning:
        warnings.append(warning)

    bmr, formula = calculate_bmr(gender, current_weight, height, age, body_fat)
    tdee = bmr * multiplier

    weight_to_lose = current_weight - target_weight
    requested_weekly_loss = weight_to_lose / weeks
    weekly_loss = min(MAX_WEEKLY_LOSS_KG, requested_weekly_loss)
    daily_deficit = weekly_loss * KCAL_PER_KG / 7
    uncapped_calories = tdee - daily_deficit
    target_calories = max(MIN_DAILY_CALORIES, uncapped_calories)

    return {
        "gender": gender,
        "age": int(age),
        "current_weight": current_weight,
        "target_weight": target_weight,
        "bmr": round(bmr),
        "bmr_formula": formula,
        "activity_multiplier": multiplier,
        "tdee": round(tdee),
        "weight_to_lose": round(weight_to_lose, 1),
        "weeks_to_goal": weeks,
        "weekly_weight_loss": round(weekly_loss, 1),
        "weekly_weight_loss_lbs": round(weekly_loss * LB_PER_KG, 1),
        "daily_calorie_deficit": round(daily_deficit),
        "target_daily_calories": round(target_calories),
        "timeline": build_timeline(current_weight, target_weight, weekly_loss, start),
        "macro_breakdown": calculate_macros(target_calories),
        "recommendations": calorie_recommendations(requested_weekly_loss, weekly_loss, uncapped_calories),
        "warnings": warnings,
    }

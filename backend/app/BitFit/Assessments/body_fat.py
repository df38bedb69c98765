import math
from typing import Any, Dict, List, Optional

import numpy as np

from .exceptions import InvalidInputError
from .validation import (
    normalize_gender,
    optional_number,
    validate_age,
    validate_circumference,
    validate_height,
    MIN_WEIGHT_KG,
    MAX_WEIGHT_KG,
)

# ------------------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------------------
CM_PER_INCH = 2.54
MIN_BODY_FAT = 0.0
MAX_BODY_FAT = 50.0

# ACE body fat categories: (lower bound inclusive, label), evaluated top-down
BODY_FAT_CATEGORIES = {
    "male": [
        (25, "Obese"),
        (18, "Average"),
        (14, "Fitness"),
        (6, "Athletes"),
        (0, "Essential Fat"),
    ],
    "female": [
        (32, "Obese"),
        (25, "Average"),
        (21, "Fitness"),
        (14, "Athletes"),
        (0, "Essential Fat"),
    ],
}

CATEGORY_TABLE = [
    {"category": "Essential Fat", "female": "10-13%", "male": "2-5%"},
    {"category": "Athletes", "female": "14-20%", "male": "6-13%"},
    {"category": "Fitness", "female": "21-24%", "male": "14-17%"},
    {"category": "Average", "female": "25-31%", "male": "18-24%"},
    {"category": "Obese", "female": "32+%", "male": "25+%"},
]

# Jackson & Pollock ideal body fat by age; values outside the anchors are clamped
IDEAL_AGES = [20, 25, 30, 35, 40, 45, 50, 55]
IDEAL_BODY_FAT = {
    "female": [17.7, 18.4, 19.3, 21.5, 22.2, 22.9, 25.2, 26.3],
    "male": [8.5, 10.5, 12.7, 13.7, 15.3, 16.4, 18.9, 20.9],
}


def navy_body_fat(
    gender: str,
    height_cm: float,
    neck_cm: float,
    waist_cm: float,
    hip_cm: Optional[float] = None,
) -> float:
    """
    U.S. Navy circumference method.

    Inputs are centimetres; the regression is defined in inches so every
    measurement is converted first. Result is clamped to [0, 50] and rounded
    to two decimals.

    Raises:
      InvalidInputError: non-positive measurements, waist not larger than neck,
                         or a missing hip measurement for women
    """
    for field, value in (("height", height_cm), ("neck", neck_cm), ("waist", waist_cm)):
        if value is None or value <= 0:
            raise InvalidInputError(f"{field} must be greater than 0.", field=field)

    height_in = height_cm / CM_PER_INCH
    neck_in = neck_cm / CM_PER_INCH
    waist_in = waist_cm / CM_PER_INCH

    if gender == "male":
        if waist_in <= neck_in:
            raise InvalidInputError("waist must be larger than neck.", field="waist")
        body_fat = 86.010 * math.log10(waist_in - neck_in) - 70.041 * math.log10(height_in) + 36.76
    else:
        if hip_cm is None or hip_cm <= 0:
            raise InvalidInputError("hip is required for women.", field="hip")
        hip_in = hip_cm / CM_PER_INCH
        if waist_in + hip_in <= neck_in:
            raise InvalidInputError("waist plus hip must be larger than neck.", field="waist")
        body_fat = 163.205 * math.log10(waist_in + hip_in - neck_in) - 97.684 * math.log10(height_in) - 78.387

    return round(min(max(body_fat, MIN_BODY_FAT), MAX_BODY_FAT), 2)


def body_fat_category(body_fat: float, gender: str) -> str:
    for lower, label in BODY_FAT_CATEGORIES[gender]:
        if body_fat >= lower:
            return label
    return BODY_FAT_CATEGORIES[gender][-1][1]


def ideal_body_fat(age: float, gender: str) -> float:
    """Piecewise-linear ideal body fat for the age; np.interp clamps at both ends."""
    return round(float(np.interp(age, IDEAL_AGES, IDEAL_BODY_FAT[gender])), 1)


def ideal_curve(gender: str) -> List[Dict[str, float]]:
    return [{"age": age, "body_fat": value} for age, value in zip(IDEAL_AGES, IDEAL_BODY_FAT[gender])]


def assess_body_fat(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Estimate body fat with the Navy method and compare it to the category
    table and the age-adjusted ideal.

    Args:
      payload: gender, age, height, neck, waist (cm), hip (cm, women only),
               optional weight (kg) for fat / lean mass

    Returns:
      dict with body_fat, category, ideal_body_fat, difference_from_ideal,
      optional fat_mass / lean_mass, the category table and the ideal curve
    """
    gender = normalize_gender(payload.get("gender"))
    age = validate_age(payload.get("age"))
    height = validate_height(payload.get("height"))
    neck = validate_circumference(payload.get("neck"), "neck")
    waist = validate_circumference(payload.get("waist"), "waist")
    hip = validate_circumference(payload.get("hip"), "hip") if gender == "female" else None
    weight = optional_number(payload.get("weight"), "weight", minimum=MIN_WEIGHT_KG, maximum=MAX_WEIGHT_KG)

    body_fat = navy_body_fat(gender, height, neck, waist, hip)
    ideal = ideal_body_fat(age, gender)

    result: Dict[str, Any] = {
        "gender": gender,
        "age": int(age),
        "body_fat": body_fat,
        "category": body_fat_category(body_fat, gender),
        "ideal_body_fat": ideal,
        "difference_from_ideal": round(body_fat - ideal, 1),
        "category_table": CATEGORY_TABLE,
        "ideal_curve": ideal_curve(gender),
    }

    if weight is not None:
        fat_mass = round(weight * body_fat / 100.0, 1)
        result["fat_mass"] = fat_mass
        result["lean_mass"] = round(weight - fat_mass, 1)

    return result

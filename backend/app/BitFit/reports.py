"""
Plain-text assessment reports offered as file downloads.

Each builder takes the result dict produced by the matching calculator and
returns the report body; `build_report` also picks the download file name.
"""
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from .Assessments.exceptions import UnknownAssessmentError

BRAND = "BitFit Pro"
FOOTER = "© BitFit Pro - Your Partner in Health and Fitness"
DISCLAIMER = (
    "This assessment is for informational purposes only and should not replace professional medical advice.\n"
    "Please consult with a healthcare provider or a fitness professional for comprehensive health evaluation "
    "and personalized recommendations."
)


# ------------------------------------------------------------------------------
# Formatting helpers
# ------------------------------------------------------------------------------
def _section(title: str) -> List[str]:
    heading = f"{title}:"
    return ["", heading, "=" * len(heading)]


def _numbered(items: List[str]) -> List[str]:
    return [f"{index}. {item}" for index, item in enumerate(items, start=1)]


def _header(title: str, generated_on: date, extra: Optional[List[str]] = None) -> List[str]:
    lines = [f"{title} REPORT - {BRAND}", f"Generated on: {generated_on.isoformat()}"]
    return lines + (extra or [])


def _footer(recommendations: List[str]) -> List[str]:
    lines: List[str] = []
    if recommendations:
        lines += _section("PERSONALIZED RECOMMENDATIONS")
        lines += _numbered(recommendations)
    lines += _section("DISCLAIMER")
    lines += [DISCLAIMER, "", FOOTER]
    return lines


def _hyphenate(name: str) -> str:
    return "-".join(name.split())


# ------------------------------------------------------------------------------
# Report bodies
# ------------------------------------------------------------------------------
def render_body_report(result: Dict[str, Any], generated_on: date) -> str:
    bmi = result["bmi"]
    whr = result["waist_hip_ratio"]
    bp = result["blood_pressure"]
    rhr = result["resting_heart_rate"]

    lines = _header("BODY COMPOSITION ASSESSMENT", generated_on)
    lines += _section("ASSESSMENT RESULTS")
    lines += [
        "",
        "BMI (Body Mass Index):",
        f"- Value: {bmi['value']}",
        f"- Category: {bmi['category']}",
        f"- Status: {bmi['status'].upper()}",
        f"- Description: {bmi['description']}",
        "",
        "Waist-to-Hip Ratio:",
        f"- Value: {whr['value']}",
        f"- Category: {whr['category']}",
        f"- Status: {whr['status'].upper()}",
        f"- Description: {whr['description']}",
        "",
        "Blood Pressure:",
        f"- Reading: {bp['systolic']}/{bp['diastolic']} mmHg",
        f"- Category: {bp['category']}",
        f"- Status: {bp['status'].upper()}",
        f"- Description: {bp['description']}",
        "",
        "Resting Heart Rate:",
        f"- Value: {rhr['value']} bpm",
        f"- Category: {rhr['category']}",
        f"- Status: {rhr['status'].upper()}",
        f"- Description: {rhr['description']}",
        "",
        f"OVERALL HEALTH SCORE: {result['overall_score']}/100",
    ]
    lines += _footer(result["recommendations"])
    return "\n".join(lines) + "\n"


def render_cardio_report(result: Dict[str, Any], generated_on: date) -> str:
    lines = _header("CARDIOVASCULAR FITNESS ASSESSMENT", generated_on, [f"Test: {result['test_name']}"])
    lines += _section("PARTICIPANT INFORMATION")
    lines += [f"Age: {result['age']} years", f"Gender: {result['gender']}"]
    lines += _section("TEST RESULTS")
    if result.get("vo2_max") is not None:
        lines.append(f"VO2 Max: {result['vo2_max']} ml/kg/min")
    if result.get("fitness_score") is not None:
        lines.append(f"Fitness Score: {result['fitness_score']}")
    lines += [
        f"Fitness Category: {result['category']}",
        f"Status: {result['status'].upper()}",
        f"Description: {result['description']}",
    ]
    if result.get("age_range"):
        lines.append(f"Age Range: {result['age_range']}")
    for key, value in (result.get("inputs") or {}).items():
        lines.append(f"{key}: {value}")
    lines += _footer(result["recommendations"])
    return "\n".join(lines) + "\n"


def render_strength_report(result: Dict[str, Any], generated_on: date) -> str:
    lines = _header("STRENGTH ASSESSMENT", generated_on, [f"Test: {result['test_name']}"])
    lines += _section("PARTICIPANT INFORMATION")
    lines += [f"Age: {result['age']} years", f"Gender: {result['gender']}"]
    if result.get("body_weight") is not None:
        lines.append(f"Body Weight: {result['body_weight']} {result['unit']}")

    lines += _section("TEST RESULTS")
    if "ratio" in result:
        method = "Direct 1RM Test" if result["method"] == "direct" else f"Calculated from reps ({result['formula']})"
        lines += [
            f"One Rep Max: {result['one_rep_max']} {result['unit']}",
            f"Strength Ratio: {result['ratio']:.2f}",
            f"Method: {method}",
        ]
    else:
        lines += [f"Push-Ups: {result['push_ups']}", f"Percentile: {result.get('percentile') or 'N/A'}"]
    lines += [
        f"Fitness Category: {result['category']}",
        f"Status: {result['status'].upper()}",
        f"Description: {result['description']}",
    ]
    lines += _footer(result["recommendations"])
    return "\n".join(lines) + "\n"


def render_body_fat_report(result: Dict[str, Any], generated_on: date) -> str:
    lines = _header("BODY FAT ASSESSMENT", generated_on)
    lines += _section("RESULTS")
    lines += [
        f"Body Fat: {result['body_fat']}%",
        f"Category: {result['category']}",
        f"Ideal Body Fat for age {result['age']}: {result['ideal_body_fat']}%",
        f"Difference from Ideal: {result['difference_from_ideal']:+}%",
    ]
    if "fat_mass" in result:
        lines += [f"Fat Mass: {result['fat_mass']} kg", f"Lean Mass: {result['lean_mass']} kg"]

    lines += _section(f"BODY FAT CATEGORIES ({result['gender'].upper()})")
    for row in result.get("category_table", []):
        lines.append(f"- {row['category']}: {row[result['gender']]}")
    lines += _footer(result.get("recommendations") or [])
    return "\n".join(lines) + "\n"


def render_calorie_report(result: Dict[str, Any], generated_on: date) -> str:
    lines = _header("WEIGHT LOSS CALORIE CALCULATOR", generated_on)
    lines += _section("PERSONAL INFORMATION")
    lines += [
        f"Current Weight: {result['current_weight']} kg",
        f"Target Weight: {result['target_weight']} kg",
        f"Weight to Lose: {result['weight_to_lose']} kg",
        f"Timeframe: {result['weeks_to_goal']:g} weeks",
    ]
    lines += _section("CALORIE BREAKDOWN")
    lines += [
        f"Basal Metabolic Rate (BMR): {result['bmr']} calories/day",
        f"Total Daily Energy Expenditure (TDEE): {result['tdee']} calories/day",
        f"Daily Calorie Deficit: {result['daily_calorie_deficit']} calories",
        f"Target Daily Calories: {result['target_daily_calories']} calories",
        f"Weekly Weight Loss: {result['weekly_weight_loss']} kg ({result['weekly_weight_loss_lbs']} lbs)",
    ]
    lines += _section("MACRONUTRIENT BREAKDOWN")
    for name, macro in result["macro_breakdown"].items():
        lines.append(f"{name.capitalize()}: {macro['grams']}g ({macro['calories']} calories, {macro['percentage']}%)")
    lines += _section("WEIGHT LOSS TIMELINE")
    lines += [f"Week {point['week']}: {point['weight']} kg ({point['date']})" for point in result["timeline"]]
    lines += _footer(result["recommendations"])
    return "\n".join(lines) + "\n"


# ------------------------------------------------------------------------------
# Dispatch
# ------------------------------------------------------------------------------
RENDERERS: Dict[str, Callable[[Dict[str, Any], date], str]] = {
    "body": render_body_report,
    "cardio": render_cardio_report,
    "strength": render_strength_report,
    "body_fat": render_body_fat_report,
    "calories": render_calorie_report,
}


def report_filename(kind: str, result: Dict[str, Any], generated_on: date) -> str:
    stamp = generated_on.isoformat()
    if kind == "body":
        return f"Body-Assessment-Report-{stamp}.txt"
    if kind == "cardio":
        return f"Cardiovascular-Assessment-{_hyphenate(result['test_name'])}-{stamp}.txt"
    if kind == "strength":
        return f"Strength-Assessment-{_hyphenate(result['test_name'])}-{stamp}.txt"
    if kind == "body_fat":
        return f"Body-Fat-Report-{stamp}.txt"
    if kind == "calories":
        return f"Weight-Loss-Plan-{stamp}.txt"
    raise UnknownAssessmentError(f"No report available for '{kind}'.", field="kind")


def build_report(kind: str, result: Dict[str, Any], generated_on: Optional[date] = None) -> Tuple[str, str]:
    """Returns (file_name, text) for an assessment result."""
    renderer = RENDERERS.get(kind)
    if renderer is None:
        raise UnknownAssessmentError(f"No report available for '{kind}'.", field="kind")
    generated_on = generated_on or date.today()
    return report_filename(kind, result, generated_on), renderer(result, generated_on)

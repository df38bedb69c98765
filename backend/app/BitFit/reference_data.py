import json
import math
import os
import re
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .Assessments.exceptions import ReferenceDataError

# Resolve absolute path to bundled benchmark tables
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")

CARDIO_TABLE = "cardiovascular_benchmarks.json"
STRENGTH_TABLE = "strength_benchmarks.json"

_NUMBER = r"(\d+(?:\.\d+)?)"
_GT_PATTERN = re.compile(rf"^>\s*{_NUMBER}$")
_LT_PATTERN = re.compile(rf"^<\s*{_NUMBER}$")
_PLUS_PATTERN = re.compile(rf"^{_NUMBER}\s*\+$")
_RANGE_PATTERN = re.compile(rf"^{_NUMBER}\s*-\s*{_NUMBER}$")
_SINGLE_PATTERN = re.compile(rf"^{_NUMBER}$")


@lru_cache(maxsize=None)
def load_reference_table(file_name: str) -> Dict[str, Any]:
    """
    Load one of the bundled JSON benchmark tables.

    Tables are read once per process and must be treated as read-only.
    """
    path = os.path.join(DATA_DIR, file_name)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        raise ReferenceDataError(f"Reference table not found at {path}.")
    except json.JSONDecodeError as exc:
        raise ReferenceDataError(f"Reference table {file_name} is not valid JSON: {exc}")


def load_cardio_table() -> Dict[str, Any]:
    return load_reference_table(CARDIO_TABLE)


def load_strength_table() -> Dict[str, Any]:
    return load_reference_table(STRENGTH_TABLE)


# ------------------------------------------------------------------------------
# Range strings
# ------------------------------------------------------------------------------
def parse_range(text: str) -> Tuple[str, float, float]:
    """
    Parse a band string into (kind, low, high).

    Supported forms:
      "> 60"   -> ("gt", 60, inf)
      "< 30"   -> ("lt", -inf, 30)
      "36+"    -> ("plus", 36, inf)
      "42-46"  -> ("range", 42, 46)
      "12"     -> ("range", 12, 12)

    A trailing " years" (used by some age columns) is ignored.
    """
    if not isinstance(text, str):
        raise ReferenceDataError(f"Range must be a string, got {type(text).__name__}.")
    cleaned = text.strip()
    if cleaned.endswith("years"):
        cleaned = cleaned[: -len("years")].strip()

    match = _GT_PATTERN.match(cleaned)
    if match:
        return "gt", float(match.group(1)), math.inf
    match = _LT_PATTERN.match(cleaned)
    if match:
        return "lt", -math.inf, float(match.group(1))
    match = _PLUS_PATTERN.match(cleaned)
    if match:
        return "plus", float(match.group(1)), math.inf
    match = _RANGE_PATTERN.match(cleaned)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        if low > high:
            raise ReferenceDataError(f"Range '{text}' has its bounds reversed.")
        return "range", low, high
    match = _SINGLE_PATTERN.match(cleaned)
    if match:
        value = float(match.group(1))
        return "range", value, value

    raise ReferenceDataError(f"Unparseable range string: '{text}'.")


def select_age_range(age: float, labels: Sequence[str], default: Optional[str] = None) -> Optional[str]:
    """
    Pick the age bracket label containing the (whole-year) age.

    Ages are truncated to whole years so 25.5 belongs to "18-25".
    Ages below every bracket fall back to `default`.
    """
    whole_age = math.floor(age)
    for label in labels:
        kind, low, high = parse_range(label)
        if kind in ("plus", "gt"):
            if whole_age >= low:
                return label
        elif low <= whole_age <= high:
            return label
    return default


def match_band(
    value: float,
    bands: List[Tuple[str, str]],
    higher_is_better: bool = True,
) -> Optional[str]:
    """
    Find the rating whose band contains `value`.

    `bands` is a list of (rating, range_text) ordered best to worst. Adjacent
    bands in the tables leave small gaps ("47-51" then "52-60"); a value in
    a gap is assigned to the worse neighbour.

    Returns:
      the matching rating, or None when no band applies
    """
    for rating, range_text in bands:
        kind, low, high = parse_range(range_text)
        if higher_is_better:
            if kind == "gt" and value > low:
                return rating
            if kind in ("plus", "range") and value >= low:
                return rating
            if kind == "lt":
                return rating
        else:
            if kind == "lt" and value < high:
                return rating
            if kind == "range" and value <= high:
                return rating
            if kind in ("gt", "plus"):
                return rating
    return None

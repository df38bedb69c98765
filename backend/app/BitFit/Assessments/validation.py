import math
from typing import Any, Optional

from .exceptions import InvalidInputError

# ------------------------------------------------------------------------------
# Validation Bounds (shared by every calculator and the API layer)
# ------------------------------------------------------------------------------
ALLOWED_GENDERS = {"male", "female"}
MIN_AGE = 10
MAX_AGE = 100
MIN_HEIGHT_CM = 80
MAX_HEIGHT_CM = 260
MIN_WEIGHT_KG = 20
MAX_WEIGHT_KG = 400
MIN_CIRCUMFERENCE_CM = 10
MAX_CIRCUMFERENCE_CM = 250
MIN_HEART_RATE = 25
MAX_HEART_RATE = 250


def to_number(
    value: Any,
    field: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    positive: bool = False,
) -> float:
    """
    Coerce a form value into a finite float and enforce optional bounds.

    Strings are accepted (form posts send numbers as text); booleans are not.

    Raises:
      InvalidInputError: missing, non-numeric, non-finite or out-of-range values.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInputError(f"{field} is required.", field=field)
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number.", field=field)

    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{field} must be a number.", field=field)

    if math.isnan(number) or math.isinf(number):
        raise InvalidInputError(f"{field} must be a finite number.", field=field)
    if positive and number <= 0:
        raise InvalidInputError(f"{field} must be greater than 0.", field=field)
    if minimum is not None and number < minimum:
        raise InvalidInputError(f"{field} must be at least {minimum}.", field=field)
    if maximum is not None and number > maximum:
        raise InvalidInputError(f"{field} must be at most {maximum}.", field=field)
    return number


def optional_number(value: Any, field: str, **bounds) -> Optional[float]:
    """Like to_number, but an empty value yields None instead of an error."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_number(value, field, **bounds)


def normalize_gender(value: Any, field: str = "gender") -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} is required.", field=field)
    normalized = value.strip().lower()
    if normalized in ("m", "man"):
        normalized = "male"
    elif normalized in ("f", "woman"):
        normalized = "female"
    if normalized not in ALLOWED_GENDERS:
        raise InvalidInputError(f"{field} must be one of: female, male", field=field)
    return normalized


def validate_age(value: Any) -> float:
    return to_number(value, "age", minimum=MIN_AGE, maximum=MAX_AGE)


def validate_height(value: Any, field: str = "height") -> float:
    return to_number(value, field, minimum=MIN_HEIGHT_CM, maximum=MAX_HEIGHT_CM)


def validate_weight(value: Any, field: str = "weight") -> float:
    return to_number(value, field, minimum=MIN_WEIGHT_KG, maximum=MAX_WEIGHT_KG)


def validate_circumference(value: Any, field: str) -> float:
    return to_number(value, field, minimum=MIN_CIRCUMFERENCE_CM, maximum=MAX_CIRCUMFERENCE_CM)


def validate_heart_rate(value: Any, field: str = "heart_rate") -> float:
    return to_number(value, field, minimum=MIN_HEART_RATE, maximum=MAX_HEART_RATE)

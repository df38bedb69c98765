from typing import Any, Dict, Optional


class AssessmentError(Exception):
    """
    Base class for calculator errors.

    All assessment-specific exceptions inherit from this type so callers
    (API layer, report builders, tests) can catch a single umbrella exception.
    """

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details or {}

    def to_details(self) -> Dict[str, Any]:
        payload = dict(self.details)
        if self.field:
            payload["field"] = self.field
        return payload


class InvalidInputError(AssessmentError):
    """
    Raised when a calculator input is missing, non-numeric or out of range.

    Typical causes:
      - Empty form fields (age, height, weight)
      - Zero or negative denominators (height, hip, body weight, reps)
      - Waist smaller than neck for the circumference formula
    """


class UnknownAssessmentError(AssessmentError):
    """
    Raised when an unsupported assessment or test type is requested.

    Typical causes:
      - Typo in the test key (e.g. "rockport-walk" instead of "rockport")
      - Client built against a newer API version
    """


class ReferenceDataError(AssessmentError):
    """
    Raised when the bundled benchmark tables are missing or malformed.

    Typical causes:
      - Package data not installed alongside the module
      - A band string that cannot be parsed as a range
    """

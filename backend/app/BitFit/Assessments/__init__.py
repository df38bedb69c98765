from .engine import ASSESSMENT_KINDS, AssessmentEngine
from .exceptions import AssessmentError, InvalidInputError, ReferenceDataError, UnknownAssessmentError

__all__ = [
    "ASSESSMENT_KINDS",
    "AssessmentEngine",
    "AssessmentError",
    "InvalidInputError",
    "ReferenceDataError",
    "UnknownAssessmentError",
]

import time
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from .body_assessment import assess_body
from .body_fat import assess_body_fat
from .calories import plan_calories
from .cardio import CARDIO_TESTS, assess_cardio
from .exceptions import AssessmentError, InvalidInputError, UnknownAssessmentError
from .strength import STRENGTH_TESTS, assess_strength

# ------------------------------------------------------------------------------
# Output contract per assessment kind
# ------------------------------------------------------------------------------
REQUIRED_FIELDS = {
    "body": {"bmi", "waist_hip_ratio", "blood_pressure", "resting_heart_rate", "overall_score", "recommendations"},
    "body_fat": {"body_fat", "category", "ideal_body_fat", "difference_from_ideal"},
    "cardio": {"test", "test_name", "category", "status", "description", "recommendations"},
    "strength": {"test", "test_name", "category", "status", "description", "recommendations"},
    "calories": {"bmr", "tdee", "target_daily_calories", "timeline", "macro_breakdown", "recommendations"},
}

ASSESSMENT_KINDS = tuple(REQUIRED_FIELDS)
TESTS_BY_KIND = {
    "cardio": tuple(CARDIO_TESTS),
    "strength": tuple(STRENGTH_TESTS),
}


class AssessmentEngine:
    """
    Dispatches a payload to the matching calculator and records a per-stage
    trace, the same way for every assessment kind.

    The engine is stateless and deterministic: equal inputs give equal
    results (calorie timelines depend on `start`, which defaults to today).
    """

    def __init__(self, start: Optional[date] = None):
        """
        Args:
          start: first day used for dated outputs (calorie timeline)
        """
        self.start = start
        self._runners: Dict[str, Callable[[Optional[str], Dict[str, Any]], Dict[str, Any]]] = {
            "body": lambda _test, payload: assess_body(payload),
            "body_fat": lambda _test, payload: assess_body_fat(payload),
            "cardio": assess_cardio,
            "strength": assess_strength,
            "calories": lambda _test, payload: plan_calories(payload, start=self.start),
        }

    def run(
        self,
        kind: str,
        payload: Dict[str, Any],
        test: Optional[str] = None,
    ) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        """
        Run one assessment.

        Args:
          kind: body | body_fat | cardio | strength | calories
          payload: calculator inputs (see each calculator)
          test: field test key, required for cardio and strength

        Returns:
          (result, trace)
            - result: calculator output dict
            - trace: list of per-stage timing dicts

        Raises:
          UnknownAssessmentError: unknown kind or test
          InvalidInputError: invalid inputs
          AssessmentError: output contract violated
        """
        start = time.time()
        trace: List[Dict[str, Any]] = []

        validate_start = time.time()
        kind, test = self._validate_request(kind, payload, test)
        trace.append({"stage": "validate_input", "ms": int((time.time() - validate_start) * 1000)})

        compute_start = time.time()
        result = self._runners[kind](test, payload)
        trace.append({"stage": f"compute_{kind}", "ms": int((time.time() - compute_start) * 1000)})

        self._validate_output_shape(kind, result)
        trace.append({"stage": "engine_total", "ms": int((time.time() - start) * 1000)})
        return result, trace

    # ----------------------------------------------------------------------
    # Guards
    # ----------------------------------------------------------------------
    @staticmethod
    def _validate_request(kind: Any, payload: Any, test: Any) -> Tuple[str, Optional[str]]:
        if not isinstance(kind, str) or kind.lower() not in REQUIRED_FIELDS:
            allowed = ", ".join(ASSESSMENT_KINDS)
            raise UnknownAssessmentError(f"Unknown assessment '{kind}'. Allowed: {allowed}", field="kind")
        if not isinstance(payload, dict):
            raise InvalidInputError("Request body must be a JSON object.")

        kind = kind.lower()
        if kind in TESTS_BY_KIND:
            if not isinstance(test, str) or not test.strip():
                raise InvalidInputError(f"A test is required for {kind} assessments.", field="test")
            return kind, test.strip().lower()
        return kind, None

    @staticmethod
    def _validate_output_shape(kind: str, result: Dict[str, Any]) -> None:
        missing = REQUIRED_FIELDS[kind] - set(result.keys())
        if missing:
            raise AssessmentError(f"Calculator output missing fields: {', '.join(sorted(missing))}")
        if "recommendations" in result and not isinstance(result["recommendations"], list):
            raise AssessmentError("recommendations must be a list.")

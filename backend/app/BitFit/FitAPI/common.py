from typing import Optional

from flask import g, jsonify, request
from flask_jwt_extended import get_jwt_identity

from backend.app.BitFit.Assessments.exceptions import AssessmentError, ReferenceDataError, UnknownAssessmentError


# ------------------------------------------------------------------------------
# Common response / utility helpers
# ------------------------------------------------------------------------------
def _request_id() -> str:
    """Correlation id set by the request-id middleware (falls back to the header)."""
    return getattr(g, "request_id", None) or request.headers.get("X-Request-ID", "")


def _current_identity() -> str:
    return str(get_jwt_identity())


def _make_error_response(code: str, message: str, status: int, request_id: str, details: Optional[dict] = None, raw: bool = False):
    """
    Standard error payload used across endpoints for consistent client handling.

    Args:
      code: stable machine-readable error code
      message: human-readable summary
      status: HTTP status code
      request_id: correlation id returned to clients
      details: optional structured details about the error
    """
    payload = {
        "error": {
            "code": code,
            "message": message
        },
        "request_id": request_id
    }
    if details:
        payload["error"]["details"] = details
    if raw:
        return payload, status
    return jsonify(payload), status


def _assessment_error_response(exc: AssessmentError, request_id: str):
    """Map calculator exceptions to HTTP errors."""
    if isinstance(exc, UnknownAssessmentError):
        return _make_error_response("NOT_FOUND", exc.message, 404, request_id, exc.to_details())
    if isinstance(exc, ReferenceDataError) or type(exc) is AssessmentError:
        return _make_error_response("INTERNAL", exc.message, 500, request_id)
    return _make_error_response("INVALID_ARGUMENT", exc.message, 400, request_id, exc.to_details())


def _read_json_object(request_id: str):
    """
    Parse the request body as a JSON object.

    Returns:
      (data, error_response_tuple)
    """
    try:
        data = request.get_json(force=True, silent=False)
    except Exception:
        return None, _make_error_response("INVALID_ARGUMENT", "Invalid JSON payload", 400, request_id)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return None, _make_error_response("INVALID_ARGUMENT", "Request body must be a JSON object", 400, request_id)
    return data, None

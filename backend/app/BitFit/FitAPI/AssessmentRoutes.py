import time
from typing import Optional

from flask import Blueprint, Response, current_app, jsonify, request
from flasgger import swag_from

from backend.app.BitFit.Assessments.cardio import CARDIO_TESTS
from backend.app.BitFit.Assessments.engine import ASSESSMENT_KINDS, TESTS_BY_KIND, AssessmentEngine
from backend.app.BitFit.Assessments.exceptions import AssessmentError
from backend.app.BitFit.Assessments.strength import STRENGTH_TESTS
from backend.app.BitFit.FitAPI.common import (
    _assessment_error_response,
    _read_json_object,
    _request_id,
)
from backend.app.BitFit.reports import build_report
from backend.app.Decorators.ScopesRequirements import require_scopes
from backend.app.Decorators.requestSizeValidator import validate_request_size

# ------------------------------------------------------------------------------
# Blueprint
# ------------------------------------------------------------------------------
assessments_bp = Blueprint('assessments_bp', __name__, url_prefix="/bitfit")

# ------------------------------------------------------------------------------
# Constants / Config
# ------------------------------------------------------------------------------
ASSESSMENT_SCOPE = "assessments:run"
MAX_JSON_KB = 500

KIND_TITLES = {
    "body": "Body Composition Assessment",
    "body_fat": "Body Fat Calculator (U.S. Navy Method)",
    "cardio": "Cardiovascular Fitness Assessment",
    "strength": "Strength Assessment",
    "calories": "Weight Loss Calorie Calculator",
}
TEST_NAMES = {
    "cardio": {key: test["name"] for key, test in CARDIO_TESTS.items()},
    "strength": {key: test["name"] for key, test in STRENGTH_TESTS.items()},
}

_RUN_SPEC = {
    "tags": ["BitFit / Assessments"],
    "summary": "Run an assessment calculator",
    "description": "Validates the inputs, runs the calculator and benchmarks the result against the reference tables.",
    "parameters": [
        {"in": "path", "name": "kind", "required": True, "schema": {"type": "string", "enum": list(ASSESSMENT_KINDS)}},
        {"in": "path", "name": "test", "required": False, "schema": {"type": "string", "example": "rockport"}},
    ],
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "example": {"age": 30, "gender": "male", "height": 170, "weight": 70, "waist": 85, "hip": 100}
            }
        }
    },
    "responses": {
        200: {"description": "Assessment computed"},
        400: {
            "description": "Invalid inputs",
            "content": {
                "application/json": {
                    "example": {
                        "error": {"code": "INVALID_ARGUMENT", "message": "height must be between 80 and 260.", "details": {"field": "height"}},
                        "request_id": "req-123"
                    }
                }
            }
        },
        401: {"description": "Unauthorized"},
        403: {"description": "Missing scope"},
        404: {"description": "Unknown assessment or test"},
        413: {"description": "Payload too large"},
    },
    "security": [{"BearerAuth": []}],
}


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------
def _run_assessment(kind: str, test: Optional[str]):
    """
    Parse the body and run the engine.

    Returns:
      ((result, trace, latency_ms), error_response_tuple)
    """
    start_time = time.time()
    request_id = _request_id()

    data, error = _read_json_object(request_id)
    if error:
        return None, error

    try:
        result, trace = AssessmentEngine().run(kind, data, test=test)
    except AssessmentError as exc:
        current_app.logger.info({
            "component": "BitFit",
            "event": "assessment_rejected",
            "request_id": request_id,
            "kind": kind,
            "test": test,
            "reason": exc.message,
        })
        return None, _assessment_error_response(exc, request_id)

    latency_ms = int((time.time() - start_time) * 1000)
    current_app.logger.info({
        "component": "BitFit",
        "event": "assessment_completed",
        "request_id": request_id,
        "kind": kind,
        "test": test,
        "latency_ms": latency_ms,
    })
    return (result, trace, latency_ms), None


# ------------------------------------------------------------------------------
# Routes
# ------------------------------------------------------------------------------
@assessments_bp.route('/assessments', methods=['GET'])
@swag_from({
    "tags": ["BitFit / Assessments"],
    "summary": "List assessment kinds and field tests",
    "responses": {200: {"description": "Catalogue of calculators"}},
})
def list_assessments():
    """
    Catalogue of calculators and, for cardio and strength, their field tests.
    ---
    tags:
      - BitFit / Assessments
    responses:
      200:
        description: Catalogue of calculators
    """
    catalogue = []
    for kind in ASSESSMENT_KINDS:
        entry = {"kind": kind, "title": KIND_TITLES[kind]}
        if kind in TESTS_BY_KIND:
            entry["tests"] = [{"test": key, "name": TEST_NAMES[kind][key]} for key in TESTS_BY_KIND[kind]]
        catalogue.append(entry)
    return jsonify({"assessments": catalogue, "request_id": _request_id()}), 200


@assessments_bp.route('/assessments/<string:kind>', methods=['POST'], defaults={"test": None})
@assessments_bp.route('/assessments/<string:kind>/<string:test>', methods=['POST'])
@require_scopes([ASSESSMENT_SCOPE])
@validate_request_size(request, max_json_kb=MAX_JSON_KB)
@swag_from(_RUN_SPEC)
def run_assessment(kind, test):
    """
    Run one calculator and return its result plus a per-stage trace.
    ---
    tags:
      - BitFit / Assessments
    security:
      - BearerAuth: []
    parameters:
      - in: path
        name: kind
        required: true
        schema:
          type: string
          example: body
    responses:
      200:
        description: Assessment computed
      400:
        description: Invalid inputs
      401:
        description: Unauthorized
      404:
        description: Unknown assessment or test
    """
    outcome, error = _run_assessment(kind, test)
    if error:
        return error
    result, trace, latency_ms = outcome

    body = {
        "request_id": _request_id(),
        "latency_ms": latency_ms,
        "kind": kind.lower(),
        "result": result,
        "trace": trace,
    }
    if result.get("test"):
        body["test"] = result["test"]
    return jsonify(body), 200


@assessments_bp.route('/assessments/<string:kind>/report', methods=['POST'], defaults={"test": None})
@assessments_bp.route('/assessments/<string:kind>/<string:test>/report', methods=['POST'])
@require_scopes([ASSESSMENT_SCOPE])
@validate_request_size(request, max_json_kb=MAX_JSON_KB)
@swag_from({
    "tags": ["BitFit / Assessments"],
    "summary": "Run an assessment and download its text report",
    "produces": ["text/plain"],
    "responses": {
        200: {"description": "Plain-text report attachment"},
        400: {"description": "Invalid inputs"},
        401: {"description": "Unauthorized"},
        404: {"description": "Unknown assessment or test"},
    },
    "security": [{"BearerAuth": []}],
})
def assessment_report(kind, test):
    """
    Same inputs as the assessment route; responds with a text/plain attachment.
    ---
    tags:
      - BitFit / Assessments
    security:
      - BearerAuth: []
    responses:
      200:
        description: Plain-text report attachment
    """
    outcome, error = _run_assessment(kind, test)
    if error:
        return error
    result, _trace, _latency_ms = outcome

    try:
        file_name, text = build_report(kind.lower(), result)
    except AssessmentError as exc:
        return _assessment_error_response(exc, _request_id())

    return Response(
        text,
        status=200,
        mimetype="text/plain",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )

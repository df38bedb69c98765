from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, current_app, jsonify, request
from flasgger import swag_from

from backend.app.BitFit.Assessments.body_assessment import calculate_bmi
from backend.app.BitFit.Assessments.calories import ACTIVITY_MULTIPLIERS
from backend.app.BitFit.Assessments.exceptions import InvalidInputError
from backend.app.BitFit.Assessments.validation import validate_age, validate_height, validate_weight
from backend.app.BitFit.FitAPI.common import (
    _current_identity,
    _make_error_response,
    _read_json_object,
    _request_id,
)
from backend.app.Decorators.ScopesRequirements import require_scopes
from backend.app.Decorators.requestSizeValidator import validate_request_size
from backend.app.services.cache_service import read_cached_profile, write_cached_profile
from backend.app.services.identity_service import (
    EDITABLE_FIELDS,
    PROFILE_ATTRIBUTES,
    IdentityServiceError,
    fetch_user_attributes,
    update_user_attributes,
)

profile_bp = Blueprint('profile_bp', __name__, url_prefix="/profile")

DEFAULT_MEMBERSHIP = "FREE"
MAX_TEXT_LENGTH = 100
NUMERIC_VALIDATORS = {
    "age": validate_age,
    "height": validate_height,
    "weight": validate_weight,
}


# ------------------------------------------------------------------------------
# Validation helpers
# ------------------------------------------------------------------------------
def _format_number(value: float) -> str:
    return f"{value:g}"


def _validate_profile_update(data: Dict[str, Any]) -> Tuple[Dict[str, str], Optional[InvalidInputError]]:
    """
    Normalize editable profile fields. Empty values clear a field.

    Returns:
      (updates, error)
    """
    if "membership_type" in data:
        return {}, InvalidInputError("membership_type cannot be changed from the profile.", field="membership_type")

    unknown = sorted(set(data) - set(EDITABLE_FIELDS))
    if unknown:
        return {}, InvalidInputError(f"Unknown profile field: {unknown[0]}", field=unknown[0])

    updates: Dict[str, str] = {}
    try:
        for field, value in data.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                updates[field] = ""
            elif field in NUMERIC_VALIDATORS:
                updates[field] = _format_number(NUMERIC_VALIDATORS[field](value))
            elif field == "activity_level":
                level = str(value).strip().lower().replace(" ", "_").replace("-", "_")
                if level not in ACTIVITY_MULTIPLIERS:
                    allowed = ", ".join(ACTIVITY_MULTIPLIERS)
                    raise InvalidInputError(f"activity_level must be one of: {allowed}", field=field)
                updates[field] = level
            else:
                if not isinstance(value, str) or len(value.strip()) > MAX_TEXT_LENGTH:
                    raise InvalidInputError(f"{field} must be text up to {MAX_TEXT_LENGTH} characters.", field=field)
                updates[field] = value.strip()
    except InvalidInputError as exc:
        return {}, exc
    return updates, None


def _derived_bmi(profile: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if not profile.get("height") or not profile.get("weight"):
        return None
    try:
        return calculate_bmi(profile["height"], profile["weight"])
    except InvalidInputError:
        return None


def _merge_profile(attributes: Dict[str, str], cached: Dict[str, Any]) -> Dict[str, Any]:
    """Identity attributes win; the cache fills gaps; membership defaults to FREE."""
    profile: Dict[str, Any] = {}
    for attribute, field in PROFILE_ATTRIBUTES.items():
        profile[field] = attributes.get(attribute) or cached.get(field) or ""
    profile["membership_type"] = profile["membership_type"] or DEFAULT_MEMBERSHIP
    return profile


# ------------------------------------------------------------------------------
# Routes
# ------------------------------------------------------------------------------
@profile_bp.route('', methods=['GET'])
@require_scopes(["profile:read"])
@swag_from({
    "tags": ["BitFit / Profile"],
    "summary": "Read the caller's profile",
    "responses": {
        200: {
            "description": "Profile with derived BMI",
            "content": {
                "application/json": {
                    "example": {
                        "profile": {"name": "Sam", "age": "30", "height": "170", "weight": "70", "membership_type": "FREE"},
                        "bmi": {"value": 24.2, "category": "Normal Weight", "status": "excellent"},
                        "source": "identity_provider",
                        "request_id": "req-123"
                    }
                }
            }
        },
        401: {"description": "Unauthorized"},
    },
    "security": [{"BearerAuth": []}],
})
def get_profile():
    """
    Identity attributes merged with the profile cache.
    ---
    tags:
      - BitFit / Profile
    security:
      - BearerAuth: []
    responses:
      200:
        description: Profile with derived BMI
    """
    request_id = _request_id()
    identity = _current_identity()
    cached = read_cached_profile(identity)

    try:
        attributes = fetch_user_attributes(identity)
        source = "identity_provider"
    except IdentityServiceError as exc:
        current_app.logger.warning({
            "component": "Profile",
            "event": "identity_read_failed",
            "request_id": request_id,
            "error": exc.message,
        })
        attributes = {}
        source = "cache" if cached else "defaults"

    profile = _merge_profile(attributes, cached)
    return jsonify({
        "profile": profile,
        "bmi": _derived_bmi(profile),
        "source": source,
        "request_id": request_id,
    }), 200


@profile_bp.route('', methods=['PUT'])
@require_scopes(["profile:write"])
@validate_request_size(request, max_json_kb=50)
@swag_from({
    "tags": ["BitFit / Profile"],
    "summary": "Update the caller's profile",
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "example": {"name": "Sam", "age": 30, "height": 170, "weight": 70, "fitness_goal": "lose weight", "activity_level": "moderate"}
            }
        }
    },
    "responses": {
        200: {"description": "Saved; `synced` is false when the identity provider update failed"},
        400: {"description": "Invalid field"},
        401: {"description": "Unauthorized"},
    },
    "security": [{"BearerAuth": []}],
})
def update_profile():
    """
    Save editable fields to the cache, then to the identity provider.
    ---
    tags:
      - BitFit / Profile
    security:
      - BearerAuth: []
    responses:
      200:
        description: Profile saved
      400:
        description: Invalid field
    """
    request_id = _request_id()
    identity = _current_identity()

    data, error = _read_json_object(request_id)
    if error:
        return error

    updates, invalid = _validate_profile_update(data)
    if invalid:
        return _make_error_response("INVALID_ARGUMENT", invalid.message, 400, request_id, invalid.to_details())

    cached = read_cached_profile(identity)
    cached.update(updates)
    write_cached_profile(identity, cached)

    synced = True
    try:
        update_user_attributes(identity, updates)
    except IdentityServiceError as exc:
        synced = False
        current_app.logger.warning({
            "component": "Profile",
            "event": "identity_sync_failed",
            "request_id": request_id,
            "error": exc.message,
        })

    # same shape as GET: every profile field present, membership defaulted
    profile = _merge_profile({}, cached)
    return jsonify({
        "profile": profile,
        "bmi": _derived_bmi(profile),
        "synced": synced,
        "request_id": request_id,
    }), 200

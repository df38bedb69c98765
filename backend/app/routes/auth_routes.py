import re
import time

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, jwt_required
from flasgger import swag_from

from backend.app.BitFit.FitAPI.common import _make_error_response, _read_json_object, _request_id
from backend.app.Decorators.requestSizeValidator import validate_request_size
from backend.app.services.cache_service import block_token
from backend.app.services.identity_service import (
    IdentityServiceError,
    confirm_sign_up,
    global_sign_out,
    sign_in,
    sign_up,
)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def _identity_error(exc: IdentityServiceError, request_id: str):
    return _make_error_response(
        exc.code,
        exc.message,
        exc.status,
        request_id,
        {"provider_code": exc.provider_code} if exc.provider_code else None,
    )


def _require_text(data: dict, field: str, request_id: str):
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        return None, _make_error_response("INVALID_ARGUMENT", f"{field} is required", 400, request_id, {"field": field})
    return value.strip(), None


def _require_email(data: dict, request_id: str):
    email, error = _require_text(data, "email", request_id)
    if error:
        return None, error
    if not EMAIL_PATTERN.match(email):
        return None, _make_error_response("INVALID_ARGUMENT", "email is not valid", 400, request_id, {"field": "email"})
    return email.lower(), None


# -------------------------------
# /auth/signup endpoint
# -------------------------------
@auth_bp.route("/signup", methods=["POST"])
@validate_request_size(request, max_json_kb=10)
@swag_from({
    "tags": ["Auth"],
    "summary": "Create an account",
    "requestBody": {
        "required": True,
        "content": {"application/json": {"example": {"email": "sam@example.com", "password": "Secret123!", "name": "Sam"}}},
    },
    "responses": {
        201: {"description": "Account created; a confirmation code is sent by email"},
        400: {"description": "Invalid data or account exists"},
        502: {"description": "Identity provider unavailable"},
    },
})
def signup():
    request_id = _request_id()
    data, error = _read_json_object(request_id)
    if error:
        return error
    email, error = _require_email(data, request_id)
    if error:
        return error
    password = data.get("password")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        return _make_error_response(
            "INVALID_ARGUMENT",
            f"password must be at least {MIN_PASSWORD_LENGTH} characters",
            400,
            request_id,
            {"field": "password"},
        )

    try:
        account = sign_up(email, password, name=(data.get("name") or "").strip() or None)
    except IdentityServiceError as exc:
        return _identity_error(exc, request_id)

    current_app.logger.info({"component": "Auth", "event": "signup", "request_id": request_id})
    return jsonify({**account, "request_id": request_id}), 201


# -------------------------------
# /auth/confirm endpoint
# -------------------------------
@auth_bp.route("/confirm", methods=["POST"])
@validate_request_size(request, max_json_kb=10)
@swag_from({
    "tags": ["Auth"],
    "summary": "Confirm an account with the emailed code",
    "requestBody": {
        "required": True,
        "content": {"application/json": {"example": {"email": "sam@example.com", "code": "123456"}}},
    },
    "responses": {200: {"description": "Confirmed"}, 400: {"description": "Wrong or expired code"}},
})
def confirm():
    request_id = _request_id()
    data, error = _read_json_object(request_id)
    if error:
        return error
    email, error = _require_email(data, request_id)
    if error:
        return error
    code, error = _require_text(data, "code", request_id)
    if error:
        return error

    try:
        confirm_sign_up(email, code)
    except IdentityServiceError as exc:
        return _identity_error(exc, request_id)
    return jsonify({"confirmed": True, "request_id": request_id}), 200


# -------------------------------
# /auth/login endpoint
# -------------------------------
@auth_bp.route("/login", methods=["POST"])
@validate_request_size(request, max_json_kb=10)
@swag_from({
    "tags": ["Auth"],
    "summary": "Sign in and receive an API token",
    "requestBody": {
        "required": True,
        "content": {"application/json": {"example": {"email": "sam@example.com", "password": "Secret123!"}}},
    },
    "responses": {
        200: {
            "description": "Signed in",
            "content": {
                "application/json": {
                    "example": {"access_token": "eyJ...", "token_type": "Bearer", "expires_in": 3600, "identity": "3f1c..."}
                }
            }
        },
        401: {"description": "Wrong credentials or unconfirmed account"},
        502: {"description": "Identity provider unavailable"},
    },
})
def login():
    request_id = _request_id()
    data, error = _read_json_object(request_id)
    if error:
        return error
    email, error = _require_email(data, request_id)
    if error:
        return error
    password, error = _require_text(data, "password", request_id)
    if error:
        return error

    try:
        user = sign_in(email, password)
    except IdentityServiceError as exc:
        current_app.logger.info({
            "component": "Auth",
            "event": "login_failed",
            "request_id": request_id,
            "provider_code": exc.provider_code,
        })
        return _identity_error(exc, request_id)

    scopes = list(current_app.config.get("DEFAULT_SCOPES", []))
    token = create_access_token(
        identity=user["username"],
        additional_claims={"scopes": scopes, "email": user["attributes"].get("email", email)},
    )
    current_app.logger.info({"component": "Auth", "event": "login", "request_id": request_id})
    return jsonify({
        "access_token": token,
        "token_type": "Bearer",
        "expires_in": int(current_app.config.get("JWT_ACCESS_TOKEN_EXPIRES_MIN", 60)) * 60,
        "identity": user["username"],
        "scopes": scopes,
        "request_id": request_id,
    }), 200


# -------------------------------
# /auth/session endpoint
# -------------------------------
@auth_bp.route("/session", methods=["GET"])
@jwt_required()
@swag_from({
    "tags": ["Auth"],
    "summary": "Current identity and token claims",
    "responses": {200: {"description": "Session"}, 401: {"description": "Unauthorized"}},
    "security": [{"BearerAuth": []}],
})
def session():
    claims = get_jwt()
    return jsonify({
        "identity": get_jwt_identity(),
        "email": claims.get("email"),
        "scopes": claims.get("scopes", []),
        "expires_at": claims.get("exp"),
        "request_id": _request_id(),
    }), 200


# -------------------------------
# /auth/logout endpoint
# -------------------------------
@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
@swag_from({
    "tags": ["Auth"],
    "summary": "Revoke the current token and sign out everywhere",
    "responses": {200: {"description": "Signed out"}, 401: {"description": "Unauthorized"}},
    "security": [{"BearerAuth": []}],
})
def logout():
    request_id = _request_id()
    claims = get_jwt()
    identity = get_jwt_identity()

    block_token(claims["jti"], claims.get("exp", time.time() + 3600) - time.time())

    provider_signed_out = True
    try:
        global_sign_out(identity)
    except IdentityServiceError as exc:
        provider_signed_out = False
        current_app.logger.warning({
            "component": "Auth",
            "event": "global_sign_out_failed",
            "request_id": request_id,
            "error": exc.message,
        })

    return jsonify({
        "revoked": True,
        "provider_signed_out": provider_signed_out,
        "request_id": request_id,
    }), 200

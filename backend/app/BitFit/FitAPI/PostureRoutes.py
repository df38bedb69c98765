import re
from typing import Any, Optional, Tuple

from flask import Blueprint, current_app, jsonify, request
from flasgger import swag_from

from backend.app.BitFit.FitAPI.common import _current_identity, _make_error_response, _request_id
from backend.app.Decorators.ScopesRequirements import require_scopes
from backend.app.services.storage_service import (
    PHOTO_CATEGORIES,
    StorageServiceError,
    build_object_key,
    generate_presigned_url,
    list_photos,
    owns_key,
    upload_photo,
)

posture_bp = Blueprint('posture_bp', __name__, url_prefix="/posture")

# Validation constants to keep inputs/output predictable
ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}
MAX_KEY_LENGTH = 512
KEY_SAFE_PATTERN = re.compile(r"^[A-Za-z0-9/_.:-]+$")


# ------------------------------------------------------------------------------
# Validation helpers
# ------------------------------------------------------------------------------
def _validate_presign_params(file_extension: Any, category: Any) -> Tuple[Optional[str], Optional[str], Optional[str], Optional[str]]:
    """
    Validate query params for pre-signed upload URLs to avoid unsafe keys.

    Returns:
      (normalized_ext, normalized_category, error_message, error_field)
    """
    if not file_extension or not isinstance(file_extension, str):
        return None, None, "file_extension is required and must be a string", "file_extension"

    normalized_ext = file_extension.strip().lower().lstrip(".")
    if normalized_ext not in ALLOWED_IMAGE_EXTENSIONS:
        return None, None, f"Unsupported file_extension. Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}", "file_extension"

    normalized_category = (category or "posture").strip().lower()
    if normalized_category not in PHOTO_CATEGORIES:
        return None, None, f"category must be one of: {', '.join(sorted(PHOTO_CATEGORIES))}", "category"

    return normalized_ext, normalized_category, None, None


def _storage_error(exc: StorageServiceError, request_id: str):
    return _make_error_response("UPSTREAM_UNAVAILABLE", str(exc), 502, request_id)


# ------------------------------------------------------------------------------
# Routes
# ------------------------------------------------------------------------------
@posture_bp.route('/presigned-upload', methods=['GET'])
@require_scopes(["storage:write"])
@swag_from({
    "tags": ["BitFit / Posture"],
    "summary": "Generate S3 pre-signed upload URL",
    "parameters": [
        {"in": "query", "name": "file_extension", "required": True, "schema": {"type": "string", "example": "jpg"}},
        {"in": "query", "name": "category", "required": False, "schema": {"type": "string", "enum": ["posture", "profile"]}},
    ],
    "responses": {
        200: {
            "description": "Pre-signed URL generated",
            "content": {
                "application/json": {
                    "example": {"presigned_url": "https://...", "object_key": "posture-photos/user-1/abc123.jpg"}
                }
            }
        },
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        502: {"description": "Storage unavailable"},
    },
    "security": [{"BearerAuth": []}],
})
def presigned_upload():
    """
    Pre-signed put_object URL under the caller's own photo prefix.
    ---
    tags:
      - BitFit / Posture
    security:
      - BearerAuth: []
    parameters:
      - in: query
        name: file_extension
        required: true
        schema:
          type: string
          example: jpg
    responses:
      200:
        description: Pre-signed URL generated
      400:
        description: Bad request
    """
    request_id = _request_id()
    file_extension, category, message, field = _validate_presign_params(
        request.args.get('file_extension'),
        request.args.get('category'),
    )
    if message:
        return _make_error_response("INVALID_ARGUMENT", message, 400, request_id, {"field": field})

    object_key = build_object_key(category, _current_identity(), file_extension)
    expiration = current_app.config.get("PRESIGNED_URL_EXPIRATION", 3600)
    try:
        presigned_url = generate_presigned_url('put_object', object_key, expiration)
    except StorageServiceError as exc:
        return _storage_error(exc, request_id)

    return jsonify({
        "presigned_url": presigned_url,
        "object_key": object_key,
        "expires_in": expiration,
        "request_id": request_id,
    }), 200


@posture_bp.route('/photos', methods=['POST'])
@require_scopes(["storage:write"])
@swag_from({
    "tags": ["BitFit / Posture"],
    "summary": "Upload a posture photo",
    "consumes": ["multipart/form-data"],
    "parameters": [
        {"in": "formData", "name": "file", "type": "file", "required": True},
        {"in": "formData", "name": "category", "type": "string", "required": False},
    ],
    "responses": {
        201: {"description": "Uploaded; returns the storage key"},
        400: {"description": "Missing file or not an image"},
        413: {"description": "File too large"},
        502: {"description": "Storage unavailable"},
    },
    "security": [{"BearerAuth": []}],
})
def upload_posture_photo():
    """
    Upload an image (multipart field `file`) and return its storage key.
    ---
    tags:
      - BitFit / Posture
    security:
      - BearerAuth: []
    responses:
      201:
        description: Uploaded
      400:
        description: Missing file or not an image
      413:
        description: File too large
    """
    request_id = _request_id()
    max_bytes = int(current_app.config.get("MAX_UPLOAD_MB", 5)) * 1024 * 1024

    if request.content_length and request.content_length > max_bytes:
        return _make_error_response(
            "REQUEST_TOO_LARGE",
            f"File size must be less than {current_app.config.get('MAX_UPLOAD_MB', 5)}MB",
            413,
            request_id,
            {"field": "file"},
        )

    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return _make_error_response("INVALID_ARGUMENT", "file is required", 400, request_id, {"field": "file"})

    content_type = (upload.mimetype or "").lower()
    if not content_type.startswith("image/"):
        return _make_error_response("INVALID_ARGUMENT", "Please select an image file", 400, request_id, {"field": "file"})

    extension = upload.filename.rsplit(".", 1)[-1] if "." in upload.filename else content_type.split("/", 1)[1]
    file_extension, category, message, field = _validate_presign_params(extension, request.form.get("category"))
    if message:
        return _make_error_response("INVALID_ARGUMENT", message, 400, request_id, {"field": field})

    # content_length may be absent for chunked bodies; check the actual stream size too
    upload.stream.seek(0, 2)
    size = upload.stream.tell()
    upload.stream.seek(0)
    if size > max_bytes:
        return _make_error_response(
            "REQUEST_TOO_LARGE",
            f"File size must be less than {current_app.config.get('MAX_UPLOAD_MB', 5)}MB",
            413,
            request_id,
            {"field": "file"},
        )

    object_key = build_object_key(category, _current_identity(), file_extension)
    try:
        upload_photo(upload.stream, object_key, content_type)
    except StorageServiceError as exc:
        return _storage_error(exc, request_id)

    current_app.logger.info({
        "component": "Posture",
        "event": "photo_uploaded",
        "request_id": request_id,
        "key": object_key,
        "bytes": size,
    })
    return jsonify({"object_key": object_key, "size": size, "request_id": request_id}), 201


@posture_bp.route('/photos', methods=['GET'])
@require_scopes(["storage:read"])
@swag_from({
    "tags": ["BitFit / Posture"],
    "summary": "List the caller's photos",
    "responses": {200: {"description": "Keys under the caller's prefixes"}, 502: {"description": "Storage unavailable"}},
    "security": [{"BearerAuth": []}],
})
def list_posture_photos():
    """
    Keys under the caller's posture and profile prefixes, newest first.
    ---
    tags:
      - BitFit / Posture
    security:
      - BearerAuth: []
    responses:
      200:
        description: Photo keys
    """
    request_id = _request_id()
    try:
        photos = list_photos(_current_identity())
    except StorageServiceError as exc:
        return _storage_error(exc, request_id)
    return jsonify({"photos": photos, "request_id": request_id}), 200


@posture_bp.route('/photos/url', methods=['GET'])
@require_scopes(["storage:read"])
@swag_from({
    "tags": ["BitFit / Posture"],
    "summary": "Pre-signed download URL for one of the caller's photos",
    "parameters": [{"in": "query", "name": "key", "required": True, "schema": {"type": "string"}}],
    "responses": {
        200: {"description": "Pre-signed URL generated"},
        400: {"description": "Missing or malformed key"},
        403: {"description": "Key belongs to another identity"},
    },
    "security": [{"BearerAuth": []}],
})
def photo_url():
    """
    Pre-signed get_object URL, only for keys under the caller's own prefix.
    ---
    tags:
      - BitFit / Posture
    security:
      - BearerAuth: []
    parameters:
      - in: query
        name: key
        required: true
        schema:
          type: string
    responses:
      200:
        description: Pre-signed URL generated
      403:
        description: Forbidden
    """
    request_id = _request_id()
    key = (request.args.get("key") or "").strip()
    if not key or len(key) > MAX_KEY_LENGTH or not KEY_SAFE_PATTERN.match(key):
        return _make_error_response("INVALID_ARGUMENT", "key is required", 400, request_id, {"field": "key"})

    if not owns_key(_current_identity(), key):
        current_app.logger.warning({
            "component": "Posture",
            "event": "foreign_key_requested",
            "request_id": request_id,
        })
        return _make_error_response("FORBIDDEN", "You can only access your own photos", 403, request_id, {"field": "key"})

    expiration = current_app.config.get("PRESIGNED_URL_EXPIRATION", 3600)
    try:
        url = generate_presigned_url('get_object', key, expiration)
    except StorageServiceError as exc:
        return _storage_error(exc, request_id)
    return jsonify({"url": url, "key": key, "expires_in": expiration, "request_id": request_id}), 200

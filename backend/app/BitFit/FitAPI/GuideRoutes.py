import requests
from flask import Blueprint, Response, current_app, jsonify
from flasgger import swag_from

from backend.app.BitFit.FitAPI.common import _make_error_response, _request_id
from backend.app.BitFit.guides import (
    GuideNotFoundError,
    fetch_remote_guide,
    get_guide,
    list_guides,
    load_bundled_guide,
)

guides_bp = Blueprint('guides_bp', __name__, url_prefix="/bitfit")


def _attachment(content, mimetype: str, file_name: str, source: str) -> Response:
    return Response(
        content,
        status=200,
        mimetype=mimetype,
        headers={
            "Content-Disposition": f'attachment; filename="{file_name}"',
            "X-Guide-Source": source,
        },
    )


@guides_bp.route('/guides', methods=['GET'])
@swag_from({
    "tags": ["BitFit / Guides"],
    "summary": "List downloadable guides",
    "responses": {200: {"description": "Guide catalogue"}},
})
def guides_index():
    """
    Guides available for download; `remote` tells whether a download URL is configured.
    ---
    tags:
      - BitFit / Guides
    responses:
      200:
        description: Guide catalogue
    """
    guides = list_guides(current_app.config.get("GUIDE_DOWNLOAD_URLS"))
    return jsonify({"guides": guides, "request_id": _request_id()}), 200


@guides_bp.route('/guides/<string:slug>', methods=['GET'])
@swag_from({
    "tags": ["BitFit / Guides"],
    "summary": "Download a guide",
    "parameters": [
        {
            "in": "path",
            "name": "slug",
            "required": True,
            "schema": {"type": "string", "enum": ["weight-loss", "muscle-build", "stress-relief", "exercises-anywhere"]},
        }
    ],
    "responses": {
        200: {"description": "Guide file"},
        404: {"description": "Unknown guide"},
        503: {"description": "Download failed and text fallback disabled"},
    },
})
def download_guide(slug):
    """
    Stream the configured guide file, falling back to the bundled text guide.
    ---
    tags:
      - BitFit / Guides
    parameters:
      - in: path
        name: slug
        required: true
        schema:
          type: string
          example: weight-loss
    responses:
      200:
        description: Guide file
      404:
        description: Unknown guide
      503:
        description: Guide unavailable
    """
    request_id = _request_id()
    try:
        guide = get_guide(slug)
    except GuideNotFoundError as exc:
        return _make_error_response("NOT_FOUND", str(exc), 404, request_id, {"field": "slug"})

    url = (current_app.config.get("GUIDE_DOWNLOAD_URLS") or {}).get(guide["url_key"], "").strip()
    if url:
        try:
            remote = fetch_remote_guide(url, current_app.config.get("GUIDE_DOWNLOAD_TIMEOUT", 10))
            return _attachment(remote["content"], remote["content_type"], guide["file_name"], "remote")
        except requests.RequestException as exc:
            current_app.logger.warning({
                "component": "Guides",
                "event": "guide_download_failed",
                "request_id": request_id,
                "slug": slug,
                "error": str(exc),
            })

    if current_app.config.get("GUIDE_FALLBACK_TO_TEXT_FILE", True):
        return _attachment(load_bundled_guide(slug), "text/plain", guide["file_name"], "bundled")

    return _make_error_response(
        code="UNAVAILABLE",
        message="Guide download is unavailable, please try again later",
        status=503,
        request_id=request_id,
        details={"slug": slug},
    )

import re
import time
import uuid

from flask import g, request

from ..utils.request_log import record_request_log

# client-supplied ids are echoed back in headers and logs, so keep them short and header-safe
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _incoming_request_id():
    rid = (request.headers.get("X-Request-ID") or "").strip()
    if rid and REQUEST_ID_PATTERN.match(rid):
        return rid
    return str(uuid.uuid4())


def register_request_id_middleware(app):
    @app.before_request
    def add_request_id():
        g.request_id = _incoming_request_id()
        g.start_time = time.time()

    @app.after_request
    def add_response_header(response):
        response.headers["X-Request-ID"] = getattr(g, "request_id", None) or ""
        if app.config.get("REQUEST_LOG_ENABLED", True):
            record_request_log(response.status_code)
        return response

#validate the scopes along side with the JWT token in the request
from functools import wraps

from flask import abort, current_app, g
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request


def require_scopes(required_scopes):
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            verify_jwt_in_request()
            granted = set(get_jwt().get("scopes", []))
            missing = [scope for scope in required_scopes if scope not in granted]
            if missing:
                current_app.logger.warning({
                    "component": "Auth",
                    "event": "scope_denied",
                    "request_id": getattr(g, "request_id", None),
                    "identity": get_jwt_identity(),
                    "missing_scopes": missing,
                })
                abort(403, description=f"Forbidden: missing scope {', '.join(missing)}")
            return fn(*args, **kwargs)
        return decorator
    return wrapper

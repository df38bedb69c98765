from functools import wraps
from flask import g, jsonify


def validate_request_size(request: any, max_json_kb=500):
    """Decorator to validate JSON payload size"""

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            content_length = request.content_length
            if content_length and content_length > max_json_kb * 1024:
                return (
                    jsonify(
                        {
                            "error": {
                                "code": "REQUEST_TOO_LARGE",
                                "message": f"JSON payload exceeds {max_json_kb}KB",
                                "details": {"received_kb": round(content_length / 1024, 1)},
                            },
                            "request_id": getattr(g, "request_id", None),
                        }
                    ),
                    413,
                )
            return f(*args, **kwargs)

        return wrapper

    return decorator

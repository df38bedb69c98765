from flask import Blueprint, current_app, jsonify
from backend.app.database import ping_db
from backend.app.services.cache_service import ping_redis


health_bp = Blueprint("health", __name__)

@health_bp.route("/healthz", methods=["GET"])
def healthz():
    """
    Dependency checks: database, Redis and S3 bucket configuration.
    ---
    tags:
      - Health
    responses:
      200:
        description: Every check passed
      503:
        description: At least one check failed
    """
    health = {"db": False, "redis": False, "s3_configured": False}

    # ------------------
    # Database check
    # ------------------
    try:
        health["db"] = ping_db()
    except Exception as e:
        current_app.logger.warning({"component": "Health", "event": "db_check_failed", "error": str(e)})

    # ------------------
    # Redis check
    # ------------------
    try:
        health["redis"] = ping_redis()
    except Exception as e:
        current_app.logger.warning({"component": "Health", "event": "redis_check_failed", "error": str(e)})

    # ------------------
    # S3 configuration check
    # ------------------
    health["s3_configured"] = bool(current_app.config.get("S3_BUCKET_NAME"))

    status = 200 if all(health.values()) else 503
    return jsonify(health), status

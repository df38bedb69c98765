# backend/app/__init__.py
#   Application factory: config, database, JWT, Swagger docs, middleware and blueprints.
from datetime import timedelta

from flask import Flask, g, jsonify
from flask_jwt_extended import JWTManager
from flasgger import Swagger
from werkzeug.exceptions import HTTPException

from .config.settings import settings
from .database import init_db
from .middleware.request_id import register_request_id_middleware
from .services.cache_service import is_token_blocked

# http status -> stable error code for errors raised outside the route handlers
HTTP_ERROR_CODES = {
    400: "INVALID_ARGUMENT",
    401: "UNAUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "INVALID_ARGUMENT",
    413: "REQUEST_TOO_LARGE",
    502: "UPSTREAM_UNAVAILABLE",
    503: "UNAVAILABLE",
}

SWAGGER_TEMPLATE = {
    "openapi": "3.0.2",
    "info": {
        "title": "BitFit Pro API",
        "description": "Fitness assessments, calorie planning, guides, profile and posture photo storage.",
        "version": "1.0.0",
    },
    "components": {
        "securitySchemes": {
            "BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
        }
    },
}


def _error_body(code: str, message: str, status: int):
    return jsonify({
        "error": {"code": code, "message": message},
        "request_id": getattr(g, "request_id", None),
    }), status


def _register_jwt_callbacks(jwt: JWTManager):
    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return is_token_blocked(jwt_payload["jti"])

    @jwt.unauthorized_loader
    def missing_token(reason):
        return _error_body("UNAUTHENTICATED", reason, 401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return _error_body("UNAUTHENTICATED", reason, 401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return _error_body("UNAUTHENTICATED", "Token has expired", 401)

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return _error_body("UNAUTHENTICATED", "Token has been revoked", 401)


def _register_error_handlers(app: Flask):
    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        code = HTTP_ERROR_CODES.get(exc.code, "INTERNAL" if (exc.code or 500) >= 500 else "INVALID_ARGUMENT")
        return _error_body(code, exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        app.logger.exception({"component": "App", "event": "unhandled_exception", "error": str(exc)})
        return _error_body("INTERNAL", "Internal server error", 500)


def _register_blueprints(app: Flask):
    from .BitFit.FitAPI.AssessmentRoutes import assessments_bp
    from .BitFit.FitAPI.GuideRoutes import guides_bp
    from .BitFit.FitAPI.PostureRoutes import posture_bp
    from .BitFit.FitAPI.ProfileRoutes import profile_bp
    from .routes.auth_routes import auth_bp
    from .routes.health_routes import health_bp

    for bp in (assessments_bp, guides_bp, profile_bp, posture_bp, auth_bp, health_bp):
        app.register_blueprint(bp)


def create_app(config_overrides=None):
    """
    Build the Flask app.

    Args:
      config_overrides: extra app.config values; tests use it to inject
        REDIS_CLIENT, S3_CLIENT and COGNITO_CLIENT fakes.
    """
    app = Flask(__name__)
    app.config.update(settings.as_flask_config())
    if config_overrides:
        app.config.update(config_overrides)
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(minutes=int(app.config["JWT_ACCESS_TOKEN_EXPIRES_MIN"]))
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    init_db(app)

    jwt = JWTManager(app)
    _register_jwt_callbacks(jwt)

    Swagger(app, template=SWAGGER_TEMPLATE)

    register_request_id_middleware(app)
    _register_error_handlers(app)
    _register_blueprints(app)

    app.logger.info({"component": "App", "event": "app_created", "blueprints": sorted(app.blueprints)})
    return app

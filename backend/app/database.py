# backend/app/database.py
#   Centralizes database configuration for the Flask app (request log storage).
from sqlalchemy import text
from flask_sqlalchemy import SQLAlchemy

# ------------------------------
# Flask-SQLAlchemy for app usage
# ------------------------------
db = SQLAlchemy()  # use db.Model for your models


def init_db(app=None):
    """
    Initialize Flask app with SQLAlchemy and create tables if not exist.
    """
    if app:
        db.init_app(app)
        # models must be imported so their tables are registered on db.metadata
        from .models import RequestLog  # noqa: F401
        with app.app_context():
            db.create_all()


def ping_db() -> bool:
    """Run a trivial query; used by the health check."""
    db.session.execute(text("SELECT 1"))
    return True

# backend/app/models/__init__.py
#    Central place to expose all SQLAlchemy ORM models.
from .request_models import RequestLog

__all__ = ["RequestLog"]

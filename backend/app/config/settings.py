# backend/app/config/settings.py
#   Environment-driven configuration shared by the app factory, services and scripts.
import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    # ------------------------------
    # Flask / JWT
    # ------------------------------
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-too")
    JWT_ACCESS_TOKEN_EXPIRES_MIN = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_MIN", "60"))
    DEFAULT_SCOPES = [
        scope.strip()
        for scope in os.getenv(
            "DEFAULT_SCOPES",
            "assessments:run,profile:read,profile:write,storage:read,storage:write",
        ).split(",")
        if scope.strip()
    ]

    # ------------------------------
    # Database (request log)
    # ------------------------------
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///bitfit.db")
    REQUEST_LOG_ENABLED = _env_bool("REQUEST_LOG_ENABLED", "true")

    # ------------------------------
    # Redis (profile cache, token blocklist)
    # ------------------------------
    REDIS_HOST = os.getenv("REDIS_HOST", "redis")
    REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB = int(os.getenv("REDIS_DB", "0"))
    PROFILE_CACHE_TTL = int(os.getenv("PROFILE_CACHE_TTL", str(30 * 24 * 3600)))

    # ------------------------------
    # AWS (S3 + Cognito)
    # ------------------------------
    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
    S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME")
    COGNITO_USER_POOL_ID = os.getenv("COGNITO_USER_POOL_ID")
    COGNITO_CLIENT_ID = os.getenv("COGNITO_CLIENT_ID")
    MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "5"))
    PRESIGNED_URL_EXPIRATION = int(os.getenv("PRESIGNED_URL_EXPIRATION", "3600"))

    # ------------------------------
    # Guide downloads
    # ------------------------------
    GUIDE_DOWNLOAD_URLS = {
        "weightLoss": os.getenv("GUIDE_URL_WEIGHT_LOSS", ""),
        "muscleBuild": os.getenv("GUIDE_URL_MUSCLE_BUILD", ""),
        "stressRelief": os.getenv("GUIDE_URL_STRESS_RELIEF", ""),
        "exercisesAnywhere": os.getenv("GUIDE_URL_EXERCISES_ANYWHERE", ""),
    }
    GUIDE_DOWNLOAD_TIMEOUT = float(os.getenv("GUIDE_DOWNLOAD_TIMEOUT", "10"))
    GUIDE_FALLBACK_TO_TEXT_FILE = _env_bool("GUIDE_FALLBACK_TO_TEXT_FILE", "true")

    def as_flask_config(self) -> dict:
        """Subset copied into app.config by create_app."""
        return {
            "SECRET_KEY": self.SECRET_KEY,
            "LOG_LEVEL": self.LOG_LEVEL,
            "REQUEST_LOG_ENABLED": self.REQUEST_LOG_ENABLED,
            "JWT_SECRET_KEY": self.JWT_SECRET_KEY,
            "JWT_ACCESS_TOKEN_EXPIRES_MIN": self.JWT_ACCESS_TOKEN_EXPIRES_MIN,
            "DEFAULT_SCOPES": list(self.DEFAULT_SCOPES),
            "SQLALCHEMY_DATABASE_URI": self.SQLALCHEMY_DATABASE_URI,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "REDIS_HOST": self.REDIS_HOST,
            "REDIS_PORT": self.REDIS_PORT,
            "REDIS_DB": self.REDIS_DB,
            "PROFILE_CACHE_TTL": self.PROFILE_CACHE_TTL,
            "S3_BUCKET_NAME": self.S3_BUCKET_NAME,
            "COGNITO_USER_POOL_ID": self.COGNITO_USER_POOL_ID,
            "COGNITO_CLIENT_ID": self.COGNITO_CLIENT_ID,
            "MAX_UPLOAD_MB": self.MAX_UPLOAD_MB,
            "PRESIGNED_URL_EXPIRATION": self.PRESIGNED_URL_EXPIRATION,
            "GUIDE_DOWNLOAD_URLS": dict(self.GUIDE_DOWNLOAD_URLS),
            "GUIDE_DOWNLOAD_TIMEOUT": self.GUIDE_DOWNLOAD_TIMEOUT,
            "GUIDE_FALLBACK_TO_TEXT_FILE": self.GUIDE_FALLBACK_TO_TEXT_FILE,
        }


settings = Settings()

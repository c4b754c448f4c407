"""
Environment-aware configuration.
Token secrets and lifetimes, cookie flags, database URL and CORS are read
from the environment (.env is loaded if present).
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


DEFAULT_ACCESS_SECRET = "dev-access-secret-change-me-0123456789abcdef"
DEFAULT_REFRESH_SECRET = "dev-refresh-secret-change-me-0123456789abcdef"


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///videohub.db")
    SQL_ECHO = False
    # request bodies are small JSON documents
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(16 * 1024)))

    # token signing: one secret and lifetime per role
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", DEFAULT_ACCESS_SECRET)
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "86400")))
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", DEFAULT_REFRESH_SECRET)
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "864000")))
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "videohub-api")

    # session cookies
    COOKIE_HTTPONLY = _env_flag("COOKIE_HTTPONLY", True)
    COOKIE_SECURE = _env_flag("COOKIE_SECURE", True)
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Lax")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    LOG_LEVEL = "WARNING"
    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdef0123456789"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdef012345678"
    ACCESS_TOKEN_EXPIRES = timedelta(days=1)
    REFRESH_TOKEN_EXPIRES = timedelta(days=10)
    COOKIE_HTTPONLY = True
    COOKIE_SECURE = True


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/test).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig

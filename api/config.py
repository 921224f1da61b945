"""
Environment-aware configuration.
Every setting can be overridden through the environment (or a .env file).
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    API_PREFIX = os.getenv("API_PREFIX", "/api/v1")

    # Database and connection pool
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///bookstore.db")
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "0"))
    DB_POOL_TIMEOUT = float(os.getenv("DB_POOL_TIMEOUT", "2"))  # seconds to wait for a connection
    DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "30"))  # seconds before an idle connection is replaced

    # JWT
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "bookstore-api")
    JWT_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("JWT_TOKEN_EXPIRES_SECONDS", "86400")))

    # Listing and search
    DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
    MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))
    SEARCH_TEXT_CONFIG = os.getenv("SEARCH_TEXT_CONFIG", "spanish")
    DEFAULT_BOOK_LANGUAGE = os.getenv("DEFAULT_BOOK_LANGUAGE", "Spanish")

    # "local" runs checkout in-process, "procedure" calls process_checkout()
    CHECKOUT_BACKEND = os.getenv("CHECKOUT_BACKEND", "local")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "plain")
    LOG_SQL = _env_bool("LOG_SQL", "false")

    # Default accounts created at startup
    SEED_DEFAULT_ACCOUNTS = _env_bool("SEED_DEFAULT_ACCOUNTS", "true")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@admin.com")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
    TESTER_EMAIL = os.getenv("TESTER_EMAIL", "tester@test.com")
    TESTER_PASSWORD = os.getenv("TESTER_PASSWORD", "123123123")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///test-bookstore.db")
    JWT_SECRET = "test-secret"
    LOG_LEVEL = "WARNING"
    SEED_DEFAULT_ACCOUNTS = True
    TESTER_EMAIL = None  # tests register their own customers


class ProductionConfig(BaseConfig):
    DEBUG = False
    SEED_DEFAULT_ACCOUNTS = _env_bool("SEED_DEFAULT_ACCOUNTS", "false")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig

"""
Co-Innovation Process Flow
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

# Bundled data sources (served under /data/ and read directly by the loader)
_DATA_DIR = os.path.join(basedir, "data")

# Generate a random key for development; production MUST use a stable env var
_DEV_SECRET = secrets.token_hex(32)


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # Data sources: http(s) URL or local JSON file path
    DATA_DIR = os.getenv("DATA_DIR", _DATA_DIR)
    PROCESS_DATA_URL = os.getenv(
        "PROCESS_DATA_URL", os.path.join(DATA_DIR, "co-innovation-process.json")
    )
    PROJECTS_DATA_URL = os.getenv(
        "PROJECTS_DATA_URL", os.path.join(DATA_DIR, "projects.json")
    )
    DATA_FETCH_TIMEOUT = int(os.getenv("DATA_FETCH_TIMEOUT", "10"))  # seconds

    # Layout / interaction
    LAYOUT_PER_ROW = int(os.getenv("LAYOUT_PER_ROW", "4"))
    DEFAULT_CONTAINER_WIDTH = int(os.getenv("DEFAULT_CONTAINER_WIDTH", "1200"))
    RESIZE_DEBOUNCE_MS = int(os.getenv("RESIZE_DEBOUNCE_MS", "250"))

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DATA_FETCH_TIMEOUT = 2


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    def __init__(self):
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}

"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration in development.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Meetup Planner API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Comma‑separated list of tokens identifying queue workers.  A request
    # carrying one of these tokens may poll and acknowledge tasks but is
    # not a user and cannot touch meetups.  Example: WORKER_TOKENS="a,b".
    worker_tokens: str = os.getenv("WORKER_TOKENS", "")

    # Path or connection string for the SQLite database.  Relative paths
    # are resolved against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "meetup_planner.db")

    # Seconds a connection waits for the write lock held by another
    # request before giving up with ``sqlite3.OperationalError``.
    db_timeout_seconds: float = float(os.getenv("DB_TIMEOUT_SECONDS", "5"))

    # Public prefix used to build banner URLs from stored file paths.
    media_base_url: str = os.getenv("MEDIA_BASE_URL", "http://localhost:8000/files")

    page_size: int = int(os.getenv("PAGE_SIZE", "10"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables should
# be set before importing this module.
settings = Settings()

"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables.  Defaults are provided for all fields so the service can be
started without any configuration for local development.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Workshop Booking API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Path to the SQLite database file.  A relative path is resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "workshop_booking.db")

    # Seconds a writer waits for the SQLite write lock before failing.
    busy_timeout_seconds: float = float(os.getenv("DB_BUSY_TIMEOUT", "5.0"))

    # Upper bound on seats (all tiers together) in a single booking or
    # waitlist request.
    max_tickets_per_booking: int = int(os.getenv("MAX_TICKETS_PER_BOOKING", "10"))


# Environment variables must be set before this module is imported.
settings = Settings()

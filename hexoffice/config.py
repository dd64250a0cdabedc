"""
Hexoffice Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Config:
    """Library configuration loaded from environment variables."""

    # Layout validation
    # Host systems that place spaces in negative rows/columns can opt in here.
    ALLOW_NEGATIVE_COORDINATES: bool = _env_flag("HEXOFFICE_ALLOW_NEGATIVE_COORDINATES")

    # Grouping cache (number of distinct layouts remembered, 0 disables caching)
    GROUP_CACHE_SIZE: int = int(os.getenv("HEXOFFICE_GROUP_CACHE_SIZE", "32"))

    # Booking window (days ahead of today a reservation may be made)
    MAX_ADVANCE_DAYS: int = int(os.getenv("HEXOFFICE_MAX_ADVANCE_DAYS", "7"))

    # Logging
    LOG_LEVEL: str = os.getenv("HEXOFFICE_LOG_LEVEL", "WARNING").upper()

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for unusable values."""
        if cls.LOG_LEVEL not in LOG_LEVELS:
            raise ValueError(
                f"HEXOFFICE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got '{cls.LOG_LEVEL}'"
            )

        if cls.MAX_ADVANCE_DAYS < 0:
            raise ValueError("HEXOFFICE_MAX_ADVANCE_DAYS must be zero or a positive integer")

        if cls.GROUP_CACHE_SIZE < 0:
            raise ValueError(
                "HEXOFFICE_GROUP_CACHE_SIZE must be zero (disabled) or a positive integer"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Hexoffice Configuration:",
            f"  Allow Negative Coordinates: {cls.ALLOW_NEGATIVE_COORDINATES}",
            f"  Group Cache Size: {cls.GROUP_CACHE_SIZE}",
            f"  Max Advance Days: {cls.MAX_ADVANCE_DAYS}",
            f"  Log Level: {cls.LOG_LEVEL}",
        ]
        return "\n".join(lines)

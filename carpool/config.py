"""
Configuration module for the carpool matching service.

Centralizes environment-driven settings: routing provider selection,
external map API access, matching concurrency and database connection.
"""

import os
from typing import Any, Dict


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes", "on")


class Settings:
    """Application configuration loaded from environment variables."""

    # Routing provider: "google" or "estimator" (anything else means estimator)
    GEO_PROVIDER: str = os.getenv("GEO_PROVIDER", "estimator").strip().lower() or "estimator"
    GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    GOOGLE_MAPS_BASE_URL: str = os.getenv(
        "GOOGLE_MAPS_BASE_URL", "https://maps.googleapis.com/maps/api"
    )

    GEO_TIMEOUT_SECONDS: float = float(os.getenv("GEO_TIMEOUT", "10.0"))
    GEO_CACHE_TTL_SECONDS: float = float(os.getenv("GEO_CACHE_TTL", "300"))

    ESTIMATOR_SPEED_KMH: float = float(os.getenv("ESTIMATOR_SPEED_KMH", "35.0"))
    ESTIMATOR_OVERHEAD_MINUTES: float = float(os.getenv("ESTIMATOR_OVERHEAD_MINUTES", "2.0"))

    # Max simultaneous outbound routing calls during detour filtering
    MATCH_CONCURRENCY: int = int(os.getenv("MATCH_CONCURRENCY", "5"))

    USE_DATABASE: bool = _env_bool("USE_DATABASE", "true")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./carpool.db")
    SQLALCHEMY_ECHO: bool = _env_bool("SQLALCHEMY_ECHO", "false")

    def uses_google(self) -> bool:
        return self.GEO_PROVIDER == "google"

    def get_config_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary (for debugging)."""
        return {
            "GEO_PROVIDER": self.GEO_PROVIDER,
            "GOOGLE_MAPS_API_KEY": "***" if self.GOOGLE_MAPS_API_KEY else "",
            "GOOGLE_MAPS_BASE_URL": self.GOOGLE_MAPS_BASE_URL,
            "GEO_TIMEOUT_SECONDS": self.GEO_TIMEOUT_SECONDS,
            "GEO_CACHE_TTL_SECONDS": self.GEO_CACHE_TTL_SECONDS,
            "ESTIMATOR_SPEED_KMH": self.ESTIMATOR_SPEED_KMH,
            "ESTIMATOR_OVERHEAD_MINUTES": self.ESTIMATOR_OVERHEAD_MINUTES,
            "MATCH_CONCURRENCY": self.MATCH_CONCURRENCY,
            "USE_DATABASE": self.USE_DATABASE,
            "DATABASE_URL": self.DATABASE_URL.replace("//", "//***@") if "@" in self.DATABASE_URL else self.DATABASE_URL,
        }


# Global configuration instance
settings = Settings()

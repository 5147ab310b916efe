"""
Sentinel-G - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # External signal sources
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    overpass_api_url: str = "https://overpass-api.de/api/interpreter"
    http_timeout_seconds: float = 10.0
    places_radius_m: int = 5000

    # Consensus policy
    auto_verify_threshold: int = 3
    neutral_confidence: int = 50
    verify_confidence_threshold: int = 60
    crowd_verified_confidence: int = 75
    heavy_cloud_discount: int = 15
    radar_precipitation_mm: float = 2.0
    precipitation_cloud_offset: float = 0.5

    # Ingestion
    synthetic_report_interval_seconds: float = 5.0
    zone_match_radius_km: float = 25.0
    default_window_hours: int = 24

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()

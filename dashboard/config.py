"""
Configuration and settings for the dashboard service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # Firebase project (the same values the web client is configured with)
    firebase_api_key: Optional[str] = Field(default=None)
    firebase_auth_domain: Optional[str] = Field(default=None)
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_database_url: Optional[str] = Field(default=None)
    firebase_storage_bucket: Optional[str] = Field(default=None)
    firebase_messaging_sender_id: Optional[str] = Field(default=None)
    firebase_app_id: Optional[str] = Field(default=None)
    firebase_measurement_id: Optional[str] = Field(default=None)

    # Service account JSON; application default credentials when unset
    google_application_credentials: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="TRACKUTEM_USE_IN_MEMORY_BACKENDS"
    )

    # Screens
    session_cookie_name: str = Field(default="trackutem_session")
    session_cookie_secure: bool = Field(default=False)
    signed_url_expires_in: int = Field(default=3600, ge=60, le=604800)
    live_location_stale_after_seconds: int = Field(default=300, ge=1)

    log_level: str = Field(default="INFO")

    def web_client_config(self) -> dict:
        """Public configuration for the browser Firebase SDK."""
        return {
            "apiKey": self.firebase_api_key,
            "authDomain": self.firebase_auth_domain,
            "databaseURL": self.firebase_database_url,
            "projectId": self.firebase_project_id,
            "storageBucket": self.firebase_storage_bucket,
            "messagingSenderId": self.firebase_messaging_sender_id,
            "appId": self.firebase_app_id,
            "measurementId": self.firebase_measurement_id,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()

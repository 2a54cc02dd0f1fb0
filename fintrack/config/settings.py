"""
Configuration Management for FinTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Both external credentials are optional. A missing Google client
disables Drive sync, a missing Gemini key disables AI insights,
and neither stops the rest of the application from working.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleDriveSettings(BaseSettings):
    """Google Drive sync configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    client_id: Optional[str] = Field(
        default=None,
        description="OAuth client ID of the installed application"
    )
    client_secret: Optional[str] = Field(
        default=None,
        description="OAuth client secret of the installed application"
    )
    token_path: Path = Field(
        default=Path.home() / ".fintrack" / "google_token.json",
        description="Where the authorized user token is cached"
    )
    snapshot_filename: str = Field(
        default="fintrack_pro_data.json",
        min_length=1,
        description="Name of the snapshot file in the user's Drive"
    )
    scopes: list[str] = Field(
        default=["https://www.googleapis.com/auth/drive.file"],
        description="OAuth scopes (only files created by this app)"
    )
    
    @property
    def is_configured(self) -> bool:
        """Sync is available only when both client credentials are set."""
        return bool(self.client_id and self.client_secret)
    
    def client_config(self) -> dict:
        """Client configuration in the shape the OAuth flow expects."""
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": ["http://localhost"],
            }
        }


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )
    
    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    data_dir: Path = Field(
        default=Path.home() / ".fintrack",
        description="Directory holding the local record store"
    )
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO currency code for new projects"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    
    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def google_drive(self) -> GoogleDriveSettings:
        return GoogleDriveSettings()
    
    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Report which optional features are enabled.
    
    Returns a dict of {feature_name: is_enabled}. Settings that fail
    to load add a "<feature>_error" entry with the reason.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        results["google_drive"] = settings.google_drive.is_configured
    except Exception as e:
        results["google_drive"] = False
        results["google_drive_error"] = str(e)
    
    try:
        results["gemini"] = settings.gemini.is_configured
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)
    
    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
    
    return results

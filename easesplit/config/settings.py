"""
Configuration Management for Ease Split

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The split engine and receipt parser take no configuration at all; only the
session, the audit trail and the OCR adapter read settings.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TesseractSettings(BaseSettings):
    """Tesseract OCR engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TESSERACT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    cmd: Optional[str] = Field(
        default=None,
        description="Path to the tesseract binary (uses PATH when unset)"
    )
    language: str = Field(
        default="eng",
        description="Tesseract language code(s), e.g. 'eng' or 'eng+fra'"
    )
    config: str = Field(
        default="",
        description="Extra command-line flags passed to tesseract"
    )
    timeout_seconds: int = Field(
        default=30,
        ge=0,
        le=600,
        description="Recognition timeout (0 disables it)"
    )

    @field_validator('cmd')
    @classmethod
    def validate_cmd(cls, v: Optional[str]) -> Optional[str]:
        """Warn if the configured binary doesn't exist (it might be installed later)."""
        if v and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Tesseract binary not found at {v}. "
                "Make sure it exists before scanning receipts."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local logging"
    )

    # Receipt upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt image size in MB"
    )
    supported_image_formats: str = Field(
        default="jpg,jpeg,png,webp,bmp,tiff",
        description="Comma-separated list of supported image formats"
    )

    # Audit trail
    audit_history_limit: int = Field(
        default=500,
        ge=1,
        description="How many audit events a session keeps in memory"
    )

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def tesseract(self) -> TesseractSettings:
        return TesseractSettings()

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
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.tesseract
        results["tesseract"] = True
    except Exception as e:
        results["tesseract"] = False
        results["tesseract_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results

"""
Configuration Management for Shop Sahai Voice

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunables are centralized here.
Word lists and number dictionaries are NOT settings; they live in
shopsahai.nlu.lexicon and are injected as immutable objects.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VoiceSettings(BaseSettings):
    """Voice interaction timing and recognition tuning."""

    model_config = SettingsConfigDict(
        env_prefix="VOICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_language: str = Field(
        default="english",
        pattern="^(english|malayalam)$",
        description="Language used when the caller does not pick one"
    )

    # Timers
    debounce_ms: int = Field(
        default=600,
        ge=0,
        le=5000,
        description="Quiet window before a transcript is dispatched"
    )
    speech_cooldown_ms: int = Field(
        default=700,
        ge=0,
        le=5000,
        description="Pause after a spoken prompt before listening again"
    )
    resume_grace_ms: int = Field(
        default=1000,
        ge=0,
        description="No listening right after the host app resumes"
    )
    resume_retry_ms: int = Field(
        default=800,
        ge=0,
        description="Retry delay for a listen attempt inside the resume grace window"
    )

    # Name extraction
    fuzzy_match_threshold: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Maximum normalized distance for a reference name match (lower = stricter)"
    )
    name_fallback_tokens: int = Field(
        default=3,
        ge=1,
        le=3,
        description="How many trailing words to keep when no name was isolated"
    )

    # Sanity checks
    max_reasonable_amount: int = Field(
        default=10_000_000,
        ge=1,
        description="Amounts above this are saved but flagged with a warning"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for income/expense rows"
    )
    purchases_sheet_name: str = Field(
        default="Purchases",
        description="Name of the sheet for purchase rows"
    )
    borrows_sheet_name: str = Field(
        default="Borrows",
        description="Name of the sheet for borrow rows"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Where confirmed records are written"
    )


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
    def voice(self) -> VoiceSettings:
        return VoiceSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

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

    Returns a dict of {setting_name: is_valid}, plus an
    "<name>_error" entry for every section that failed to load.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("voice", "google_sheets", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

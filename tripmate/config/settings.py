"""
Configuration Management for Tripmate

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini receipt-scanning and assistant configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Model used for receipt scanning and everyday questions"
    )
    pro_model_name: str = Field(
        default="gemini-2.5-pro",
        description="Model used for budget and estimate questions"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in a flash model response"
    )
    pro_max_tokens: int = Field(
        default=8192,
        ge=100,
        le=65536,
        description="Maximum tokens in a pro model response"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPMATE_STORAGE_",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".tripmate",
        description="Directory holding the persisted trip and audit log"
    )
    trip_key: str = Field(
        default="tripData",
        min_length=1,
        description="Key under which the current trip is stored"
    )
    audit_log_name: str = Field(
        default="audit.jsonl",
        description="File name of the append-only audit log"
    )

    @field_validator('trip_key')
    @classmethod
    def validate_trip_key(cls, v: str) -> str:
        """The key becomes a file name, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key must not contain path separators: {v}")
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
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Seed data for a brand new trip
    default_trip_name: str = Field(
        default="My Awesome Trip",
        min_length=1,
        description="Name given to a freshly created trip"
    )
    seed_member_name: str = Field(
        default="Me",
        min_length=1,
        description="Name of the first member of a freshly created trip"
    )
    seed_contribution: Decimal = Field(
        default=Decimal("500"),
        ge=0,
        description="Contribution recorded for the first member (0 disables it)"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        description="Currency symbol used by reports"
    )

    # Receipt upload limits
    max_image_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt image size in MB"
    )

    # Validation thresholds
    max_expense_amount: Decimal = Field(
        default=Decimal("100000"),
        description="Expenses above this are flagged for a second look"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future an expense date can be"
    )

    @property
    def max_image_size_bytes(self) -> int:
        """Get max receipt image size in bytes."""
        return self.max_image_size_mb * 1024 * 1024


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    for name in ("gemini", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

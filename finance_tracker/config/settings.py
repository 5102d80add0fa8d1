"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger itself is in-memory; the only external pieces are the profile
store and the optional Google Sheets audit trail.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Balance, currency and presentation defaults for the ledger."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    initial_balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Balance the ledger starts with"
    )
    currency_code: str = Field(
        default="TRY",
        min_length=3,
        max_length=3,
        description="ISO 4217 currency code"
    )
    currency_symbol: str = Field(
        default="₺",
        description="Symbol used when formatting amounts"
    )
    recent_transactions_limit: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Default size of the recent transactions list"
    )
    top_categories_count: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Default number of top spending categories"
    )
    default_goal_category: str = Field(
        default="General",
        description="Category given to savings goals created without one"
    )
    default_goal_color: str = Field(
        default="#4CAF50",
        description="Color given to savings goals created without one"
    )

    @field_validator('currency_code')
    @classmethod
    def normalize_currency_code(cls, v: str) -> str:
        return v.upper()


class ProfileSettings(BaseSettings):
    """Local user profile storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PROFILE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_path: Path = Field(
        default=Path.home() / ".finance_tracker" / "profile.json",
        description="JSON file holding the user profile"
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
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )
    profile_sheet_name: str = Field(
        default="Profile",
        description="Name of the sheet holding the user profile"
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
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def profile(self) -> ProfileSettings:
        return ProfileSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failures.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "profile", "google_sheets"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

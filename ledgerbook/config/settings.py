"""
Configuration Management for Ledgerbook

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Ledger codes and bucket names for the synthetic ledgers (fees,
uncategorized, unclassified cash) live here so reports and exports
agree on them.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger reconstruction settings."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Chart-of-accounts codes used for derived ledgers
    cash_ledger_code: str = Field(
        default="1101",
        description="Ledger code shown for every cash/bank account"
    )
    fee_ledger_code: str = Field(
        default="6900",
        description="Code of the shared fees expense ledger"
    )
    fee_ledger_name: str = Field(
        default="Fees",
        description="Name of the shared fees expense ledger"
    )

    # Synthetic buckets for unresolved references
    uncategorized_code: str = Field(
        default="0000",
        description="Code for uncategorized income/expense buckets"
    )
    uncategorized_income_name: str = Field(
        default="Uncategorized income",
    )
    uncategorized_expense_name: str = Field(
        default="Uncategorized expense",
    )
    unclassified_cash_name: str = Field(
        default="Unclassified cash account",
        description="Bucket for records pointing at an unknown cash account"
    )

    # Report shaping
    hide_empty_ledgers: bool = Field(
        default=True,
        description="Drop ledgers with no entries and a zero opening balance"
    )
    amount_decimal_places: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places used when flattening amounts to text"
    )

    @field_validator('fee_ledger_code', 'cash_ledger_code', 'uncategorized_code')
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Ledger codes must not be blank."""
        if not v.strip():
            raise ValueError("Ledger code cannot be blank")
        return v.strip()


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

    # Record source access
    source_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts when the record source is unavailable"
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

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results

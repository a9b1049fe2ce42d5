"""
Configuration Management for fintrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Rate tables are static reference data and live with the services that
use them; only the choices a deployment makes (which currency to report
in, how strict the zero-sum check is) are configurable.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fintrack.models.money import Currency


class LedgerSettings(BaseSettings):
    """Balance ledger configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    reporting_currency: Currency = Field(
        default=Currency.EUR,
        description="Currency all balances and report totals are expressed in"
    )
    balance_tolerance: Decimal = Field(
        default=Decimal("1e-9"),
        gt=0,
        description="Per-transaction tolerance for the zero-sum balance check"
    )

    @field_validator("reporting_currency", mode="before")
    @classmethod
    def normalize_currency_code(cls, v):
        """Accept lower-case codes from the environment."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class VATSettings(BaseSettings):
    """VAT reporting configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_VAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    threshold_currency: Currency = Field(
        default=Currency.EUR,
        description="Currency the registration thresholds are denominated in"
    )

    @field_validator("threshold_currency", mode="before")
    @classmethod
    def normalize_currency_code(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
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
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local structured logs"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
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

    # Sub-settings are built on access so a bad value in one concern
    # doesn't block the others from loading.

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def vat(self) -> VATSettings:
        return VATSettings()

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

    for name in ("ledger", "vat", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

"""Configuration management for Household Ledger."""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .splits import DEFAULT_PERCENTAGE_EPSILON


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HOUSEHOLD_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Split resolution
    percentage_epsilon: Decimal = Field(default=DEFAULT_PERCENTAGE_EPSILON, ge=0)

    # Logging
    log_level: str = "INFO"

    # Display: minor-unit digits per currency
    currency_exponents: dict[str, int] = Field(
        default_factory=lambda: {"EUR": 2, "USD": 2, "GBP": 2, "JPY": 0}
    )

    def exponent_for(self, currency: str) -> int:
        """Minor-unit digits for a currency, defaulting to 2."""
        return self.currency_exponents.get(currency, 2)


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the HOUSEHOLD_LEDGER_* environment "
            f"variables and your .env file.\n"
            f"Error: {e}"
        ) from e

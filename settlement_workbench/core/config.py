"""Application configuration using Pydantic Settings."""

import json
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_PERMITTED_TAX_RATES = [
    Decimal("0.06"),
    Decimal("0.09"),
    Decimal("0.13"),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Error Tracking
    sentry_dsn: str | None = None
    """Sentry DSN for error tracking. Optional."""

    anthropic_api_key: str | None = None
    """Anthropic API key for audit narrative generation."""

    narrative_model: str = "claude-sonnet-4-5"
    """Model used to write the settlement audit narrative."""

    narrative_max_tokens: int = 2048
    """Completion budget for a single narrative request."""

    narrative_fail_max: int = 3
    """Consecutive narrative failures before the circuit opens."""

    narrative_reset_timeout: int = 60
    """Seconds an open narrative circuit waits before a trial call."""

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # NoDecode prevents pydantic-settings from forcing JSON parsing at the
    # env-source layer, so we can accept either JSON arrays or CSV strings.
    permitted_tax_rates: Annotated[list[Decimal], NoDecode] = DEFAULT_PERMITTED_TAX_RATES
    """Tax rates a user may select for estimated input-tax simulation."""

    @field_validator("permitted_tax_rates", mode="before")
    @classmethod
    def parse_permitted_tax_rates(cls, value: object) -> list[Decimal]:
        """Parse permitted tax rates from JSON array, CSV, or list."""
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return DEFAULT_PERMITTED_TAX_RATES.copy()

            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None

            if isinstance(decoded, list):
                return _normalize_tax_rates(decoded)
            if isinstance(decoded, str):
                text = decoded
            elif decoded is not None and not isinstance(decoded, (int, float)):
                raise ValueError(
                    "PERMITTED_TAX_RATES must be a JSON array or comma-separated string."
                )

            # Fallback: comma-separated values
            return _normalize_tax_rates(text.split(","))

        if isinstance(value, (list, tuple, set)):
            return _normalize_tax_rates(value)

        raise ValueError(
            "PERMITTED_TAX_RATES must be a string, list, tuple, or set."
        )


def _normalize_tax_rates(values: Iterable[object]) -> list[Decimal]:
    """Normalize and dedupe tax rates while preserving declaration order."""
    normalized: list[Decimal] = []
    for raw_item in values:
        item = str(raw_item).strip().strip("'").strip('"')
        if not item:
            continue
        try:
            rate = Decimal(item)
        except InvalidOperation as exc:
            raise ValueError(f"PERMITTED_TAX_RATES contains a non-numeric rate: {item!r}") from exc
        if rate < 0 or rate >= 1:
            raise ValueError(f"PERMITTED_TAX_RATES entries must be in [0, 1), got {rate}")
        if rate in normalized:
            continue
        normalized.append(rate)

    if not normalized:
        return DEFAULT_PERMITTED_TAX_RATES.copy()
    return normalized


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "Allowed values for PERMITTED_TAX_RATES are:",
        '  1) ["0.06","0.09","0.13"]',
        "  2) 0.06,0.09,0.13",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc

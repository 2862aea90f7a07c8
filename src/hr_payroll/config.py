"""Environment-driven settings for the HR payroll core.

Values come from the process environment, with a `.env` file in the
working directory filling in anything unset.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///./hr_payroll.db"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_rate(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default)
    try:
        rate = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if not Decimal("0") <= rate <= Decimal("100"):
        raise ValueError(f"{name} must be between 0 and 100, got {raw!r}")
    return rate


@dataclass(frozen=True)
class Settings:
    """Process settings.

    The default_* rates only seed the persisted settings row on first read;
    after that the row is authoritative.
    """

    database_url: str
    host: str
    port: int
    debug: bool
    log_level: str
    default_tax_rate: Decimal
    default_social_rate: Decimal
    default_currency_symbol: str
    password_hash_iterations: int

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 8000),
            debug=_env_bool("DEBUG", False),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
            default_tax_rate=_env_rate("DEFAULT_TAX_RATE", "10"),
            default_social_rate=_env_rate("DEFAULT_SOCIAL_RATE", "7"),
            default_currency_symbol=os.getenv("DEFAULT_CURRENCY_SYMBOL", "$"),
            password_hash_iterations=_env_int("PASSWORD_HASH_ITERATIONS", 260_000),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings for this process, read once."""
    return Settings.from_env()

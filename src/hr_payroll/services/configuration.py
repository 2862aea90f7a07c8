"""Configuration store for the process-wide tax settings row."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_payroll.calculators.types import TaxSettings
from hr_payroll.config import get_settings
from hr_payroll.context import CallerContext
from hr_payroll.models import TaxConfiguration
from hr_payroll.services.audit import AuditService
from hr_payroll.validation import ValidationReport, check_rate, check_required, parse_decimal

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1
MAX_CURRENCY_SYMBOL_LENGTH = 8


class ConfigurationStore:
    """Reads and updates the single `settings` row.

    Reads are never cached: every call goes to the database, so a batch
    that reads per row sees an update made halfway through it.
    """

    def __init__(self, session: Session):
        self.session = session

    def _load_row(self) -> TaxConfiguration:
        row = self.session.execute(
            select(TaxConfiguration).where(TaxConfiguration.id == SETTINGS_ROW_ID)
        ).scalar_one_or_none()
        if row is None:
            # First read seeds the row from environment defaults.
            defaults = get_settings()
            row = TaxConfiguration(
                id=SETTINGS_ROW_ID,
                tax_rate=defaults.default_tax_rate,
                social_rate=defaults.default_social_rate,
                currency_symbol=defaults.default_currency_symbol,
            )
            self.session.add(row)
            self.session.flush()
            logger.info(
                "Seeded tax configuration (tax_rate=%s, social_rate=%s, currency=%s)",
                row.tax_rate,
                row.social_rate,
                row.currency_symbol,
            )
        return row

    def get(self) -> TaxSettings:
        """Current tax settings."""
        row = self._load_row()
        return TaxSettings(
            tax_rate=Decimal(row.tax_rate),
            social_rate=Decimal(row.social_rate),
            currency_symbol=row.currency_symbol,
        )

    def update(
        self,
        ctx: CallerContext,
        *,
        tax_rate: str | Decimal | None = None,
        social_rate: str | Decimal | None = None,
        currency_symbol: str | None = None,
    ) -> TaxSettings:
        """Update any subset of the settings.

        Raises:
            ValidationError: If a rate is outside 0..100 or the symbol is blank/too long
        """
        report = ValidationReport()
        if tax_rate is not None:
            report.record("tax_rate", check_rate(tax_rate, "Tax rate"))
        if social_rate is not None:
            report.record("social_rate", check_rate(social_rate, "Social rate"))
        if currency_symbol is not None:
            if report.record("currency_symbol", check_required(currency_symbol, "Currency symbol")):
                if len(currency_symbol.strip()) > MAX_CURRENCY_SYMBOL_LENGTH:
                    report.add(
                        "currency_symbol",
                        f"Currency symbol must be at most {MAX_CURRENCY_SYMBOL_LENGTH} characters.",
                    )
        report.raise_if_failed()

        row = self._load_row()
        changes: list[str] = []
        if tax_rate is not None:
            row.tax_rate = parse_decimal(tax_rate)  # type: ignore[assignment]
            changes.append(f"tax_rate={row.tax_rate}")
        if social_rate is not None:
            row.social_rate = parse_decimal(social_rate)  # type: ignore[assignment]
            changes.append(f"social_rate={row.social_rate}")
        if currency_symbol is not None:
            row.currency_symbol = currency_symbol.strip()
            changes.append(f"currency_symbol={row.currency_symbol}")
        self.session.flush()

        AuditService(self.session).record(
            ctx,
            "settings_updated",
            "settings",
            SETTINGS_ROW_ID,
            details=", ".join(changes) or None,
        )
        logger.info("Tax configuration updated by %s: %s", ctx.label, ", ".join(changes))
        return self.get()

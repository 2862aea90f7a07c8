"""HR Payroll Command Line Interface.

Provides operational tools for:
- Schema creation
- Role and department seeding
- Tax settings inspection
- Batch payroll generation
- Pay period locking

Usage:
    python -m hr_payroll.cli init-db
    python -m hr_payroll.cli seed-references --roles Admin HR --departments Finance
    python -m hr_payroll.cli show-settings
    python -m hr_payroll.cli generate-batch --month March --year 2025 --allowances 500
    python -m hr_payroll.cli lock-period --month March --year 2025
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.calculators import PayAdjustment, PayPeriod
from hr_payroll.config import get_settings
from hr_payroll.context import CallerContext
from hr_payroll.database import create_schema, create_session_factory, get_engine, session_scope
from hr_payroll.errors import DuplicateError, PayrollCoreError
from hr_payroll.services import (
    BatchResult,
    ConfigurationStore,
    PayrollService,
    ReferenceKind,
    ReferenceResolver,
)

logger = logging.getLogger(__name__)


class HRPayrollCli:
    """HR Payroll Command Line Interface."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.parser = self._build_parser()
        self._session_factory = session_factory
        self.ctx = CallerContext.system()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m hr_payroll.cli",
            description="HR payroll operational tools",
        )
        parser.add_argument(
            "--database-url",
            type=str,
            help="Database URL (default: $DATABASE_URL)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # init-db command
        subparsers.add_parser(
            "init-db",
            help="Create all tables",
        )

        # seed-references command
        seed = subparsers.add_parser(
            "seed-references",
            help="Insert roles and departments, skipping names that already exist",
        )
        seed.add_argument(
            "--roles",
            nargs="*",
            default=[],
            metavar="NAME",
            help="Role names to create",
        )
        seed.add_argument(
            "--departments",
            nargs="*",
            default=[],
            metavar="NAME",
            help="Department names to create",
        )

        # show-settings command
        subparsers.add_parser(
            "show-settings",
            help="Print the current tax configuration",
        )

        # generate-batch command
        batch = subparsers.add_parser(
            "generate-batch",
            help="Generate payroll for every active employee",
        )
        batch.add_argument("--month", type=str, required=True, help="Month name (e.g. March)")
        batch.add_argument("--year", type=str, required=True, help="Four-digit year")
        batch.add_argument(
            "--allowances",
            type=str,
            default=None,
            help="Allowances applied to every employee (default: 0)",
        )
        batch.add_argument(
            "--deductions",
            type=str,
            default=None,
            help="Deductions applied to every employee (default: 0)",
        )

        # lock-period command
        lock = subparsers.add_parser(
            "lock-period",
            help="Close a pay period to further payroll writes",
        )
        lock.add_argument("--month", type=str, required=True, help="Month name (e.g. March)")
        lock.add_argument("--year", type=str, required=True, help="Four-digit year")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        if self._session_factory is None:
            self._session_factory = create_session_factory(get_engine(parsed.database_url))

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "init-db": self._cmd_init_db,
            "seed-references": self._cmd_seed_references,
            "show-settings": self._cmd_show_settings,
            "generate-batch": self._cmd_generate_batch,
            "lock-period": self._cmd_lock_period,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except PayrollCoreError as exc:
            print(f"ERROR [{exc.code}]: {exc}", file=sys.stderr)
            return 1

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = create_session_factory(get_engine())
        return self._session_factory

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create all tables."""
        bind = self.session_factory.kw["bind"]
        create_schema(bind)
        print(f"Schema created on {bind.url.render_as_string(hide_password=True)}")
        return 0

    def _cmd_seed_references(self, args: argparse.Namespace) -> int:
        """Insert roles and departments."""
        created = 0
        for kind, names in (
            (ReferenceKind.ROLE, args.roles),
            (ReferenceKind.DEPARTMENT, args.departments),
        ):
            for name in names:
                try:
                    with session_scope(self.session_factory) as session:
                        ReferenceResolver(session).create_reference(self.ctx, kind, name)
                except DuplicateError:
                    print(f"  - {kind.value} {name!r} already exists")
                    continue
                print(f"  + {kind.value} {name!r}")
                created += 1

        print(f"\n{created} reference(s) created.")
        return 0

    def _cmd_show_settings(self, args: argparse.Namespace) -> int:
        """Print the current tax configuration."""
        with session_scope(self.session_factory) as session:
            current = ConfigurationStore(session).get()

        print("Tax configuration")
        print(f"  Tax rate:        {current.tax_rate}%")
        print(f"  Social rate:     {current.social_rate}%")
        print(f"  Currency symbol: {current.currency_symbol}")
        return 0

    def _cmd_generate_batch(self, args: argparse.Namespace) -> int:
        """Generate payroll for the active employee set.

        Ctrl-C cancels between employees; rows already written stay.
        """
        period = PayPeriod.parse(args.month, args.year)
        adjustment = PayAdjustment.parse(args.allowances, args.deductions)
        service = PayrollService(self.session_factory)
        cancel = threading.Event()

        print(f"Generating payroll for {period}")
        print(f"  Allowances: {adjustment.allowances}")
        print(f"  Deductions: {adjustment.deductions}")

        with ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(
                service.generate_batch,
                self.ctx,
                period,
                default_adjustment=adjustment,
                cancel_event=cancel,
            )
            try:
                result: BatchResult = future.result()
            except KeyboardInterrupt:
                cancel.set()
                print("\nCancelling after the current employee...")
                result = future.result()

        print(f"\n  Succeeded: {result.success_count}")
        print(f"  Failed:    {result.failure_count}")
        for failure in result.failures:
            print(f"    employee {failure.employee_id} [{failure.code}]: {failure.reason}")
        if result.cancelled:
            print("\nBatch cancelled.")
            return 1
        return 0 if not result.failures else 2

    def _cmd_lock_period(self, args: argparse.Namespace) -> int:
        """Lock a pay period."""
        period = PayPeriod.parse(args.month, args.year)
        locked = PayrollService(self.session_factory).lock_period(self.ctx, period)
        print(f"Locked {period} ({locked} payroll row(s)).")
        return 0


def main() -> int:
    """CLI entry point."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cli = HRPayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())

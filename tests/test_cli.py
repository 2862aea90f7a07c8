"""Tests for the operational CLI."""

from decimal import Decimal

from hr_payroll.cli import HRPayrollCli
from hr_payroll.database import session_scope
from hr_payroll.models import PayrollPeriodLock, PayrollRecord
from hr_payroll.services import ReferenceResolver


class TestCli:
    """Command dispatch against the test database."""

    def test_no_command_prints_help(self, seeded, capsys):
        assert HRPayrollCli(seeded).run([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_seed_references_skips_existing(self, seeded, capsys):
        code = HRPayrollCli(seeded).run(
            ["seed-references", "--roles", "Admin", "Auditor", "--departments", "Legal"]
        )

        assert code == 0
        out = capsys.readouterr().out
        assert "role 'Admin' already exists" in out
        assert "2 reference(s) created." in out
        with session_scope(seeded) as session:
            resolver = ReferenceResolver(session)
            assert "Auditor" in resolver.list_names("role")
            assert "Legal" in resolver.list_names("department")

    def test_show_settings(self, seeded, capsys):
        assert HRPayrollCli(seeded).run(["show-settings"]) == 0
        out = capsys.readouterr().out
        assert "Tax rate:" in out
        assert "Currency symbol: $" in out

    def test_generate_batch_and_lock(self, seeded, make_employee, row_count, capsys):
        make_employee(salary="10000")
        make_employee(salary="5000")
        cli = HRPayrollCli(seeded)

        assert cli.run(
            ["generate-batch", "--month", "march", "--year", "2025", "--allowances", "500"]
        ) == 0
        assert row_count(PayrollRecord) == 2
        with session_scope(seeded) as session:
            allowances = {r.allowances for r in session.query(PayrollRecord)}
        assert allowances == {Decimal("500.00")}

        assert cli.run(["lock-period", "--month", "March", "--year", "2025"]) == 0
        assert row_count(PayrollPeriodLock) == 1
        assert "Locked March 2025 (2 payroll row(s))." in capsys.readouterr().out

    def test_rerun_reports_failures(self, seeded, make_employee, capsys):
        make_employee()
        cli = HRPayrollCli(seeded)
        cli.run(["generate-batch", "--month", "March", "--year", "2025"])

        assert cli.run(["generate-batch", "--month", "March", "--year", "2025"]) == 2
        assert "[DUPLICATE]" in capsys.readouterr().out

    def test_core_errors_exit_non_zero(self, seeded, capsys):
        code = HRPayrollCli(seeded).run(["lock-period", "--month", "Smarch", "--year", "2025"])

        assert code == 1
        assert "VALIDATION_FAILED" in capsys.readouterr().err

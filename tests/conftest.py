"""Pytest fixtures for HR payroll core tests."""

from __future__ import annotations

import itertools
import os
from collections.abc import Callable, Iterator
from datetime import date
from decimal import Decimal

# Cheap hashing for tests; must be set before settings are first read.
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("DEFAULT_TAX_RATE", "10")
os.environ.setdefault("DEFAULT_SOCIAL_RATE", "7")
os.environ.setdefault("DEFAULT_CURRENCY_SYMBOL", "$")

import pytest
from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.config import get_settings
from hr_payroll.context import CallerContext
from hr_payroll.database import create_schema, create_session_factory, get_engine, session_scope
from hr_payroll.models import Department, Role
from hr_payroll.services import (
    ConfigurationStore,
    PayrollService,
    ProvisioningResult,
    ProvisioningService,
)
from hr_payroll.validation import EmployeeFields, UserFields

get_settings.cache_clear()

TODAY = date(2025, 6, 30)

ROLES = ("Admin", "HR Manager", "Employee")
DEPARTMENTS = ("Finance", "Engineering", "Human Resources")


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    """File-backed SQLite database per test, so every session sees committed data."""
    engine = get_engine(f"sqlite:///{tmp_path / 'hr_payroll_test.db'}")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def seeded(session_factory: sessionmaker[Session]) -> sessionmaker[Session]:
    """Database with roles, departments and the settings row in place."""
    with session_scope(session_factory) as session:
        session.add_all(Role(name=name) for name in ROLES)
        session.add_all(
            Department(name=name, description=f"{name} department") for name in DEPARTMENTS
        )
        session.flush()
        ConfigurationStore(session).get()
    return session_factory


@pytest.fixture
def ctx() -> CallerContext:
    return CallerContext(actor_user_id=1, actor_username="admin")


@pytest.fixture
def user_fields() -> Callable[..., UserFields]:
    """Builder for a valid UserFields; keyword overrides replace single fields."""

    def build(**overrides: object) -> UserFields:
        values: dict[str, object] = {
            "username": "abebe",
            "first_name": "Abebe",
            "last_name": "Kebede",
            "email": "abebe@example.com",
            "phone": "0912345678",
            "role_name": "Employee",
            "department_name": "Finance",
            "designation": "Accountant",
            "date_joined": "2024-01-15",
            "status": "Active",
            "password": "s3cret-pass",
        }
        values.update(overrides)
        return UserFields(**values)  # type: ignore[arg-type]

    return build


@pytest.fixture
def employee_fields() -> Callable[..., EmployeeFields]:
    """Builder for a valid EmployeeFields."""

    def build(**overrides: object) -> EmployeeFields:
        values: dict[str, object] = {
            "gender": "Female",
            "salary": "10000",
            "bank_account": "1000123456789",
        }
        values.update(overrides)
        return EmployeeFields(**values)  # type: ignore[arg-type]

    return build


@pytest.fixture
def provisioning(seeded: sessionmaker[Session]) -> ProvisioningService:
    return ProvisioningService(seeded, today=lambda: TODAY)


@pytest.fixture
def payroll(seeded: sessionmaker[Session]) -> PayrollService:
    return PayrollService(seeded)


@pytest.fixture
def make_employee(
    provisioning: ProvisioningService,
    ctx: CallerContext,
    user_fields: Callable[..., UserFields],
    employee_fields: Callable[..., EmployeeFields],
) -> Callable[..., ProvisioningResult]:
    """Provision employees with unique usernames and emails."""
    counter = itertools.count(1)

    def make(salary: str | Decimal = "10000", **overrides: object) -> ProvisioningResult:
        n = next(counter)
        user = user_fields(
            **{"username": f"staff{n}", "email": f"staff{n}@example.com", **overrides}
        )
        return provisioning.create_employee(ctx, user, employee_fields(salary=salary))

    return make


def count_rows(session_factory: sessionmaker[Session], model: type) -> int:
    """Number of rows in a model's table."""
    with session_scope(session_factory) as session:
        return session.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def row_count(seeded: sessionmaker[Session]) -> Callable[[type], int]:
    return lambda model: count_rows(seeded, model)

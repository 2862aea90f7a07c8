"""Integration test fixtures: the FastAPI app over a seeded test database."""

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.api.app import create_app

ADMIN_HEADERS = {"X-Actor-Id": "1", "X-Actor-Username": "admin"}


@pytest.fixture
def client(seeded: sessionmaker[Session]) -> Iterator[TestClient]:
    """API client bound to the per-test database."""
    app = create_app(session_factory=seeded)
    with TestClient(app, headers=ADMIN_HEADERS) as client:
        yield client


@pytest.fixture
def employee_payload() -> Callable[..., dict[str, Any]]:
    """Builder for a valid employee create body."""

    def build(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "username": "abebe",
            "password": "s3cret-pass",
            "first_name": "Abebe",
            "last_name": "Kebede",
            "email": "abebe@example.com",
            "phone": "0912345678",
            "role": "Employee",
            "department": "Finance",
            "designation": "Accountant",
            "date_joined": "2024-01-15",
            "status": "Active",
            "gender": "Male",
            "salary": "10000",
            "bank_account": "1000123456789",
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def create_employee(
    client: TestClient,
    employee_payload: Callable[..., dict[str, Any]],
) -> Callable[..., dict[str, Any]]:
    """POST an employee and return the created ids."""

    def create(**overrides: Any) -> dict[str, Any]:
        response = client.post("/api/v1/employees", json=employee_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return create

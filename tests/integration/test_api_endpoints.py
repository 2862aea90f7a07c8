"""API endpoint integration tests.

Tests the FastAPI endpoints over a real SQLite database.
"""

from decimal import Decimal

from fastapi.testclient import TestClient

from hr_payroll.models import AuditLog, Employee, PayrollRecord, User


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_health_check(self, client: TestClient):
        """Health endpoint should report the database as reachable."""
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "reachable"
        assert data["version"] == "0.1.0"
        assert "checked_at" in data

    def test_readiness_check(self, client: TestClient):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_liveness_check(self, client: TestClient):
        response = client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestReferenceEndpoints:
    """Roles and departments."""

    def test_list_departments(self, client: TestClient):
        response = client.get("/api/v1/references/department")
        assert response.status_code == 200
        assert response.json() == {
            "kind": "department",
            "names": ["Engineering", "Finance", "Human Resources"],
        }

    def test_create_role(self, client: TestClient):
        response = client.post("/api/v1/references/role", json={"name": "Auditor"})
        assert response.status_code == 201
        assert response.json()["name"] == "Auditor"
        assert "Auditor" in client.get("/api/v1/references/role").json()["names"]

    def test_duplicate_role_conflicts(self, client: TestClient):
        response = client.post("/api/v1/references/role", json={"name": "admin"})
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE"

    def test_unknown_kind_is_rejected(self, client: TestClient):
        response = client.get("/api/v1/references/planet")
        assert response.status_code == 422


class TestEmployeeEndpoints:
    """Provisioning over HTTP."""

    def test_create_and_get(self, client: TestClient, create_employee):
        created = create_employee()

        response = client.get(f"/api/v1/employees/{created['employee_id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == created["user_id"]
        assert data["full_name"] == "Abebe Kebede"
        assert data["role"] == "Employee"
        assert Decimal(data["salary"]) == Decimal("10000")
        assert "password" not in data

    def test_validation_errors_are_listed(self, client: TestClient, employee_payload, row_count):
        response = client.post(
            "/api/v1/employees",
            json=employee_payload(phone="0812345678", email="bad", salary="0"),
        )

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert {e["field"] for e in body["errors"]} == {"phone", "email", "salary"}
        assert row_count(User) == 0

    def test_duplicate_username_conflicts(
        self, client: TestClient, create_employee, employee_payload, row_count
    ):
        create_employee()

        response = client.post(
            "/api/v1/employees", json=employee_payload(email="other@example.com")
        )

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE"
        assert row_count(User) == 1
        assert row_count(Employee) == 1

    def test_unknown_department(self, client: TestClient, employee_payload):
        response = client.post(
            "/api/v1/employees", json=employee_payload(department="Space Program")
        )
        assert response.status_code == 404
        assert response.json()["code"] == "REFERENCE_NOT_FOUND"

    def test_update(self, client: TestClient, create_employee, employee_payload):
        created = create_employee()
        body = employee_payload(designation="Controller", salary="15000")
        del body["password"]

        response = client.put(f"/api/v1/employees/{created['employee_id']}", json=body)

        assert response.status_code == 200
        assert response.json()["designation"] == "Controller"
        assert Decimal(response.json()["salary"]) == Decimal("15000")

    def test_terminate_then_delete(self, client: TestClient, create_employee, row_count):
        created = create_employee()

        response = client.post(f"/api/v1/employees/{created['employee_id']}/terminate")
        assert response.status_code == 200
        assert response.json()["status"] == "Inactive"

        response = client.delete(f"/api/v1/employees/{created['employee_id']}")
        assert response.status_code == 204
        assert row_count(Employee) == 0
        assert row_count(User) == 0

    def test_get_unknown_employee(self, client: TestClient):
        response = client.get("/api/v1/employees/999")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_actor_headers_reach_audit_log(self, client: TestClient, create_employee, seeded):
        create_employee()

        with seeded() as session:
            entry = session.query(AuditLog).filter_by(action="employee_created").one()
        assert entry.actor_user_id == 1
        assert entry.actor_username == "admin"

    def test_malformed_actor_id(self, client: TestClient, employee_payload):
        response = client.post(
            "/api/v1/employees",
            json=employee_payload(),
            headers={"X-Actor-Id": "not-a-number"},
        )
        assert response.status_code == 400


class TestSettingsEndpoints:
    """Tax configuration over HTTP."""

    def test_get_defaults(self, client: TestClient):
        data = client.get("/api/v1/settings").json()
        assert Decimal(data["tax_rate"]) == Decimal("10")
        assert Decimal(data["social_rate"]) == Decimal("7")
        assert data["currency_symbol"] == "$"

    def test_update(self, client: TestClient):
        response = client.put("/api/v1/settings", json={"tax_rate": "15.5"})
        assert response.status_code == 200
        assert Decimal(response.json()["tax_rate"]) == Decimal("15.5")
        assert Decimal(client.get("/api/v1/settings").json()["tax_rate"]) == Decimal("15.5")

    def test_out_of_range_rate(self, client: TestClient):
        response = client.put("/api/v1/settings", json={"tax_rate": "150"})
        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "tax_rate"


class TestPayrollEndpoints:
    """Generation, batches and periods over HTTP."""

    def test_generate_single_record(self, client: TestClient, create_employee):
        created = create_employee()

        response = client.post(
            "/api/v1/payroll/records",
            json={
                "employee_id": created["employee_id"],
                "month": "march",
                "year": 2025,
                "allowances": "500",
                "deductions": "100",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["month"] == "March"
        assert Decimal(data["tax"]) == Decimal("1050.00")
        assert Decimal(data["net_salary"]) == Decimal("9350.00")
        assert data["status"] == "Pending"

    def test_generate_twice_conflicts(self, client: TestClient, create_employee, row_count):
        created = create_employee()
        body = {"employee_id": created["employee_id"], "month": "March", "year": 2025}
        assert client.post("/api/v1/payroll/records", json=body).status_code == 201

        response = client.post("/api/v1/payroll/records", json=body)

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE"
        assert row_count(PayrollRecord) == 1

    def test_invalid_month(self, client: TestClient, create_employee):
        created = create_employee()
        response = client.post(
            "/api/v1/payroll/records",
            json={"employee_id": created["employee_id"], "month": "Smarch", "year": 2025},
        )
        assert response.status_code == 422

    def test_batch_then_lock_then_batch(self, client: TestClient, create_employee):
        create_employee()
        create_employee(username="second", email="second@example.com")
        batch = {"month": "March", "year": 2025, "allowances": "500", "deductions": "100"}

        first = client.post("/api/v1/payroll/batches", json=batch).json()
        assert first["success_count"] == 2
        assert first["failure_count"] == 0

        lock = client.post("/api/v1/payroll/periods/2025/March/lock")
        assert lock.status_code == 200
        assert lock.json() == {
            "month": "March",
            "year": 2025,
            "state": "Locked",
            "locked_records": 2,
        }

        second = client.post("/api/v1/payroll/batches", json=batch).json()
        assert second["success_count"] == 0
        assert {f["code"] for f in second["failures"]} == {"PERIOD_LOCKED"}

        relock = client.post("/api/v1/payroll/periods/2025/March/lock")
        assert relock.status_code == 409
        assert relock.json()["code"] == "PERIOD_LOCKED"

    def test_batch_for_selected_employees(self, client: TestClient, create_employee):
        first = create_employee()
        create_employee(username="second", email="second@example.com")

        response = client.post(
            "/api/v1/payroll/batches",
            json={"month": "March", "year": 2025, "employee_ids": [first["employee_id"], 999]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success_count"] == 1
        assert [(f["employee_id"], f["code"]) for f in data["failures"]] == [(999, "NOT_FOUND")]

    def test_period_view(self, client: TestClient, create_employee):
        create_employee()
        client.post(
            "/api/v1/payroll/batches",
            json={"month": "March", "year": 2025, "allowances": "500", "deductions": "100"},
        )

        response = client.get("/api/v1/payroll/periods/2025/march")

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "Generated"
        assert data["record_count"] == 1
        assert data["active_employee_count"] == 1
        assert Decimal(data["total_net"]) == Decimal("9350.00")
        assert len(data["records"]) == 1

    def test_period_view_filters(self, client: TestClient, create_employee):
        create_employee()
        create_employee(
            username="second", email="second@example.com", department="Engineering"
        )
        client.post("/api/v1/payroll/batches", json={"month": "March", "year": 2025})

        response = client.get(
            "/api/v1/payroll/periods/2025/March",
            params={"department": "Engineering", "status": "Pending"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["record_count"] == 2
        assert len(data["records"]) == 1

        unknown = client.get(
            "/api/v1/payroll/periods/2025/March", params={"department": "Space Program"}
        )
        assert unknown.status_code == 404
        assert unknown.json()["code"] == "REFERENCE_NOT_FOUND"

        bad_status = client.get("/api/v1/payroll/periods/2025/March", params={"status": "Paid"})
        assert bad_status.status_code == 422

    def test_process_then_history(self, client: TestClient, create_employee):
        created = create_employee()
        record = client.post(
            "/api/v1/payroll/records",
            json={"employee_id": created["employee_id"], "month": "March", "year": 2025},
        ).json()

        processed = client.post(f"/api/v1/payroll/records/{record['id']}/process")
        assert processed.status_code == 200
        assert processed.json()["status"] == "Processed"

        again = client.post(f"/api/v1/payroll/records/{record['id']}/process")
        assert again.status_code == 409
        assert again.json()["code"] == "INVALID_TRANSITION"

        history = client.get(f"/api/v1/payroll/employees/{created['employee_id']}/history")
        assert history.status_code == 200
        assert [r["id"] for r in history.json()] == [record["id"]]

    def test_delete_refused_with_payroll_history(self, client: TestClient, create_employee):
        created = create_employee()
        client.post(
            "/api/v1/payroll/records",
            json={"employee_id": created["employee_id"], "month": "March", "year": 2025},
        )

        response = client.delete(f"/api/v1/employees/{created['employee_id']}")

        assert response.status_code == 500
        assert response.json()["code"] == "TRANSACTION_FAILED"

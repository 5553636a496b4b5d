"""
Tests for the HTTP API

Exercises every resource endpoint against an in-memory SQLite database:
authentication, validation errors, owner scoping, filters, updates,
deletes, the salary uniqueness rule and the dashboard.
"""

import inspect
from unittest.mock import patch

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from bizfin.api.main import app
from bizfin.api.repository import DuplicateRecordError, RecordRepository
from bizfin.api.routes import expenses as expenses_routes
from bizfin.records.entities import SALARY


def _create(client: TestClient, path: str, payload: dict, headers: dict) -> dict:
    response = client.post(path, json=payload, headers=headers)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


# =============================================================================
# Authentication and Service Endpoints
# =============================================================================

class TestAuthentication:
    """Tests for identity resolution."""

    def test_missing_token_rejected(self, client):
        response = client.get("/api/expenses")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_unknown_token_rejected(self, client):
        response = client.get("/api/expenses", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_session_cookie_accepted(self, client):
        response = client.get("/api/expenses", headers={"Cookie": "session_token=alice-token"})

        assert response.status_code == 200
        assert response.json() == {"data": []}

    def test_development_mode_uses_dev_user(self, client, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        response = client.get("/api/profile")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == "dev"

    def test_unset_environment_requires_token(self, client, monkeypatch):
        """Test that anonymous access needs ENVIRONMENT=development set explicitly."""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        response = client.get("/api/profile")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_route_handlers_run_in_threadpool(self):
        """Test that handlers doing blocking database calls are plain functions."""
        api_routes = [
            route for route in app.routes
            if isinstance(route, APIRoute) and route.path.startswith("/api/")
        ]

        assert api_routes
        assert not [route.path for route in api_routes if inspect.iscoroutinefunction(route.endpoint)]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
        assert "expenses" in client.get("/api").json()["endpoints"]


# =============================================================================
# Expenses
# =============================================================================

class TestExpenses:
    """Tests for /api/expenses."""

    def test_create_expense(self, client, alice, sample_expense):
        response = client.post("/api/expenses", json=sample_expense, headers=alice)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"]
        assert data["user_id"] == "user-alice"
        assert data["category"] == "utilities"
        assert data["amount"] == 2500.0
        assert data["date"] == "2024-03-15"
        assert data["created_at"]
        assert data["updated_at"]

    def test_create_validation_lists_every_error(self, client, alice):
        response = client.post("/api/expenses", json={"amount": "-1"}, headers=alice)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert body["details"] == [
            {"field": "category", "message": "Category is required"},
            {"field": "date", "message": "Date is required"},
            {"field": "amount", "message": "Amount must be at least 0.01"},
        ]

    def test_non_object_body_rejected(self, client, alice):
        response = client.post("/api/expenses", json=[1, 2], headers=alice)

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "body"

    def test_empty_notes_stored_as_null(self, client, alice, sample_expense):
        data = _create(client, "/api/expenses", {**sample_expense, "notes": ""}, alice)

        assert data["notes"] is None

    def test_list_scoped_to_caller(self, client, alice, bob, sample_expense):
        _create(client, "/api/expenses", sample_expense, alice)
        _create(client, "/api/expenses", {**sample_expense, "notes": "Bob's"}, bob)

        alice_rows = client.get("/api/expenses", headers=alice).json()["data"]
        bob_rows = client.get("/api/expenses", headers=bob).json()["data"]

        assert [row["user_id"] for row in alice_rows] == ["user-alice"]
        assert [row["notes"] for row in bob_rows] == ["Bob's"]

    def test_filter_by_category(self, client, alice, bob, sample_expense):
        _create(client, "/api/expenses", sample_expense, alice)
        _create(client, "/api/expenses", {**sample_expense, "category": "rent"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "category": "rent"}, bob)

        rows = client.get("/api/expenses", params={"category": "rent"}, headers=alice).json()["data"]

        assert len(rows) == 1
        assert rows[0]["category"] == "rent"
        assert rows[0]["user_id"] == "user-alice"

    def test_month_bucket_filter(self, client, alice, sample_expense):
        _create(client, "/api/expenses", {**sample_expense, "date": "2024-03-31"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "date": "2024-04-01"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "date": "2024-03-01"}, alice)

        rows = client.get("/api/expenses", params={"date": "2024-03"}, headers=alice).json()["data"]

        assert [row["date"] for row in rows] == ["2024-03-31", "2024-03-01"]

    def test_search_is_case_insensitive(self, client, alice, sample_expense):
        _create(client, "/api/expenses", {**sample_expense, "notes": "Meralco BILL"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "notes": "Water"}, alice)

        rows = client.get("/api/expenses", params={"search": "meralco"}, headers=alice).json()["data"]

        assert [row["notes"] for row in rows] == ["Meralco BILL"]

    def test_search_wildcards_match_literally(self, client, alice, sample_expense):
        _create(client, "/api/expenses", {**sample_expense, "notes": "50% deposit"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "notes": "500 deposit"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "notes": "late_fee"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "notes": "late-fee"}, alice)

        percent = client.get("/api/expenses", params={"search": "50%"}, headers=alice).json()["data"]
        underscore = client.get("/api/expenses", params={"search": "e_f"}, headers=alice).json()["data"]

        assert [row["notes"] for row in percent] == ["50% deposit"]
        assert [row["notes"] for row in underscore] == ["late_fee"]

    def test_oversized_amount_rejected(self, client, alice, sample_expense):
        """Test that an amount beyond storage precision never reaches the table."""
        response = client.post("/api/expenses", json={**sample_expense, "amount": "1e400"}, headers=alice)

        assert response.status_code == 400
        assert response.json()["details"] == [
            {"field": "amount", "message": "Amount must be at most 999999999999.99"}
        ]
        assert client.get("/api/expenses", headers=alice).json()["data"] == []
        assert client.get("/api/dashboard", headers=alice).json()["data"]["stats"]["total_expenses"] == 0.0

    def test_amount_totals_keep_cents(self, client, alice, sample_expense):
        _create(client, "/api/expenses", {**sample_expense, "amount": "0.10"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "amount": "0.20"}, alice)
        _create(client, "/api/expenses", {**sample_expense, "amount": "999999999999.99"}, alice)

        stats = client.get("/api/dashboard", headers=alice).json()["data"]["stats"]

        assert stats["total_expenses"] == 1000000000000.29

    def test_non_text_field_rejected(self, client, alice):
        response = client.post(
            "/api/cashflow",
            json={"type": "inflow", "category": {"x": 1}, "amount": 100, "date": "2024-03-10"},
            headers=alice,
        )

        assert response.status_code == 400
        assert response.json()["details"] == [{"field": "category", "message": "Category must be text"}]
        assert client.get("/api/cashflow", headers=alice).json()["data"] == []

    def test_no_match_is_empty_list(self, client, alice):
        response = client.get("/api/expenses", params={"category": "travel"}, headers=alice)

        assert response.status_code == 200
        assert response.json() == {"data": []}

    def test_update_expense(self, client, alice, sample_expense):
        created = _create(client, "/api/expenses", sample_expense, alice)

        response = client.put(
            f"/api/expenses/{created['id']}",
            json={**sample_expense, "amount": 3000, "notes": ""},
            headers=alice,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["amount"] == 3000.0
        assert data["notes"] is None
        assert data["created_at"] == created["created_at"]

    def test_update_other_users_record_is_not_found(self, client, alice, bob, sample_expense):
        created = _create(client, "/api/expenses", sample_expense, alice)

        response = client.put(
            f"/api/expenses/{created['id']}",
            json={**sample_expense, "amount": 1},
            headers=bob,
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Expense not found"}
        rows = client.get("/api/expenses", headers=alice).json()["data"]
        assert rows[0]["amount"] == 2500.0

    def test_update_validates(self, client, alice, sample_expense):
        created = _create(client, "/api/expenses", sample_expense, alice)

        response = client.put(f"/api/expenses/{created['id']}", json={"amount": "x"}, headers=alice)

        assert response.status_code == 400

    def test_delete_expense(self, client, alice, sample_expense):
        created = _create(client, "/api/expenses", sample_expense, alice)

        response = client.delete(f"/api/expenses/{created['id']}", headers=alice)

        assert response.json() == {"success": True}
        assert client.get("/api/expenses", headers=alice).json()["data"] == []

    def test_delete_nonexistent_succeeds(self, client, alice):
        response = client.delete("/api/expenses/does-not-exist", headers=alice)

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_delete_other_users_record_leaves_it(self, client, alice, bob, sample_expense):
        created = _create(client, "/api/expenses", sample_expense, alice)

        assert client.delete(f"/api/expenses/{created['id']}", headers=bob).status_code == 200
        assert len(client.get("/api/expenses", headers=alice).json()["data"]) == 1

    def test_backend_failure_is_generic_500(self, db_engine, auth_registry, alice):
        client = TestClient(app, raise_server_exceptions=False)

        with patch.object(
            expenses_routes.repository,
            "_execute",
            side_effect=RuntimeError("connection reset"),
        ):
            response = client.get("/api/expenses", headers=alice)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


# =============================================================================
# Liabilities, Cashflow, PDC, Capital
# =============================================================================

class TestOtherResources:
    """Tests for the remaining simple resources."""

    def test_liability_lifecycle(self, client, alice, sample_liability):
        created = _create(client, "/api/liabilities", sample_liability, alice)
        assert created["interest_rate"] == 7.5
        assert created["notes"] is None

        _create(client, "/api/liabilities", {**sample_liability, "type": "credit_card", "name": "Visa"}, alice)

        loans = client.get("/api/liabilities", params={"type": "loan"}, headers=alice).json()["data"]
        assert [row["name"] for row in loans] == ["Equipment loan"]

        found = client.get("/api/liabilities", params={"search": "visa"}, headers=alice).json()["data"]
        assert [row["type"] for row in found] == ["credit_card"]

        response = client.put(
            f"/api/liabilities/{created['id']}",
            json={**sample_liability, "outstanding_amount": 0, "interest_rate": ""},
            headers=alice,
        )
        assert response.status_code == 200
        assert response.json()["data"]["outstanding_amount"] == 0
        assert response.json()["data"]["interest_rate"] is None

    def test_liability_interest_rate_out_of_range(self, client, alice, sample_liability):
        response = client.post(
            "/api/liabilities",
            json={**sample_liability, "interest_rate": 150},
            headers=alice,
        )

        assert response.status_code == 400
        assert response.json()["details"] == [
            {"field": "interest_rate", "message": "Interest Rate must be at most 100"}
        ]

    def test_cashflow_filters(self, client, alice):
        base = {"category": "Sales", "amount": 100, "date": "2024-03-10"}
        _create(client, "/api/cashflow", {**base, "type": "inflow", "description": "Shop sales"}, alice)
        _create(client, "/api/cashflow", {**base, "type": "outflow", "category": "Supplies"}, alice)
        _create(client, "/api/cashflow", {**base, "type": "inflow", "date": "2024-04-02"}, alice)

        inflows = client.get(
            "/api/cashflow",
            params={"type": "inflow", "date": "2024-03"},
            headers=alice,
        ).json()["data"]
        assert [row["description"] for row in inflows] == ["Shop sales"]

        supplies = client.get("/api/cashflow", params={"category": "Supplies"}, headers=alice).json()["data"]
        assert [row["type"] for row in supplies] == ["outflow"]

    def test_cashflow_type_must_be_direction(self, client, alice):
        response = client.post(
            "/api/cashflow",
            json={"type": "sideways", "category": "Sales", "amount": 100, "date": "2024-03-10"},
            headers=alice,
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "type"

    def test_pdc_ordered_by_due_date(self, client, alice, sample_pdc):
        _create(client, "/api/pdc", {**sample_pdc, "cheque_number": "2", "due_date": "2024-06-01"}, alice)
        first = _create(client, "/api/pdc", {**sample_pdc, "cheque_number": "1"}, alice)

        assert first["status"] == "pending"

        rows = client.get("/api/pdc", headers=alice).json()["data"]
        assert [row["cheque_number"] for row in rows] == ["1", "2"]

    def test_pdc_filters(self, client, alice, sample_pdc):
        _create(client, "/api/pdc", sample_pdc, alice)
        _create(client, "/api/pdc", {**sample_pdc, "bank_name": "BPI", "status": "cleared"}, alice)

        cleared = client.get("/api/pdc", params={"status": "cleared"}, headers=alice).json()["data"]
        bdo = client.get("/api/pdc", params={"bank_name": "BDO"}, headers=alice).json()["data"]
        landlord = client.get("/api/pdc", params={"search": "landlord"}, headers=alice).json()["data"]

        assert [row["bank_name"] for row in cleared] == ["BPI"]
        assert [row["status"] for row in bdo] == ["pending"]
        assert len(landlord) == 2

    def test_capital_injection_lifecycle(self, client, alice):
        created = _create(
            client,
            "/api/capital",
            {"type": "equity", "amount": 50000, "date": "2024-01-05", "source": "Founder"},
            alice,
        )
        _create(client, "/api/capital", {"type": "grant", "amount": 10000, "date": "2024-02-01"}, alice)

        founder = client.get("/api/capital", params={"source": "Founder"}, headers=alice).json()["data"]
        january = client.get("/api/capital", params={"date": "2024-01"}, headers=alice).json()["data"]

        assert [row["id"] for row in founder] == [created["id"]]
        assert [row["type"] for row in january] == ["equity"]

        missing = client.put(
            "/api/capital/unknown",
            json={"type": "equity", "amount": 1, "date": "2024-01-05"},
            headers=alice,
        )
        assert missing.status_code == 404
        assert missing.json() == {"error": "Capital injection record not found"}


# =============================================================================
# Employees and Salaries
# =============================================================================

class TestEmployees:
    """Tests for /api/employees."""

    def test_employee_defaults_active(self, client, alice, sample_employee):
        created = _create(client, "/api/employees", sample_employee, alice)

        assert created["is_active"] is True
        assert created["position"] == "Bookkeeper"

    def test_delete_deactivates(self, client, alice, sample_employee):
        created = _create(client, "/api/employees", sample_employee, alice)
        _create(client, "/api/employees", {**sample_employee, "name": "Ana Lim"}, alice)

        assert client.delete(f"/api/employees/{created['id']}", headers=alice).json() == {"success": True}

        everyone = client.get("/api/employees", headers=alice).json()["data"]
        active = client.get("/api/employees", params={"active": "true"}, headers=alice).json()["data"]
        inactive = client.get("/api/employees", params={"active": "false"}, headers=alice).json()["data"]

        assert [row["name"] for row in everyone] == ["Ana Lim", "Maria Cruz"]
        assert [row["name"] for row in active] == ["Ana Lim"]
        assert [row["name"] for row in inactive] == ["Maria Cruz"]

    def test_invalid_active_filter(self, client, alice):
        response = client.get("/api/employees", params={"active": "sometimes"}, headers=alice)

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "active"


class TestSalaries:
    """Tests for /api/salaries."""

    @pytest.fixture
    def employee(self, client, alice, sample_employee) -> dict:
        return _create(client, "/api/employees", sample_employee, alice)

    def _payload(self, employee: dict, **overrides) -> dict:
        return {"employee_id": employee["id"], "month": 3, "year": 2024, "amount": 25000, **overrides}

    def test_create_includes_employee(self, client, alice, employee):
        created = _create(client, "/api/salaries", self._payload(employee), alice)

        assert created["status"] == "unpaid"
        assert created["employees"] == {"name": "Maria Cruz", "position": "Bookkeeper"}

    def test_duplicate_period_conflicts(self, client, alice, employee):
        _create(client, "/api/salaries", self._payload(employee), alice)

        response = client.post("/api/salaries", json=self._payload(employee, amount=1), headers=alice)

        assert response.status_code == 409
        assert "already exists" in response.json()["error"]
        assert len(client.get("/api/salaries", headers=alice).json()["data"]) == 1

    def test_unique_constraint_backs_the_check(self, db_engine, employee):
        """Test that the table itself refuses a second record for the period."""
        repository = RecordRepository(SALARY)
        values = {
            "employee_id": employee["id"],
            "month": 3,
            "year": 2024,
            "amount": 100,
            "status": "unpaid",
            "paid_date": None,
            "notes": None,
        }
        repository.create("user-alice", values)

        with pytest.raises(DuplicateRecordError):
            repository.create("user-alice", values)

    def test_unknown_employee_rejected(self, client, alice, bob, employee):
        response = client.post("/api/salaries", json=self._payload(employee), headers=bob)

        assert response.status_code == 400
        assert response.json()["details"] == [{"field": "employee_id", "message": "Employee not found"}]

    def test_filters_and_ordering(self, client, alice, employee):
        _create(client, "/api/salaries", self._payload(employee, month=1), alice)
        _create(client, "/api/salaries", self._payload(employee, month=2, status="paid"), alice)
        _create(client, "/api/salaries", self._payload(employee, month=12, year=2023), alice)

        rows = client.get("/api/salaries", headers=alice).json()["data"]
        paid = client.get("/api/salaries", params={"status": "paid"}, headers=alice).json()["data"]
        in_2023 = client.get("/api/salaries", params={"year": 2023}, headers=alice).json()["data"]
        by_employee = client.get(
            "/api/salaries",
            params={"employee_id": employee["id"], "month": 1},
            headers=alice,
        ).json()["data"]

        assert [(row["year"], row["month"]) for row in rows] == [(2024, 2), (2024, 1), (2023, 12)]
        assert [row["month"] for row in paid] == [2]
        assert [row["month"] for row in in_2023] == [12]
        assert len(by_employee) == 1

    def test_non_numeric_month_filter_rejected(self, client, alice):
        response = client.get("/api/salaries", params={"month": "march"}, headers=alice)

        assert response.status_code == 400

    def test_update_salary(self, client, alice, employee):
        created = _create(client, "/api/salaries", self._payload(employee), alice)

        response = client.put(
            f"/api/salaries/{created['id']}",
            json={"month": 3, "year": 2024, "amount": 26000, "status": "paid", "paid_date": "2024-03-31"},
            headers=alice,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "paid"
        assert data["paid_date"] == "2024-03-31"
        assert data["employee_id"] == employee["id"]

    def test_update_into_taken_period_conflicts(self, client, alice, employee):
        _create(client, "/api/salaries", self._payload(employee, month=1), alice)
        second = _create(client, "/api/salaries", self._payload(employee, month=2), alice)

        response = client.put(
            f"/api/salaries/{second['id']}",
            json={"month": 1, "year": 2024, "amount": 25000},
            headers=alice,
        )

        assert response.status_code == 409


# =============================================================================
# Dashboard and Profile
# =============================================================================

class TestDashboard:
    """Tests for /api/dashboard."""

    def test_totals(self, client, alice, bob, sample_expense, sample_liability, sample_pdc, sample_employee):
        _create(client, "/api/expenses", sample_expense, alice)
        _create(client, "/api/expenses", {**sample_expense, "amount": 500}, alice)
        _create(client, "/api/expenses", {**sample_expense, "amount": 999}, bob)
        _create(client, "/api/liabilities", sample_liability, alice)

        for cf_type, amount in (("inflow", 100), ("inflow", 50), ("outflow", 30)):
            _create(
                client,
                "/api/cashflow",
                {"type": cf_type, "category": "Sales", "amount": amount, "date": "2024-03-01"},
                alice,
            )

        _create(client, "/api/pdc", sample_pdc, alice)
        _create(client, "/api/pdc", {**sample_pdc, "status": "cleared", "amount": 7000}, alice)
        _create(client, "/api/capital", {"type": "loan", "amount": 20000, "date": "2024-01-01"}, alice)

        employee = _create(client, "/api/employees", sample_employee, alice)
        _create(
            client,
            "/api/salaries",
            {"employee_id": employee["id"], "month": 3, "year": 2024, "amount": 25000},
            alice,
        )

        response = client.get("/api/dashboard", headers=alice)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["stats"] == {
            "total_expenses": 3000.0,
            "total_liabilities": 90000.0,
            "total_salaries": 25000.0,
            "total_cashflow": 120.0,
            "pending_pdc": 12000.0,
            "capital_injected": 20000.0,
        }
        assert len(data["recent_expenses"]) == 2
        assert data["recent_salaries"][0]["employees"]["name"] == "Maria Cruz"

    def test_recent_lists_capped(self, client, alice, sample_expense):
        for day in range(1, 8):
            _create(client, "/api/expenses", {**sample_expense, "date": f"2024-03-0{day}"}, alice)

        data = client.get("/api/dashboard", headers=alice).json()["data"]

        assert len(data["recent_expenses"]) == 5

    def test_empty_dashboard(self, client, bob):
        stats = client.get("/api/dashboard", headers=bob).json()["data"]["stats"]

        assert set(stats.values()) == {0.0}


class TestProfile:
    """Tests for /api/profile."""

    def test_profile_defaults_to_identity(self, client, alice):
        data = client.get("/api/profile", headers=alice).json()["data"]

        assert data == {
            "id": "user-alice",
            "email": "alice@example.com",
            "full_name": "Alice Santos",
            "company_name": "Santos Trading",
        }

    def test_update_profile(self, client, alice):
        first = client.put("/api/profile", json={"full_name": "Alice S.", "company_name": ""}, headers=alice)
        second = client.put("/api/profile", json={"full_name": "Alice", "company_name": "AS Co"}, headers=alice)

        assert first.json()["data"]["company_name"] is None
        assert second.json()["data"] == {
            "id": "user-alice",
            "email": "alice@example.com",
            "full_name": "Alice",
            "company_name": "AS Co",
        }
        assert client.get("/api/profile", headers=alice).json()["data"]["full_name"] == "Alice"

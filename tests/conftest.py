"""
Pytest configuration and fixtures for the finance tracker tests.
"""

import os
from pathlib import Path
from typing import Generator

import pytest

# Set before the app is imported so startup never touches a real database
os.environ.setdefault("DB_CREATE_TABLES", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import Engine  # noqa: E402

from bizfin.api import auth, database  # noqa: E402
from bizfin.api.main import app  # noqa: E402

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

USERS_YAML = """
users:
  - id: "user-alice"
    email: "alice@example.com"
    full_name: "Alice Santos"
    company_name: "Santos Trading"
    token: "alice-token"
  - id: "user-bob"
    email: "bob@example.com"
    full_name: "Bob Reyes"
    token: "bob-token"
"""


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


# Environment setup for tests
@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Run every test outside development mode (no anonymous dev user)."""
    monkeypatch.setenv("ENVIRONMENT", "testing")
    yield


@pytest.fixture
def users_file(tmp_path: Path) -> Path:
    """Write a two-user identity registry."""
    path = tmp_path / "users.yaml"
    path.write_text(USERS_YAML)
    return path


@pytest.fixture
def auth_registry(users_file: Path, monkeypatch) -> auth.AuthConfig:
    """Install the test registry as the global auth config."""
    config = auth.AuthConfig(users_file)
    monkeypatch.setattr(auth, "auth_config", config)
    return config


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """Fresh in-memory SQLite database with all tables."""
    engine = database.init_engine("sqlite://")
    database.metadata.create_all(engine)
    yield engine
    database.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(db_engine: Engine, auth_registry: auth.AuthConfig) -> TestClient:
    """API client backed by the in-memory database."""
    return TestClient(app)


@pytest.fixture
def alice() -> dict:
    """Request headers for the first test user."""
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def bob() -> dict:
    """Request headers for the second test user."""
    return {"Authorization": "Bearer bob-token"}


@pytest.fixture
def sample_expense() -> dict:
    """Return a valid expense payload."""
    return {
        "category": "utilities",
        "amount": "2500.00",
        "date": "2024-03-15",
        "notes": "Electricity bill",
    }


@pytest.fixture
def sample_liability() -> dict:
    """Return a valid liability payload."""
    return {
        "type": "loan",
        "name": "Equipment loan",
        "amount": 150000,
        "outstanding_amount": 90000,
        "due_date": "2025-06-30",
        "interest_rate": "7.5",
        "notes": "",
    }


@pytest.fixture
def sample_employee() -> dict:
    """Return a valid employee payload."""
    return {
        "name": "Maria Cruz",
        "position": "Bookkeeper",
        "monthly_salary": 25000,
        "hire_date": "2023-01-09",
    }


@pytest.fixture
def sample_pdc() -> dict:
    """Return a valid post-dated cheque payload."""
    return {
        "cheque_number": "000123",
        "bank_name": "BDO",
        "amount": 12000,
        "issue_date": "2024-03-01",
        "due_date": "2024-04-01",
        "payee": "Office Landlord",
        "purpose": "April rent",
    }

"""
Database Connection Module

Provides database connection, session management and table definitions.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from decimal import Decimal
from typing import Generator

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Engine,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    text,
)
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Database URL from environment
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{os.getenv('POSTGRES_USER', 'bizfin')}:"
    f"{os.getenv('POSTGRES_PASSWORD', 'password')}@"
    f"{os.getenv('POSTGRES_HOST', 'localhost')}:"
    f"{os.getenv('POSTGRES_PORT', '5432')}/"
    f"{os.getenv('POSTGRES_DB', 'bizfin')}"
)

metadata = MetaData()


def _timestamps() -> list[Column]:
    return [
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
    ]


profiles = Table(
    "profiles",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("email", String(255)),
    Column("full_name", String(255)),
    Column("company_name", String(255)),
    *_timestamps(),
)

expenses = Table(
    "expenses",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("category", String(32), nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("date", Date, nullable=False),
    Column("notes", Text),
    *_timestamps(),
)

liabilities = Table(
    "liabilities",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("type", String(32), nullable=False),
    Column("name", String(255), nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("outstanding_amount", Numeric(14, 2), nullable=False),
    Column("due_date", Date),
    Column("interest_rate", Numeric(5, 2)),
    Column("notes", Text),
    *_timestamps(),
)

employees = Table(
    "employees",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("position", String(255)),
    Column("monthly_salary", Numeric(14, 2), nullable=False),
    Column("hire_date", Date),
    Column("is_active", Boolean, nullable=False, default=True),
    *_timestamps(),
)

salaries = Table(
    "salaries",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("employee_id", String(36), ForeignKey("employees.id"), nullable=False),
    Column("month", Integer, nullable=False),
    Column("year", Integer, nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("status", String(16), nullable=False),
    Column("paid_date", Date),
    Column("notes", Text),
    *_timestamps(),
    UniqueConstraint("user_id", "employee_id", "month", "year", name="uq_salaries_employee_period"),
)

cashflow = Table(
    "cashflow",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("type", String(16), nullable=False),
    Column("category", String(255), nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("date", Date, nullable=False),
    Column("description", Text),
    Column("reference_id", String(64)),
    Column("reference_type", String(64)),
    *_timestamps(),
)

bank_pdc = Table(
    "bank_pdc",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("cheque_number", String(64), nullable=False),
    Column("bank_name", String(255), nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("issue_date", Date, nullable=False),
    Column("due_date", Date, nullable=False),
    Column("status", String(16), nullable=False),
    Column("payee", String(255)),
    Column("purpose", Text),
    Column("notes", Text),
    *_timestamps(),
)

capital_injections = Table(
    "capital_injections",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("type", String(16), nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("date", Date, nullable=False),
    Column("source", String(255)),
    Column("description", Text),
    Column("notes", Text),
    *_timestamps(),
)

# Session factory, bound when the engine is created
SessionLocal = sessionmaker(autocommit=False, autoflush=False)

_engine: Engine | None = None


def create_db_engine(url: str) -> Engine:
    """Create an engine for the given URL.

    SQLite (used by tests and local runs) gets a single shared connection so
    an in-memory database survives across sessions, and stores Decimal
    parameters from their exact text form.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine
    """
    if url.startswith("sqlite"):
        sqlite3.register_adapter(Decimal, str)
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def init_engine(url: str | None = None) -> Engine:
    """Create the engine and bind the session factory to it."""
    global _engine

    _engine = create_db_engine(url or DATABASE_URL)
    SessionLocal.configure(bind=_engine)
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        init_engine()
    return _engine


def init_db() -> None:
    """Create any missing tables."""
    engine = get_engine()
    metadata.create_all(engine)
    logger.info(f"Database tables ready on {engine.url.render_as_string(hide_password=True)}")


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Get database session as context manager.

    Yields:
        Database session
    """
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def execute_query(query: str, params: dict | None = None) -> list[dict]:
    """Execute raw SQL query and return results as dictionaries.

    Every statement is committed, including INSERT/UPDATE ... RETURNING.

    Args:
        query: SQL query string
        params: Query parameters

    Returns:
        List of result dictionaries (empty for statements without rows)
    """
    with get_db_context() as db:
        result = db.execute(text(query), params or {})

        rows = []
        if result.returns_rows:
            columns = list(result.keys())
            rows = [dict(zip(columns, row)) for row in result.fetchall()]

        db.commit()
        return rows


def execute_insert(
    table: str,
    data: dict,
    returning: str = "id",
) -> dict | None:
    """Execute INSERT and return the inserted row.

    Args:
        table: Table name
        data: Column-value dictionary
        returning: Column to return (default: id)

    Returns:
        Inserted row or None
    """
    columns = ", ".join(data.keys())
    placeholders = ", ".join(f":{k}" for k in data.keys())
    query = f"INSERT INTO {table} ({columns}) VALUES ({placeholders}) RETURNING {returning}"

    results = execute_query(query, data)
    return results[0] if results else None

"""
Record Repository Module

Owner-scoped create, read, update and delete on top of execute_query.
Every method takes the owning user's id; nothing here can reach another
user's rows.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from ..records.entities import EntitySpec
from ..records.query_builder import ListQuery
from .database import execute_query

logger = logging.getLogger(__name__)


class DuplicateRecordError(Exception):
    """Raised when a write violates a uniqueness constraint."""

    def __init__(self, table: str, message: str | None = None):
        self.table = table
        super().__init__(message or f"Duplicate record in {table}")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


class RecordRepository:
    """Data access for one entity table."""

    def __init__(
        self,
        spec: EntitySpec,
        query: Callable[[str, dict | None], list[dict]] = execute_query,
    ):
        """Initialize the repository.

        Args:
            spec: Entity definition
            query: Query executor (execute_query by default)
        """
        self.spec = spec
        self._execute = query

    def _shape_row(self, row: dict) -> dict:
        """Fold joined 'key__column' values into a nested object."""
        related = self.spec.related
        if related is None:
            return row

        shaped = {}
        nested: dict[str, Any] = {}
        prefix = f"{related.key}__"

        for key, value in row.items():
            if key.startswith(prefix):
                nested[key[len(prefix):]] = value
            else:
                shaped[key] = value

        if nested:
            has_match = any(value is not None for value in nested.values())
            shaped[related.key] = nested if has_match else None

        return shaped

    def query(self, user_id: str, **kwargs: Any) -> ListQuery:
        """Start a list query scoped to the user."""
        return ListQuery(self.spec, user_id, **kwargs)

    def fetch(self, query: ListQuery) -> list[dict]:
        sql, params = query.build()
        return [self._shape_row(row) for row in self._execute(sql, params)]

    def get(self, user_id: str, record_id: str) -> dict | None:
        rows = self.fetch(self.query(user_id).where_equals("id", record_id))
        return rows[0] if rows else None

    def exists(self, user_id: str, **columns: Any) -> bool:
        """Check whether the user has a record matching all given columns."""
        query = self.query(user_id, columns=("id",), include_related=False)
        for column, value in columns.items():
            query.where_equals(column, value)
        return bool(self.fetch(query.limit_to(1)))

    def create(self, user_id: str, values: dict[str, Any]) -> dict:
        """Insert a record owned by the user.

        Args:
            user_id: Owning identity
            values: Column values from normalize_payload

        Returns:
            The stored record with id and timestamps

        Raises:
            DuplicateRecordError: If a uniqueness constraint is violated
        """
        now = _utcnow()
        data = {
            "id": str(uuid4()),
            "user_id": user_id,
            **values,
            "created_at": now,
            "updated_at": now,
        }

        columns = ", ".join(data.keys())
        placeholders = ", ".join(f":{k}" for k in data.keys())
        sql = f"INSERT INTO {self.spec.table} ({columns}) VALUES ({placeholders}) RETURNING id"

        try:
            result = self._execute(sql, data)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateRecordError(self.spec.table) from exc
            raise

        record_id = result[0]["id"] if result else data["id"]
        logger.info(f"Created {self.spec.name} {record_id} for user {user_id}")
        return self.get(user_id, record_id)

    def update(self, user_id: str, record_id: str, values: dict[str, Any]) -> dict | None:
        """Replace a record's writable columns.

        Matches on both id and owner, so another user's record is never
        touched.

        Returns:
            The updated record, or None when no row matched

        Raises:
            DuplicateRecordError: If a uniqueness constraint is violated
        """
        params = dict(values)
        assignments = [f"{column} = :{column}" for column in params]
        assignments.append("updated_at = :updated_at")
        params.update({"updated_at": _utcnow(), "record_id": record_id, "owner_id": user_id})

        sql = (
            f"UPDATE {self.spec.table} SET {', '.join(assignments)}"
            " WHERE id = :record_id AND user_id = :owner_id RETURNING id"
        )

        try:
            result = self._execute(sql, params)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateRecordError(self.spec.table) from exc
            raise

        if not result:
            return None

        return self.get(user_id, record_id)

    def delete(self, user_id: str, record_id: str) -> None:
        """Delete a record. Succeeds whether or not anything matched."""
        sql = f"DELETE FROM {self.spec.table} WHERE id = :record_id AND user_id = :owner_id"
        self._execute(sql, {"record_id": record_id, "owner_id": user_id})
        logger.info(f"Deleted {self.spec.name} {record_id} for user {user_id}")

    def deactivate(self, user_id: str, record_id: str, flag: str = "is_active") -> None:
        """Soft delete by clearing a flag column."""
        if flag not in self.spec.booleans:
            raise ValueError(f"{self.spec.table} has no flag column {flag}")

        sql = (
            f"UPDATE {self.spec.table} SET {flag} = :flag, updated_at = :updated_at"
            " WHERE id = :record_id AND user_id = :owner_id"
        )
        self._execute(sql, {
            "flag": False,
            "updated_at": _utcnow(),
            "record_id": record_id,
            "owner_id": user_id,
        })
        logger.info(f"Deactivated {self.spec.name} {record_id} for user {user_id}")

"""
List Query Builder Module

Composes owner-scoped SELECT statements from optional filter parameters.
Every query starts from the owning user's records; filters only narrow it.
"""

import logging
from typing import Any

from .entities import EntitySpec

logger = logging.getLogger(__name__)


def month_bounds(month: str) -> tuple[str, str]:
    """Return the (inclusive, exclusive) text bounds for a YYYY-MM bucket.

    The upper bound is the synthetic day 32 of the month, compared as text
    against the ISO date, so it admits every real day of the month and
    nothing from the next one.

    Args:
        month: Month bucket in YYYY-MM form

    Returns:
        Tuple of (YYYY-MM-01, YYYY-MM-32)
    """
    month = month.strip()
    return f"{month}-01", f"{month}-32"


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so the text matches literally (ESCAPE '\\')."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ListQuery:
    """Builds a scoped, ordered SELECT for one entity.

    Usage:
        query = ListQuery(EXPENSE, user.id).where_equals("category", "rent")
        sql, params = query.build()
    """

    def __init__(
        self,
        spec: EntitySpec,
        user_id: str,
        columns: tuple[str, ...] | None = None,
        include_related: bool = True,
    ):
        """Initialize the query.

        Args:
            spec: Entity definition
            user_id: Owning identity; every result belongs to it
            columns: Columns to select (all columns when None)
            include_related: Join the entity's related table, if it has one
        """
        if not user_id:
            raise ValueError("user_id is required to scope a query")

        self.spec = spec
        self.alias = spec.alias
        self.columns = columns
        self.include_related = include_related and spec.related is not None
        self.conditions: list[str] = [f"{self.alias}.user_id = :user_id"]
        self.params: dict[str, Any] = {"user_id": user_id}
        self.ordering: list[tuple[str, str]] = list(spec.ordering)
        self.limit: int | None = None

    def _column(self, column: str) -> str:
        if column not in self.spec.filterable_columns and column != "user_id":
            raise ValueError(f"Unknown column for {self.spec.table}: {column}")
        return f"{self.alias}.{column}"

    def _param(self, name: str) -> str:
        key = name
        suffix = 1
        while key in self.params:
            suffix += 1
            key = f"{name}_{suffix}"
        return key

    def where_equals(self, column: str, value: Any) -> "ListQuery":
        """Exact match. Skipped when the value is None or an empty string."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return self

        key = self._param(column)
        self.conditions.append(f"{self._column(column)} = :{key}")
        self.params[key] = value
        return self

    def where_month(self, column: str, month: str | None) -> "ListQuery":
        """Restrict a date column to one YYYY-MM bucket."""
        if not month or not month.strip():
            return self

        start, end = month_bounds(month)
        start_key = self._param(f"{column}_from")
        self.params[start_key] = start
        end_key = self._param(f"{column}_to")
        self.params[end_key] = end

        target = f"CAST({self._column(column)} AS TEXT)"
        self.conditions.append(f"{target} >= :{start_key}")
        self.conditions.append(f"{target} < :{end_key}")
        return self

    def where_search(self, text: str | None) -> "ListQuery":
        """Case-insensitive substring match OR-ed across the search columns."""
        if not text or not text.strip() or not self.spec.search_columns:
            return self

        key = self._param("search")
        self.params[key] = f"%{escape_like(text.strip().lower())}%"

        clauses = [
            f"LOWER(COALESCE({self._column(column)}, '')) LIKE :{key} ESCAPE '\\'"
            for column in self.spec.search_columns
        ]
        self.conditions.append("(" + " OR ".join(clauses) + ")")
        return self

    def order_by(self, column: str, direction: str = "ASC") -> "ListQuery":
        """Replace the entity's default ordering."""
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise ValueError(f"Invalid sort direction: {direction}")

        self._column(column)
        self.ordering = [(column, direction)]
        return self

    def limit_to(self, limit: int) -> "ListQuery":
        self.limit = limit
        return self

    def _select_list(self) -> str:
        if self.columns:
            selected = [self._column(column) for column in self.columns]
        else:
            selected = [f"{self.alias}.*"]

        if self.include_related:
            related = self.spec.related
            selected.extend(
                f"{related.alias}.{column} AS {related.key}__{column}"
                for column in related.columns
            )

        return ", ".join(selected)

    def _from_clause(self) -> str:
        clause = f"{self.spec.table} {self.alias}"

        if self.include_related:
            related = self.spec.related
            clause += (
                f" LEFT JOIN {related.table} {related.alias}"
                f" ON {related.alias}.id = {self.alias}.{related.foreign_key}"
                f" AND {related.alias}.user_id = {self.alias}.user_id"
            )

        return clause

    def order_clause(self) -> str:
        ordering = list(self.ordering)
        if ("created_at", "DESC") not in ordering:
            ordering.append(("created_at", "DESC"))

        return ", ".join(f"{self._column(column)} {direction}" for column, direction in ordering)

    def build(self) -> tuple[str, dict[str, Any]]:
        """Render the query.

        Returns:
            Tuple of (SQL text with named parameters, parameter dictionary)
        """
        sql = (
            f"SELECT {self._select_list()}"
            f" FROM {self._from_clause()}"
            f" WHERE {' AND '.join(self.conditions)}"
            f" ORDER BY {self.order_clause()}"
        )
        params = dict(self.params)

        if self.limit is not None:
            sql += " LIMIT :limit"
            params["limit"] = self.limit

        logger.debug(f"List query for {self.spec.table}: {sql}")
        return sql, params

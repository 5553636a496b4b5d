"""
Dashboard Summary Module

Aggregates the owner's records into the six dashboard figures. The sums are
done here rather than in SQL; record counts per user are small.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class DashboardStats:
    """Totals shown on the dashboard."""

    total_expenses: Decimal = ZERO
    total_liabilities: Decimal = ZERO
    total_salaries: Decimal = ZERO
    total_cashflow: Decimal = ZERO
    pending_pdc: Decimal = ZERO
    capital_injected: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "total_expenses": float(self.total_expenses),
            "total_liabilities": float(self.total_liabilities),
            "total_salaries": float(self.total_salaries),
            "total_cashflow": float(self.total_cashflow),
            "pending_pdc": float(self.pending_pdc),
            "capital_injected": float(self.capital_injected),
        }


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def sum_column(rows: Iterable[dict], column: str = "amount") -> Decimal:
    """Sum one numeric column over result rows. Missing values count as zero."""
    return sum((_to_decimal(row.get(column)) for row in rows), ZERO)


def net_cashflow(rows: Iterable[dict]) -> Decimal:
    """Inflows minus outflows.

    Args:
        rows: Cashflow rows with 'type' and 'amount'

    Returns:
        Net cashflow amount
    """
    inflow = ZERO
    outflow = ZERO

    for row in rows:
        amount = _to_decimal(row.get("amount"))
        if row.get("type") == "inflow":
            inflow += amount
        elif row.get("type") == "outflow":
            outflow += amount
        else:
            logger.warning(f"Ignoring cashflow row with unknown type: {row.get('type')}")

    return inflow - outflow


def build_dashboard_stats(
    expenses: list[dict],
    liabilities: list[dict],
    salaries: list[dict],
    cashflow: list[dict],
    pending_pdc: list[dict],
    capital: list[dict],
) -> DashboardStats:
    """Compute dashboard totals from already-scoped result sets.

    Args:
        expenses: Expense rows (amount)
        liabilities: Liability rows (outstanding_amount)
        salaries: Salary rows (amount)
        cashflow: Cashflow rows (type, amount)
        pending_pdc: PDC rows already filtered to status 'pending'
        capital: Capital injection rows (amount)

    Returns:
        DashboardStats
    """
    return DashboardStats(
        total_expenses=sum_column(expenses),
        total_liabilities=sum_column(liabilities, "outstanding_amount"),
        total_salaries=sum_column(salaries),
        total_cashflow=net_cashflow(cashflow),
        pending_pdc=sum_column(pending_pdc),
        capital_injected=sum_column(capital),
    )

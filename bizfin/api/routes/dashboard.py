"""
Dashboard API Routes

Provides the summary figures and recent activity for the main dashboard.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...records.entities import (
    CAPITAL_INJECTION,
    CASHFLOW,
    EXPENSE,
    LIABILITY,
    PDC,
    SALARY,
)
from ...records.summary import build_dashboard_stats
from ..auth import User, get_current_user
from ..repository import RecordRepository
from .expenses import Expense
from .salaries import Salary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RECENT_LIMIT = 5

expenses = RecordRepository(EXPENSE)
liabilities = RecordRepository(LIABILITY)
salaries = RecordRepository(SALARY)
cashflow = RecordRepository(CASHFLOW)
cheques = RecordRepository(PDC)
capital = RecordRepository(CAPITAL_INJECTION)


class DashboardTotals(BaseModel):
    """Summary figures."""

    total_expenses: float
    total_liabilities: float  # outstanding amounts
    total_salaries: float
    total_cashflow: float  # inflow - outflow
    pending_pdc: float
    capital_injected: float


class DashboardData(BaseModel):
    stats: DashboardTotals
    recent_expenses: list[Expense]
    recent_salaries: list[Salary]


class DashboardResponse(BaseModel):
    """Complete dashboard response."""

    data: DashboardData


def _recent(repository: RecordRepository, user_id: str) -> list[dict]:
    query = repository.query(user_id).order_by("created_at", "DESC").limit_to(RECENT_LIMIT)
    return repository.fetch(query)


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    user: User = Depends(get_current_user),
) -> DashboardResponse:
    """Get dashboard totals and recent activity.

    Every total is computed from the user's full record set.

    Args:
        user: Authenticated user

    Returns:
        DashboardResponse
    """
    stats = build_dashboard_stats(
        expenses=expenses.fetch(
            expenses.query(user.id, columns=("amount",))
        ),
        liabilities=liabilities.fetch(
            liabilities.query(user.id, columns=("outstanding_amount",))
        ),
        salaries=salaries.fetch(
            salaries.query(user.id, columns=("amount",), include_related=False)
        ),
        cashflow=cashflow.fetch(
            cashflow.query(user.id, columns=("type", "amount"))
        ),
        pending_pdc=cheques.fetch(
            cheques.query(user.id, columns=("amount",)).where_equals("status", "pending")
        ),
        capital=capital.fetch(
            capital.query(user.id, columns=("amount",))
        ),
    )

    return DashboardResponse(
        data=DashboardData(
            stats=DashboardTotals(**stats.to_dict()),
            recent_expenses=_recent(expenses, user.id),
            recent_salaries=_recent(salaries, user.id),
        )
    )

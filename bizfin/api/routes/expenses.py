"""
Expenses API Routes

Provides endpoints for listing and managing expenses.
"""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from ...records.entities import EXPENSE
from ...records.validation import normalize_payload, validate_expense
from ..auth import User, get_current_user
from ..repository import RecordRepository
from .common import DeleteResponse, ensure_valid, not_found

router = APIRouter(prefix="/expenses", tags=["expenses"])

repository = RecordRepository(EXPENSE)


class Expense(BaseModel):
    """Expense model."""

    id: str
    user_id: str
    category: str
    amount: float
    date: date
    notes: str | None
    created_at: datetime
    updated_at: datetime


class ExpenseListResponse(BaseModel):
    data: list[Expense]


class ExpenseResponse(BaseModel):
    data: Expense


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    category: str | None = Query(None),
    month: str | None = Query(None, alias="date", description="Month bucket (YYYY-MM)"),
    search: str | None = Query(None),
    user: User = Depends(get_current_user),
) -> ExpenseListResponse:
    """List expenses, newest first.

    Args:
        category: Filter by category
        month: Filter by month (YYYY-MM)
        search: Search notes and category
        user: Authenticated user

    Returns:
        Matching expenses
    """
    query = (
        repository.query(user.id)
        .where_equals("category", category)
        .where_month("date", month)
        .where_search(search)
    )
    return ExpenseListResponse(data=repository.fetch(query))


@router.post("", status_code=201, response_model=ExpenseResponse)
def create_expense(
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> ExpenseResponse:
    """Create an expense."""
    ensure_valid(validate_expense(payload), EXPENSE.name)
    record = repository.create(user.id, normalize_payload(EXPENSE, payload))
    return ExpenseResponse(data=record)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: str,
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> ExpenseResponse:
    """Replace an expense.

    Raises:
        HTTPException: 400 on invalid payload, 404 if the user has no such expense
    """
    ensure_valid(validate_expense(payload), EXPENSE.name)
    record = repository.update(user.id, expense_id, normalize_payload(EXPENSE, payload, for_update=True))

    if record is None:
        raise not_found(EXPENSE.label)

    return ExpenseResponse(data=record)


@router.delete("/{expense_id}", response_model=DeleteResponse)
def delete_expense(
    expense_id: str,
    user: User = Depends(get_current_user),
) -> DeleteResponse:
    """Delete an expense."""
    repository.delete(user.id, expense_id)
    return DeleteResponse()

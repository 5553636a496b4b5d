"""
Cashflow API Routes

Provides endpoints for money moving in and out of the business.
"""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from ...records.entities import CASHFLOW
from ...records.validation import normalize_payload, validate_cashflow
from ..auth import User, get_current_user
from ..repository import RecordRepository
from .common import DeleteResponse, ensure_valid, not_found

router = APIRouter(prefix="/cashflow", tags=["cashflow"])

repository = RecordRepository(CASHFLOW)


class CashflowEntry(BaseModel):
    """Cashflow entry model."""

    id: str
    user_id: str
    type: str  # 'inflow' or 'outflow'
    category: str
    amount: float
    date: date
    description: str | None
    reference_id: str | None
    reference_type: str | None
    created_at: datetime
    updated_at: datetime


class CashflowListResponse(BaseModel):
    data: list[CashflowEntry]


class CashflowResponse(BaseModel):
    data: CashflowEntry


@router.get("", response_model=CashflowListResponse)
def list_cashflow(
    type: str | None = Query(None),
    category: str | None = Query(None),
    month: str | None = Query(None, alias="date", description="Month bucket (YYYY-MM)"),
    search: str | None = Query(None),
    user: User = Depends(get_current_user),
) -> CashflowListResponse:
    """List cashflow entries, newest first.

    Args:
        type: Filter by direction (inflow/outflow)
        category: Filter by category
        month: Filter by month (YYYY-MM)
        search: Search category and description
        user: Authenticated user

    Returns:
        Matching cashflow entries
    """
    query = (
        repository.query(user.id)
        .where_equals("type", type)
        .where_equals("category", category)
        .where_month("date", month)
        .where_search(search)
    )
    return CashflowListResponse(data=repository.fetch(query))


@router.post("", status_code=201, response_model=CashflowResponse)
def create_cashflow(
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> CashflowResponse:
    ensure_valid(validate_cashflow(payload), CASHFLOW.name)
    record = repository.create(user.id, normalize_payload(CASHFLOW, payload))
    return CashflowResponse(data=record)


@router.put("/{entry_id}", response_model=CashflowResponse)
def update_cashflow(
    entry_id: str,
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> CashflowResponse:
    ensure_valid(validate_cashflow(payload), CASHFLOW.name)
    record = repository.update(user.id, entry_id, normalize_payload(CASHFLOW, payload, for_update=True))

    if record is None:
        raise not_found(CASHFLOW.label)

    return CashflowResponse(data=record)


@router.delete("/{entry_id}", response_model=DeleteResponse)
def delete_cashflow(
    entry_id: str,
    user: User = Depends(get_current_user),
) -> DeleteResponse:
    repository.delete(user.id, entry_id)
    return DeleteResponse()

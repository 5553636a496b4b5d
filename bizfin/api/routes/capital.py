"""
Capital Injections API Routes

Provides endpoints for funds put into the business: equity, loans,
investments and grants. Kept apart from operating cashflow.
"""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from ...records.entities import CAPITAL_INJECTION
from ...records.validation import normalize_payload, validate_capital_injection
from ..auth import User, get_current_user
from ..repository import RecordRepository
from .common import DeleteResponse, ensure_valid, not_found

router = APIRouter(prefix="/capital", tags=["capital"])

repository = RecordRepository(CAPITAL_INJECTION)


class CapitalInjection(BaseModel):
    """Capital injection model."""

    id: str
    user_id: str
    type: str
    amount: float
    date: date
    source: str | None
    description: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class CapitalListResponse(BaseModel):
    data: list[CapitalInjection]


class CapitalResponse(BaseModel):
    data: CapitalInjection


@router.get("", response_model=CapitalListResponse)
def list_capital_injections(
    type: str | None = Query(None),
    source: str | None = Query(None),
    month: str | None = Query(None, alias="date", description="Month bucket (YYYY-MM)"),
    search: str | None = Query(None),
    user: User = Depends(get_current_user),
) -> CapitalListResponse:
    """List capital injections, newest first.

    Args:
        type: Filter by injection type
        source: Filter by source
        month: Filter by month (YYYY-MM)
        search: Search source and description
        user: Authenticated user

    Returns:
        Matching capital injections
    """
    query = (
        repository.query(user.id)
        .where_equals("type", type)
        .where_equals("source", source)
        .where_month("date", month)
        .where_search(search)
    )
    return CapitalListResponse(data=repository.fetch(query))


@router.post("", status_code=201, response_model=CapitalResponse)
def create_capital_injection(
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> CapitalResponse:
    ensure_valid(validate_capital_injection(payload), CAPITAL_INJECTION.name)
    record = repository.create(user.id, normalize_payload(CAPITAL_INJECTION, payload))
    return CapitalResponse(data=record)


@router.put("/{injection_id}", response_model=CapitalResponse)
def update_capital_injection(
    injection_id: str,
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> CapitalResponse:
    ensure_valid(validate_capital_injection(payload), CAPITAL_INJECTION.name)
    record = repository.update(
        user.id,
        injection_id,
        normalize_payload(CAPITAL_INJECTION, payload, for_update=True),
    )

    if record is None:
        raise not_found(CAPITAL_INJECTION.label)

    return CapitalResponse(data=record)


@router.delete("/{injection_id}", response_model=DeleteResponse)
def delete_capital_injection(
    injection_id: str,
    user: User = Depends(get_current_user),
) -> DeleteResponse:
    repository.delete(user.id, injection_id)
    return DeleteResponse()

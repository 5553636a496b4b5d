"""
Liabilities API Routes

Provides endpoints for loans, credit cards and other amounts owed.
"""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from ...records.entities import LIABILITY
from ...records.validation import normalize_payload, validate_liability
from ..auth import User, get_current_user
from ..repository import RecordRepository
from .common import DeleteResponse, ensure_valid, not_found

router = APIRouter(prefix="/liabilities", tags=["liabilities"])

repository = RecordRepository(LIABILITY)


class Liability(BaseModel):
    """Liability model."""

    id: str
    user_id: str
    type: str
    name: str
    amount: float
    outstanding_amount: float
    due_date: date | None
    interest_rate: float | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class LiabilityListResponse(BaseModel):
    data: list[Liability]


class LiabilityResponse(BaseModel):
    data: Liability


@router.get("", response_model=LiabilityListResponse)
def list_liabilities(
    type: str | None = Query(None),
    search: str | None = Query(None),
    user: User = Depends(get_current_user),
) -> LiabilityListResponse:
    """List liabilities, most recently added first.

    Args:
        type: Filter by liability type
        search: Search name and notes
        user: Authenticated user

    Returns:
        Matching liabilities
    """
    query = (
        repository.query(user.id)
        .where_equals("type", type)
        .where_search(search)
    )
    return LiabilityListResponse(data=repository.fetch(query))


@router.post("", status_code=201, response_model=LiabilityResponse)
def create_liability(
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> LiabilityResponse:
    """Create a liability.

    The outstanding amount is not checked against the total.
    """
    ensure_valid(validate_liability(payload), LIABILITY.name)
    record = repository.create(user.id, normalize_payload(LIABILITY, payload))
    return LiabilityResponse(data=record)


@router.put("/{liability_id}", response_model=LiabilityResponse)
def update_liability(
    liability_id: str,
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> LiabilityResponse:
    """Replace a liability."""
    ensure_valid(validate_liability(payload), LIABILITY.name)
    record = repository.update(
        user.id,
        liability_id,
        normalize_payload(LIABILITY, payload, for_update=True),
    )

    if record is None:
        raise not_found(LIABILITY.label)

    return LiabilityResponse(data=record)


@router.delete("/{liability_id}", response_model=DeleteResponse)
def delete_liability(
    liability_id: str,
    user: User = Depends(get_current_user),
) -> DeleteResponse:
    repository.delete(user.id, liability_id)
    return DeleteResponse()

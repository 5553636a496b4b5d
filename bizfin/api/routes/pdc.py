"""
Post-Dated Cheque API Routes

Provides endpoints for tracking post-dated cheques (PDC) through their
pending, cleared, bounced or cancelled states.
"""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from ...records.entities import PDC
from ...records.validation import normalize_payload, validate_pdc
from ..auth import User, get_current_user
from ..repository import RecordRepository
from .common import DeleteResponse, ensure_valid, not_found

router = APIRouter(prefix="/pdc", tags=["pdc"])

repository = RecordRepository(PDC)


class Cheque(BaseModel):
    """Post-dated cheque model."""

    id: str
    user_id: str
    cheque_number: str
    bank_name: str
    amount: float
    issue_date: date
    due_date: date
    status: str
    payee: str | None
    purpose: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class ChequeListResponse(BaseModel):
    data: list[Cheque]


class ChequeResponse(BaseModel):
    data: Cheque


@router.get("", response_model=ChequeListResponse)
def list_cheques(
    status: str | None = Query(None),
    bank_name: str | None = Query(None),
    search: str | None = Query(None),
    user: User = Depends(get_current_user),
) -> ChequeListResponse:
    """List cheques, earliest due date first.

    Args:
        status: Filter by cheque status
        bank_name: Filter by bank
        search: Search cheque number, payee and purpose
        user: Authenticated user

    Returns:
        Matching cheques
    """
    query = (
        repository.query(user.id)
        .where_equals("status", status)
        .where_equals("bank_name", bank_name)
        .where_search(search)
    )
    return ChequeListResponse(data=repository.fetch(query))


@router.post("", status_code=201, response_model=ChequeResponse)
def create_cheque(
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> ChequeResponse:
    """Record a cheque. Status defaults to pending."""
    ensure_valid(validate_pdc(payload), PDC.name)
    record = repository.create(user.id, normalize_payload(PDC, payload))
    return ChequeResponse(data=record)


@router.put("/{cheque_id}", response_model=ChequeResponse)
def update_cheque(
    cheque_id: str,
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> ChequeResponse:
    ensure_valid(validate_pdc(payload), PDC.name)
    record = repository.update(user.id, cheque_id, normalize_payload(PDC, payload, for_update=True))

    if record is None:
        raise not_found(PDC.label)

    return ChequeResponse(data=record)


@router.delete("/{cheque_id}", response_model=DeleteResponse)
def delete_cheque(
    cheque_id: str,
    user: User = Depends(get_current_user),
) -> DeleteResponse:
    repository.delete(user.id, cheque_id)
    return DeleteResponse()

"""
Salaries API Routes

Provides endpoints for monthly salary records. An employee has at most one
salary record per month and year.
"""

import logging
from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel

from ...records.entities import EMPLOYEE, SALARY
from ...records.validation import normalize_payload, validate_salary
from ..auth import User, get_current_user
from ..repository import DuplicateRecordError, RecordRepository
from .common import DeleteResponse, ensure_valid, not_found

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/salaries", tags=["salaries"])

repository = RecordRepository(SALARY)
employee_repository = RecordRepository(EMPLOYEE)

DUPLICATE_MESSAGE = "Salary record already exists for this employee, month, and year"


class EmployeeSummary(BaseModel):
    """Employee fields embedded in salary records."""

    name: str | None
    position: str | None


class Salary(BaseModel):
    """Salary record model."""

    id: str
    user_id: str
    employee_id: str
    month: int
    year: int
    amount: float
    status: str
    paid_date: date | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
    employees: EmployeeSummary | None = None


class SalaryListResponse(BaseModel):
    data: list[Salary]


class SalaryResponse(BaseModel):
    data: Salary


def _conflict() -> HTTPException:
    return HTTPException(status_code=409, detail=DUPLICATE_MESSAGE)


@router.get("", response_model=SalaryListResponse)
def list_salaries(
    employee_id: str | None = Query(None),
    month: int | None = Query(None),
    year: int | None = Query(None),
    status: str | None = Query(None),
    user: User = Depends(get_current_user),
) -> SalaryListResponse:
    """List salary records, latest period first.

    Args:
        employee_id: Filter by employee
        month: Filter by month (1-12)
        year: Filter by year
        status: Filter by payment status
        user: Authenticated user

    Returns:
        Matching salary records with employee name and position
    """
    query = (
        repository.query(user.id)
        .where_equals("employee_id", employee_id)
        .where_equals("month", month)
        .where_equals("year", year)
        .where_equals("status", status)
    )
    return SalaryListResponse(data=repository.fetch(query))


@router.post("", status_code=201, response_model=SalaryResponse)
def create_salary(
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> SalaryResponse:
    """Create a salary record.

    Rejects a second record for the same employee, month and year. The
    existence check gives the usual answer; the table's unique constraint
    catches concurrent submissions that both pass it.

    Raises:
        HTTPException: 400 on invalid payload or unknown employee, 409 on duplicate
    """
    ensure_valid(validate_salary(payload), SALARY.name)
    values = normalize_payload(SALARY, payload)

    if not employee_repository.exists(user.id, id=values["employee_id"]):
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Validation failed",
                "details": [{"field": "employee_id", "message": "Employee not found"}],
            },
        )

    if repository.exists(
        user.id,
        employee_id=values["employee_id"],
        month=values["month"],
        year=values["year"],
    ):
        logger.info(f"Duplicate salary for employee {values['employee_id']} {values['month']}/{values['year']}")
        raise _conflict()

    try:
        record = repository.create(user.id, values)
    except DuplicateRecordError:
        logger.warning(f"Concurrent duplicate salary for employee {values['employee_id']}")
        raise _conflict()

    return SalaryResponse(data=record)


@router.put("/{salary_id}", response_model=SalaryResponse)
def update_salary(
    salary_id: str,
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> SalaryResponse:
    """Replace a salary record. The employee cannot be changed."""
    ensure_valid(validate_salary(payload, require_employee=False), SALARY.name)

    try:
        record = repository.update(
            user.id,
            salary_id,
            normalize_payload(SALARY, payload, for_update=True),
        )
    except DuplicateRecordError:
        raise _conflict()

    if record is None:
        raise not_found(SALARY.label)

    return SalaryResponse(data=record)


@router.delete("/{salary_id}", response_model=DeleteResponse)
def delete_salary(
    salary_id: str,
    user: User = Depends(get_current_user),
) -> DeleteResponse:
    repository.delete(user.id, salary_id)
    return DeleteResponse()

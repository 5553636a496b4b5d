"""
Employees API Routes

Provides endpoints for the employee roster. Employees are never removed;
deleting one marks it inactive so its salary history stays intact.
"""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from ...records.entities import EMPLOYEE
from ...records.validation import normalize_payload, validate_employee
from ..auth import User, get_current_user
from ..repository import RecordRepository
from .common import DeleteResponse, ensure_valid, not_found

router = APIRouter(prefix="/employees", tags=["employees"])

repository = RecordRepository(EMPLOYEE)


class Employee(BaseModel):
    """Employee model."""

    id: str
    user_id: str
    name: str
    position: str | None
    monthly_salary: float
    hire_date: date | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class EmployeeListResponse(BaseModel):
    data: list[Employee]


class EmployeeResponse(BaseModel):
    data: Employee


@router.get("", response_model=EmployeeListResponse)
def list_employees(
    active: bool | None = Query(None),
    search: str | None = Query(None),
    user: User = Depends(get_current_user),
) -> EmployeeListResponse:
    """List employees by name.

    Args:
        active: Only active (true) or inactive (false) employees
        search: Search name and position
        user: Authenticated user

    Returns:
        Matching employees
    """
    query = (
        repository.query(user.id)
        .where_equals("is_active", active)
        .where_search(search)
    )
    return EmployeeListResponse(data=repository.fetch(query))


@router.post("", status_code=201, response_model=EmployeeResponse)
def create_employee(
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> EmployeeResponse:
    """Create an employee. New employees are active unless stated otherwise."""
    ensure_valid(validate_employee(payload), EMPLOYEE.name)
    record = repository.create(user.id, normalize_payload(EMPLOYEE, payload))
    return EmployeeResponse(data=record)


@router.put("/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: str,
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> EmployeeResponse:
    """Replace an employee."""
    ensure_valid(validate_employee(payload), EMPLOYEE.name)
    record = repository.update(
        user.id,
        employee_id,
        normalize_payload(EMPLOYEE, payload, for_update=True),
    )

    if record is None:
        raise not_found(EMPLOYEE.label)

    return EmployeeResponse(data=record)


@router.delete("/{employee_id}", response_model=DeleteResponse)
def delete_employee(
    employee_id: str,
    user: User = Depends(get_current_user),
) -> DeleteResponse:
    """Deactivate an employee."""
    repository.deactivate(user.id, employee_id)
    return DeleteResponse()

"""
Shared Route Helpers

Response models and error helpers used by every resource router.
"""

import logging

from fastapi import HTTPException
from pydantic import BaseModel

from ...records.validation import ValidationResult

logger = logging.getLogger(__name__)


class FieldError(BaseModel):
    """One itemized validation problem."""

    field: str
    message: str


class DeleteResponse(BaseModel):
    """Response for DELETE endpoints."""

    success: bool = True


def ensure_valid(result: ValidationResult, entity: str) -> None:
    """Raise a 400 listing every field error when validation failed.

    Args:
        result: Validation outcome
        entity: Entity name for logging

    Raises:
        HTTPException: If the payload is invalid
    """
    if result.is_valid:
        return

    logger.info(f"Rejected {entity} payload: {', '.join(result.fields)}")
    raise HTTPException(
        status_code=400,
        detail={"error": "Validation failed", "details": result.to_list()},
    )


def not_found(label: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{label} not found")

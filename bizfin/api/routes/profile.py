"""
Profile API Routes

Provides endpoints for the signed-in user's own profile (display name and
company name).
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from ...records.entities import PROFILE
from ...records.validation import normalize_payload, validate_profile
from ..auth import User, get_current_user
from ..database import execute_insert, execute_query
from .common import ensure_valid

router = APIRouter(prefix="/profile", tags=["profile"])


class Profile(BaseModel):
    """User profile model."""

    id: str
    email: str | None
    full_name: str | None
    company_name: str | None


class ProfileResponse(BaseModel):
    data: Profile


def _load_profile(user_id: str) -> dict | None:
    rows = execute_query(
        """
        SELECT id, email, full_name, company_name
        FROM profiles
        WHERE id = :id
        """,
        {"id": user_id},
    )
    return rows[0] if rows else None


@router.get("", response_model=ProfileResponse)
def get_profile(
    user: User = Depends(get_current_user),
) -> ProfileResponse:
    """Get the user's profile.

    Falls back to the identity's own details until a profile is saved.
    """
    profile = _load_profile(user.id)

    if profile is None:
        profile = {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "company_name": user.company_name,
        }

    return ProfileResponse(data=profile)


@router.put("", response_model=ProfileResponse)
def update_profile(
    payload: Any = Body(None),
    user: User = Depends(get_current_user),
) -> ProfileResponse:
    """Save the user's profile, creating it on first save."""
    ensure_valid(validate_profile(payload), PROFILE.name)
    values = normalize_payload(PROFILE, payload)
    now = datetime.now(timezone.utc).isoformat()

    updated = execute_query(
        """
        UPDATE profiles
        SET full_name = :full_name,
            company_name = :company_name,
            updated_at = :updated_at
        WHERE id = :id
        RETURNING id
        """,
        {**values, "updated_at": now, "id": user.id},
    )

    if not updated:
        execute_insert("profiles", {
            "id": user.id,
            "email": user.email,
            **values,
            "created_at": now,
            "updated_at": now,
        })

    return ProfileResponse(data=_load_profile(user.id))

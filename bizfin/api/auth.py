"""
Authentication Module

Resolves the calling user from a bearer token or session cookie. Tokens are
issued by the hosted auth service; this module only maps a presented token
to a known identity from users.yaml.
"""

import logging
import os
from pathlib import Path

import yaml
from fastapi import Cookie, Header, HTTPException, status
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"


class User(BaseModel):
    """Authenticated user model."""

    id: str
    email: str
    full_name: str | None = None
    company_name: str | None = None


DEV_USER = User(
    id="dev",
    email="dev@localhost",
    full_name="Developer",
    company_name="Development",
)


class AuthConfig:
    """Identity registry loaded from users.yaml."""

    def __init__(self, config_path: Path | str | None = None):
        """Initialize auth config.

        Args:
            config_path: Path to users.yaml
        """
        if config_path is None:
            config_path = os.getenv(
                "AUTH_CONFIG_PATH",
                Path(__file__).parent.parent.parent / "config" / "users.yaml",
            )

        self.config_path = Path(config_path)
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML."""
        if self.config_path.exists():
            with open(self.config_path) as f:
                self.config = yaml.safe_load(f) or {}
        else:
            logger.warning(f"Auth config not found: {self.config_path}, using development registry")
            self.config = {
                "users": [
                    {
                        "id": DEV_USER.id,
                        "email": DEV_USER.email,
                        "full_name": DEV_USER.full_name,
                        "company_name": DEV_USER.company_name,
                        "token": "dev-token",
                    }
                ],
            }

    def get_user_by_token(self, token: str) -> User | None:
        """Get user by access token.

        Args:
            token: Bearer token or session cookie value

        Returns:
            User object or None if the token is unknown
        """
        for user_data in self.config.get("users", []):
            if str(user_data.get("token")) == token:
                return User(
                    id=str(user_data["id"]),
                    email=user_data.get("email", ""),
                    full_name=user_data.get("full_name"),
                    company_name=user_data.get("company_name"),
                )

        return None


# Global auth config instance
auth_config = AuthConfig()


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    return token.strip()


async def get_current_user(
    authorization: str | None = Header(None),
    session_token: str | None = Cookie(None, alias=SESSION_COOKIE),
) -> User:
    """Get current authenticated user from request headers or cookies.

    Args:
        authorization: Bearer token
        session_token: Session cookie set by the auth service

    Returns:
        Authenticated User

    Raises:
        HTTPException: If authentication fails
    """
    token = _bearer_token(authorization) or session_token

    # Development mode: allow anonymous requests as the dev user
    if os.getenv("ENVIRONMENT", "production") == "development" and not token:
        return DEV_USER

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    user = auth_config.get_user_by_token(token)

    if not user:
        logger.info("Rejected request with unknown token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    return user

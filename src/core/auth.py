"""
Supabase JWT Authentication Module.

Customers and admins sign in through Supabase Auth on the storefront; the
API only verifies the resulting HS256 access token.

- `get_current_user`: optional auth (guest checkout)
- `require_auth`: customer endpoints (orders, addresses, preferences)
- `require_admin`: admin panel endpoints

Usage:
    from core.auth import require_admin, SupabaseUser

    @router.get("/admin/orders")
    def list_orders(admin: SupabaseUser = Depends(require_admin)):
        ...
"""

from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import get_settings
from core.logging import get_logger


logger = get_logger(__name__)

ADMIN_ROLE = "admin"

security = HTTPBearer(
    scheme_name="Supabase JWT",
    description="Access token from Supabase Auth.",
    auto_error=False,
)


@dataclass
class SupabaseUser:
    """
    Authenticated user from Supabase JWT.

    Attributes:
        id: User's UUID (from 'sub' claim)
        email: User's email address
        role: Postgres role (usually 'authenticated')
        app_metadata: Server-controlled metadata; carries the admin role
        user_metadata: User profile metadata (name, phone, etc.)
    """
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str = "authenticated"
    session_id: Optional[str] = None
    is_anonymous: bool = False
    app_metadata: Optional[dict] = None
    user_metadata: Optional[dict] = None

    @property
    def display_name(self) -> Optional[str]:
        meta = self.user_metadata or {}
        return meta.get("full_name") or meta.get("name")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_jwt(token: str) -> dict:
    """
    Verify and decode a Supabase JWT token.

    Raises:
        HTTPException: 401 if the token is invalid, expired, or malformed
    """
    settings = get_settings()

    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
            options={
                "verify_exp": True,
                "verify_aud": True,
                "require": ["sub", "exp", "aud"],
            }
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidAudienceError:
        raise _unauthorized("Invalid token audience")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")


def extract_user(payload: dict) -> SupabaseUser:
    """Build a SupabaseUser from a verified JWT payload."""
    return SupabaseUser(
        id=payload["sub"],
        email=payload.get("email"),
        phone=payload.get("phone"),
        role=payload.get("role", "authenticated"),
        session_id=payload.get("session_id"),
        is_anonymous=payload.get("is_anonymous", False),
        app_metadata=payload.get("app_metadata"),
        user_metadata=payload.get("user_metadata"),
    )


def is_admin(user: SupabaseUser) -> bool:
    """
    A user is an admin when app_metadata.role is "admin" or their email is
    listed in the ADMIN_EMAILS setting.
    """
    if (user.app_metadata or {}).get("role") == ADMIN_ROLE:
        return True
    email = (user.email or "").lower()
    return bool(email) and email in get_settings().admin_emails


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[SupabaseUser]:
    """
    FastAPI dependency to get the current user, or None for guests.

    An invalid token still raises 401; only a missing header means guest.
    """
    if not credentials or not credentials.credentials:
        return None

    return extract_user(verify_jwt(credentials.credentials))


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> SupabaseUser:
    """FastAPI dependency that requires a signed-in user (401 otherwise)."""
    if not credentials:
        raise _unauthorized("Authorization header required")

    if not credentials.credentials:
        raise _unauthorized("Token required")

    return extract_user(verify_jwt(credentials.credentials))


async def require_admin(
    user: SupabaseUser = Depends(require_auth)
) -> SupabaseUser:
    """FastAPI dependency that requires an admin user (403 otherwise)."""
    if not is_admin(user):
        logger.warning("Admin access denied", user_id=user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user

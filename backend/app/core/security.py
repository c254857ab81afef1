"""
security.py — Session Verification & Role Gate

Purpose:
- Verify the Supabase Auth access token sent as `Authorization: Bearer <token>`.
- Resolve the signed-in user's role from the `profiles` table (cached).
- Gate the company wizard on `can_modify_company_data`.

Key Constraints:
- Sign-up, login and password reset live in Supabase Auth; this backend only
  verifies the tokens it issues (HS256, shared JWT secret, audience claim).
- A user without a profile row, or whose profile cannot be read, is treated
  as FREEMIUM.

This module does NOT:
- Issue tokens.
- Define API routes → that lives in app/api/v1/wizard.py
"""

from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from app.core.cache import cache_get, cache_set, make_key
from app.core.config import settings
from app.core.exceptions import AccessDeniedError, DatastoreError
from app.core.logging import get_logger
from app.core.permissions import UserRole, access_summary, can_modify_company_data
from app.services.datastore import Datastore, get_datastore
from app.services.datastore.base import PROFILES

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

ROLE_CACHE_NAMESPACE = "role"


class SessionUser(BaseModel):
    """The signed-in user a request acts for."""
    id: str
    email: Optional[str] = None
    role: str = UserRole.FREEMIUM.value


# -----------------------------------------------------------------------------
# Token Verification
# -----------------------------------------------------------------------------

def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a Supabase access token.
    Returns the payload dict if valid, None if invalid.
    """
    if not settings.SUPABASE_JWT_SECRET:
        logger.error("SUPABASE_JWT_SECRET is not configured; rejecting all session tokens")
        return None
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        return None


# -----------------------------------------------------------------------------
# Role Lookup
# -----------------------------------------------------------------------------

def resolve_role(datastore: Datastore, user_id: str) -> str:
    """
    Role stored on the user's profile (FREEMIUM when absent).
    Successful lookups are cached for ROLE_CACHE_TTL_SECONDS.
    """
    key = make_key(ROLE_CACHE_NAMESPACE, user_id)
    cached = cache_get(key)
    if cached is not None:
        return cached

    try:
        rows = datastore.select(PROFILES, {"id": user_id}, columns="role", limit=1)
    except DatastoreError as e:
        logger.warning(f"Could not read profile of user {user_id}, treating as {UserRole.FREEMIUM.value}: {e}")
        return UserRole.FREEMIUM.value

    role = (rows[0].get("role") if rows else None) or UserRole.FREEMIUM.value
    cache_set(key, role, settings.ROLE_CACHE_TTL_SECONDS or None)
    return role


def check_company_editor(user: SessionUser) -> SessionUser:
    """Raise AccessDeniedError unless the user's role may modify company data."""
    if not can_modify_company_data(user.role):
        raise AccessDeniedError(user.role)
    return user


# -----------------------------------------------------------------------------
# FastAPI Dependencies
# -----------------------------------------------------------------------------

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    datastore: Datastore = Depends(get_datastore),
) -> SessionUser:
    """
    Extract the signed-in user from the bearer token.

    Flow:
    - No token / invalid token / no `sub` claim → 401.
    - Role read from `profiles` (cached).
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload["sub"]
    return SessionUser(id=user_id, email=payload.get("email"), role=resolve_role(datastore, user_id))


def require_company_editor(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    """
    Dependency for every wizard route: 403 with the fixed access-denied view
    when the role cannot create, update or delete company data.
    """
    try:
        return check_company_editor(user)
    except AccessDeniedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": str(e), **access_summary(e.role)},
        ) from e

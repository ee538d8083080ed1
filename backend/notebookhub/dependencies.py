"""
NotebookHub Backend — Request Dependencies (Auth Guard)
========================================================

What:  FastAPI dependencies that gate admin-only routes.
How:   HTTPBearer extracts `Authorization: Bearer <token>` without raising;
       AuthService decides between 401 (no credential) and 403 (rejected).

Guard matrix:
    get_current_admin             ListAll, Approve
    require_admin_for_mutations   Edit, Delete; bypassed when
                                  REQUIRE_AUTH_FOR_MUTATIONS=false
    get_optional_admin            Get (pending documents stay hidden from
                                  anonymous callers)
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notebookhub.config import settings
from notebookhub.services.auth_service import AdminPrincipal, auth_service

bearer_scheme = HTTPBearer(auto_error=False, description="Admin access token from POST /api/login")


def _token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AdminPrincipal:
    """Require a valid admin token."""
    return auth_service.verify_token(_token(credentials))


async def get_optional_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AdminPrincipal]:
    """Admin principal when a token is sent, None for anonymous callers."""
    token = _token(credentials)
    if token is None:
        return None
    return auth_service.verify_token(token)


async def require_admin_for_mutations(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AdminPrincipal]:
    """
    Guard for edit and delete.

    With REQUIRE_AUTH_FOR_MUTATIONS disabled, anonymous callers pass through
    (historical behaviour); a token that is sent anyway is still verified.
    """
    token = _token(credentials)
    if settings.require_auth_for_mutations or token is not None:
        return auth_service.verify_token(token)
    return None

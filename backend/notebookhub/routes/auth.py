"""
NotebookHub Backend — Login Route
==================================

POST /api/login exchanges the admin username/password for a signed token
that is valid for ACCESS_TOKEN_EXPIRE_MINUTES (one hour by default).
"""

from fastapi import APIRouter

from notebookhub.schemas.document import ErrorResponse, LoginRequest, TokenResponse
from notebookhub.services.auth_service import auth_service

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Admin login",
)
async def login(credentials: LoginRequest) -> TokenResponse:
    token = auth_service.login(credentials.username, credentials.password)
    return TokenResponse(token=token)

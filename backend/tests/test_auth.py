"""
NotebookHub Backend — Admin Auth Tests
=======================================

What:  Login, token verification and the admin guard on protected routes.

Guard outcomes:
    no Authorization header        → 401
    malformed / forged / expired   → 403
    valid token                    → handler runs
"""

from datetime import timedelta

import pytest
from jose import jwt

from notebookhub.config import settings
from notebookhub.exceptions import ForbiddenError, UnauthorizedError
from notebookhub.services.auth_service import AuthService, SettingsCredentialStore, auth_service


@pytest.fixture
def service():
    return AuthService(
        credential_store=SettingsCredentialStore("admin", "s3cret"),
        secret="unit-test-secret",
        expire_minutes=60,
    )


class TestAuthService:

    def test_login_issues_one_hour_token(self, service):
        token = service.login("admin", "s3cret")
        claims = jwt.decode(token, "unit-test-secret", algorithms=["HS256"])
        assert claims["sub"] == "admin"
        assert claims["exp"] - claims["iat"] == 3600

    @pytest.mark.parametrize("username,password", [("admin", "wrong"), ("root", "s3cret"), ("", "")])
    def test_login_rejects_bad_credentials(self, service, username, password):
        with pytest.raises(UnauthorizedError, match="Invalid credentials"):
            service.login(username, password)

    def test_verify_round_trip(self, service):
        principal = service.verify_token(service.create_access_token("admin"))
        assert principal.username == "admin"

    def test_missing_token_is_unauthorized(self, service):
        with pytest.raises(UnauthorizedError):
            service.verify_token(None)
        with pytest.raises(UnauthorizedError):
            service.verify_token("")

    def test_expired_token_is_forbidden(self, service):
        token = service.create_access_token("admin", expires_delta=timedelta(seconds=-5))
        with pytest.raises(ForbiddenError) as exc_info:
            service.verify_token(token)
        assert exc_info.value.context["reason"] == "expired"

    def test_foreign_signature_is_forbidden(self, service):
        forged = jwt.encode({"sub": "admin"}, "some-other-secret", algorithm="HS256")
        with pytest.raises(ForbiddenError):
            service.verify_token(forged)

    def test_token_without_subject_is_forbidden(self, service):
        token = jwt.encode({"role": "admin"}, "unit-test-secret", algorithm="HS256")
        with pytest.raises(ForbiddenError):
            service.verify_token(token)

    def test_password_is_not_kept_in_plaintext(self):
        store = SettingsCredentialStore("admin", "s3cret")
        assert "s3cret" not in vars(store).values()


class TestLoginEndpoint:

    @pytest.mark.asyncio
    async def test_login_success(self, test_client):
        response = await test_client.post(
            "/api/login",
            json={"username": settings.admin_username, "password": settings.admin_password},
        )
        assert response.status_code == 200
        token = response.json()["token"]
        assert auth_service.verify_token(token).username == settings.admin_username

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, test_client):
        response = await test_client.post(
            "/api/login",
            json={"username": settings.admin_username, "password": "nope"},
        )
        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert body["message"] == "Invalid credentials"
        assert "nope" not in response.text

    @pytest.mark.asyncio
    async def test_login_missing_fields(self, test_client):
        response = await test_client.post("/api/login", json={"username": "admin"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username,password", [("", ""), ("admin", ""), ("", "test-password")])
    async def test_login_empty_credentials_are_unauthorized(self, test_client, username, password):
        response = await test_client.post("/api/login", json={"username": username, "password": password})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"


class TestAdminGuard:

    @pytest.mark.asyncio
    async def test_no_token_is_401(self, test_client):
        response = await test_client.get("/api/pdfs/admin")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["message"] == "Access token is required"

    @pytest.mark.asyncio
    async def test_garbage_token_is_403(self, test_client):
        response = await test_client.get(
            "/api/pdfs/admin",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, test_client):
        token = auth_service.create_access_token("admin", expires_delta=timedelta(minutes=-1))
        response = await test_client.get(
            "/api/pdfs/admin",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_valid_token_passes(self, test_client, admin_headers):
        response = await test_client.get("/api/pdfs/admin", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == []

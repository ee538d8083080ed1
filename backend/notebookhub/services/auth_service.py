"""
NotebookHub Backend — Admin Authentication Service
===================================================

What:  Verifies admin credentials and issues/validates signed access tokens.
Why:   Approving, listing pending uploads, editing and deleting are
       admin-only; everything else is public.
How:   Credentials are checked through a CredentialStore; tokens are HS256
       JWTs (python-jose) carrying `sub` and `exp`.

Token lifecycle:
    POST /api/login ──▶ CredentialStore.verify() ──▶ create_access_token()
                                                       │
    Authorization: Bearer <token> ──▶ verify_token() ◀─┘
        missing header  → UnauthorizedError (401)
        bad / expired   → ForbiddenError (403)
"""

import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from notebookhub.config import settings
from notebookhub.exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

# pbkdf2_sha256 is implemented in pure Python by passlib; no native backend needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class AdminPrincipal:
    """The authenticated identity attached to admin-only requests."""

    username: str


class CredentialStore(ABC):
    """Source of truth for admin credentials."""

    @abstractmethod
    def verify(self, username: str, password: str) -> bool:
        """Return True when the username/password pair is valid."""


class SettingsCredentialStore(CredentialStore):
    """
    Single admin account configured through ADMIN_USERNAME / ADMIN_PASSWORD.

    The plaintext password is hashed once at construction; only the hash is
    kept on the instance.
    """

    def __init__(self, username: str, password: str):
        self._username = username
        self._password_hash = pwd_context.hash(password)

    def verify(self, username: str, password: str) -> bool:
        username_ok = hmac.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        # Always run the hash check so timing does not reveal a valid username
        password_ok = pwd_context.verify(password, self._password_hash)
        return username_ok and password_ok


class AuthService:
    """Issues and verifies admin access tokens."""

    def __init__(
        self,
        credential_store: CredentialStore,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ):
        self.credential_store = credential_store
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def create_access_token(self, username: str, expires_delta: Optional[timedelta] = None) -> str:
        """Sign a token for `username` valid for `expires_delta` (default: configured lifetime)."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=self.expire_minutes))
        claims: Dict[str, Any] = {"sub": username, "iat": now, "exp": expire}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def login(self, username: str, password: str) -> str:
        """
        Exchange admin credentials for a signed token.

        Raises:
            UnauthorizedError: username/password mismatch
        """
        if not self.credential_store.verify(username, password):
            logger.warning("Failed admin login for username=%s", username)
            raise UnauthorizedError(message="Invalid credentials")
        logger.info("Admin %s logged in", username)
        return self.create_access_token(username)

    def verify_token(self, token: Optional[str]) -> AdminPrincipal:
        """
        Validate a bearer token.

        Raises:
            UnauthorizedError: no token supplied
            ForbiddenError: token is malformed, badly signed, expired or has no subject
        """
        if not token:
            raise UnauthorizedError()

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ForbiddenError(context={"reason": "expired"})
        except JWTError as e:
            raise ForbiddenError(context={"reason": str(e)})

        subject = payload.get("sub")
        if not subject:
            raise ForbiddenError(context={"reason": "missing subject"})
        return AdminPrincipal(username=subject)


auth_service = AuthService(
    credential_store=SettingsCredentialStore(settings.admin_username, settings.admin_password),
    secret=settings.jwt_secret,
    algorithm=settings.jwt_algorithm,
    expire_minutes=settings.access_token_expire_minutes,
)

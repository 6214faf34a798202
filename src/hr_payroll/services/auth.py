"""Password hashing, signed session tokens and login.

Tokens have the form ``<payload>.<signature>``: the payload is the
base64url-encoded JSON ``{"sub", "iat", "exp"}`` and the signature is the
base64url HMAC-SHA256 of the payload under the application secret key.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.errors import AuthenticationError
from hr_payroll.models import User

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


@dataclass(frozen=True)
class TokenClaims:
    """Verified token contents."""

    subject: str
    issued_at: int
    expires_at: int


class TokenSigner:
    """Issue and verify HMAC-signed, expiring tokens."""

    def __init__(
        self,
        secret_key: str,
        ttl_seconds: int,
        clock: Callable[[], float] = time.time,
    ):
        self._key = secret_key.encode("utf-8")
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _sign(self, payload: str) -> str:
        digest = hmac.new(self._key, payload.encode("ascii"), hashlib.sha256).digest()
        return _b64encode(digest)

    def issue(self, subject: str) -> str:
        now = int(self._clock())
        claims = {"sub": subject, "iat": now, "exp": now + self.ttl_seconds}
        payload = _b64encode(json.dumps(claims, separators=(",", ":"), sort_keys=True).encode("utf-8"))
        return f"{payload}.{self._sign(payload)}"

    def verify(self, token: str) -> TokenClaims:
        """Return the claims of a valid token, raising AuthenticationError otherwise."""
        try:
            payload, signature = token.split(".")
        except (AttributeError, ValueError):
            raise AuthenticationError("Malformed token")
        if not token.isascii():
            raise AuthenticationError("Malformed token")

        if not hmac.compare_digest(signature, self._sign(payload)):
            raise AuthenticationError("Invalid token signature")

        try:
            claims = json.loads(_b64decode(payload))
            token_claims = TokenClaims(
                subject=str(claims["sub"]),
                issued_at=int(claims["iat"]),
                expires_at=int(claims["exp"]),
            )
        except (ValueError, KeyError, TypeError):
            raise AuthenticationError("Malformed token")

        if token_claims.expires_at <= int(self._clock()):
            raise AuthenticationError("Token expired")
        return token_claims


class AuthService:
    """Login by CPF and password, and token-based session continuity."""

    def __init__(self, session: AsyncSession, signer: TokenSigner):
        self.session = session
        self.signer = signer

    async def authenticate(self, cpf: str, password: str) -> User:
        """Return the active user matching the credentials."""
        result = await self.session.execute(select(User).where(User.cpf == cpf))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password):
            logger.info("Failed login for cpf %s", cpf)
            raise AuthenticationError("Invalid credentials")
        if not user.active:
            logger.info("Login refused for inactive user %s", user.id)
            raise AuthenticationError("User is inactive")
        logger.info("User %s logged in", user.id)
        return user

    def issue_token(self, user: User) -> str:
        return self.signer.issue(user.id)

    async def user_from_token(self, token: str) -> User:
        """Resolve a token to its active user."""
        claims = self.signer.verify(token)
        user = await self.session.get(User, claims.subject)
        if user is None or not user.active:
            raise AuthenticationError("User not found or inactive")
        return user

    async def refresh(self, token: str) -> tuple[User, str]:
        """Verify a token and issue a new one for the same user."""
        user = await self.user_from_token(token)
        return user, self.issue_token(user)

"""Tests for password hashing, tokens and login."""

import pytest

from hr_payroll.errors import AuthenticationError
from hr_payroll.services import (
    AuthService,
    TokenSigner,
    UserService,
    hash_password,
    verify_password,
)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestPasswordHashing:
    def test_hash_verifies(self):
        hashed = hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert hashed.startswith("$2")
        assert verify_password("s3cret!", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokenSigner:
    """Test signed token issue and verification."""

    def test_round_trip(self):
        clock = FakeClock()
        signer = TokenSigner("key", ttl_seconds=60, clock=clock)
        claims = signer.verify(signer.issue("user-1"))
        assert claims.subject == "user-1"
        assert claims.expires_at - claims.issued_at == 60

    def test_expired_token(self):
        clock = FakeClock()
        signer = TokenSigner("key", ttl_seconds=60, clock=clock)
        token = signer.issue("user-1")
        clock.now += 61
        with pytest.raises(AuthenticationError, match="expired"):
            signer.verify(token)

    def test_token_from_other_key_rejected(self):
        token = TokenSigner("key-a", ttl_seconds=60).issue("user-1")
        with pytest.raises(AuthenticationError, match="signature"):
            TokenSigner("key-b", ttl_seconds=60).verify(token)

    def test_tampered_payload_rejected(self):
        signer = TokenSigner("key", ttl_seconds=60)
        other = signer.issue("user-2")
        token = signer.issue("user-1")
        forged = other.split(".")[0] + "." + token.split(".")[1]
        with pytest.raises(AuthenticationError):
            signer.verify(forged)

    @pytest.mark.parametrize("token", ["", "abc", "a.b.c", "!!!.???"])
    def test_malformed_tokens(self, token):
        with pytest.raises(AuthenticationError):
            TokenSigner("key", ttl_seconds=60).verify(token)


class TestAuthService:
    """Test login by CPF and password."""

    @pytest.fixture
    async def user(self, session, cache):
        return await UserService(session, cache).create(
            {
                "name": "Carla",
                "email": "carla@example.com",
                "cpf": "55566677788",
                "password": "carla-pass",
            }
        )

    async def test_authenticate(self, session, user):
        service = AuthService(session, TokenSigner("key", 60))
        assert (await service.authenticate("55566677788", "carla-pass")).id == user.id

    async def test_wrong_password(self, session, user):
        service = AuthService(session, TokenSigner("key", 60))
        with pytest.raises(AuthenticationError):
            await service.authenticate("55566677788", "nope")

    async def test_unknown_cpf(self, session, user):
        service = AuthService(session, TokenSigner("key", 60))
        with pytest.raises(AuthenticationError):
            await service.authenticate("00000000000", "carla-pass")

    async def test_inactive_user_cannot_log_in(self, session, cache, user):
        await UserService(session, cache).update(user.id, {"active": False})
        service = AuthService(session, TokenSigner("key", 60))
        with pytest.raises(AuthenticationError, match="inactive"):
            await service.authenticate("55566677788", "carla-pass")

    async def test_refresh_issues_token_for_same_user(self, session, user):
        service = AuthService(session, TokenSigner("key", 60))
        refreshed_user, token = await service.refresh(service.issue_token(user))
        assert refreshed_user.id == user.id
        assert (await service.user_from_token(token)).id == user.id

    async def test_password_is_stored_hashed(self, user):
        assert user.password != "carla-pass"
        assert verify_password("carla-pass", user.password)

"""
RecipeHub Backend — Credential Primitive Tests
================================================

What we test:
    ✅ bcrypt hashing round trip and malformed digests
    ✅ Token claims decode into a Principal
    ✅ Expired, tampered and malformed tokens raise InvalidTokenError
    ✅ The auth dependency's 401 / 403 split
"""

from uuid import uuid4

import jwt
import pytest
from fastapi.security import HTTPAuthorizationCredentials

from recipehub.auth import principal_from_credentials
from recipehub.config import settings
from recipehub.exceptions import ForbiddenError, UnauthorizedError
from recipehub.roles import Role
from recipehub.security import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:

    def test_hash_is_not_plaintext_and_verifies(self):
        digest = hash_password("s3cret")
        assert digest != "s3cret"
        assert verify_password("s3cret", digest)
        assert not verify_password("wrong", digest)

    def test_malformed_digest_never_matches(self):
        assert verify_password("s3cret", "not-a-bcrypt-hash") is False


class TestTokens:

    def test_round_trip(self):
        user_id = uuid4()
        token = create_access_token(user_id, "alice", ["Reader", "Writer"])

        principal = decode_access_token(token)

        assert principal.id == user_id
        assert principal.username == "alice"
        assert principal.roles == frozenset({Role.READER, Role.WRITER})

    def test_expired_token_is_rejected(self):
        token = create_access_token(uuid4(), "alice", ["Reader"], expires_minutes=-1)
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_token_signed_with_other_secret_is_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": 9999999999, "roles": ["Admin"]},
            "some-other-secret",
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_subject_must_be_a_user_id(self):
        token = jwt.encode(
            {"sub": "not-a-uuid", "exp": 9999999999},
            settings.access_token_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_garbage_is_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("definitely.not.a-token")


class TestCredentialDependency:

    def test_missing_credentials_is_unauthorized(self):
        with pytest.raises(UnauthorizedError):
            principal_from_credentials(None)

    def test_invalid_credentials_are_forbidden(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="garbage")
        with pytest.raises(ForbiddenError):
            principal_from_credentials(credentials)

    def test_valid_credentials_yield_principal(self):
        user_id = uuid4()
        token = create_access_token(user_id, "bob", ["Admin"])
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        principal = principal_from_credentials(credentials)

        assert principal.id == user_id
        assert principal.is_admin

"""Tests for password hashing, tokens and the bearer header guard."""

import time
from datetime import timedelta

import pytest
from jose import jwt

from finance_tracker import auth
from finance_tracker.errors import Conflict, InvalidCredentials, MalformedHeader, NotFound, Unauthenticated


class TestPasswords:

    def test_hash_is_not_plaintext(self):
        hashed = auth.hash_password("hunter22")
        assert hashed != "hunter22"
        assert auth.verify_password("hunter22", hashed)

    def test_wrong_password_rejected(self):
        hashed = auth.hash_password("hunter22")
        assert not auth.verify_password("hunter23", hashed)


class TestTokens:

    def test_subject_is_user_id(self, settings):
        token = auth.create_access_token(42, settings)
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        assert claims["sub"] == "42"
        assert auth.decode_access_token(token, settings) == 42

    def test_expires_after_an_hour(self, settings):
        before = int(time.time())
        token = auth.create_access_token(1, settings)
        after = int(time.time()) + 1

        exp = jwt.get_unverified_claims(token)["exp"]
        assert before + 3600 <= exp <= after + 3600

    def test_expired_token_rejected(self, settings):
        token = auth.create_access_token(1, settings, expires_delta=timedelta(seconds=-30))
        with pytest.raises(Unauthenticated):
            auth.decode_access_token(token, settings)

    def test_wrong_secret_rejected(self, settings):
        token = auth.create_access_token(1, settings)
        other = settings.model_copy(update={"jwt_secret": "another-secret"})
        with pytest.raises(Unauthenticated):
            auth.decode_access_token(token, other)

    def test_tampered_payload_rejected(self, settings):
        header, _, signature = auth.create_access_token(1, settings).split(".")
        _, forged_payload, _ = auth.create_access_token(2, settings).split(".")
        with pytest.raises(Unauthenticated):
            auth.decode_access_token(f"{header}.{forged_payload}.{signature}", settings)

    def test_non_numeric_subject_rejected(self, settings):
        token = jwt.encode({"sub": "abc"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(Unauthenticated):
            auth.decode_access_token(token, settings)


class TestAuthenticate:

    def test_valid_header(self, settings):
        token = auth.create_access_token(7, settings)
        assert auth.authenticate(f"Bearer {token}", settings) == 7

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header(self, settings, header):
        with pytest.raises(Unauthenticated) as exc_info:
            auth.authenticate(header, settings)
        assert not isinstance(exc_info.value, MalformedHeader)

    @pytest.mark.parametrize("header", ["Bearer", "Token abc", "bearer abc", "Bearer a b", "abc"])
    def test_malformed_header(self, settings, header):
        with pytest.raises(MalformedHeader):
            auth.authenticate(header, settings)

    def test_garbage_token(self, settings):
        with pytest.raises(Unauthenticated):
            auth.authenticate("Bearer not-a-jwt", settings)


class TestCredentialService:

    def test_register_then_login(self, db, settings):
        user = auth.register_user(db, "Ada", "ada@example.com", "s3cret")
        assert user.hashed_password != "s3cret"

        token = auth.login(db, "ada@example.com", "s3cret", settings)
        assert auth.decode_access_token(token, settings) == user.id

    def test_duplicate_email(self, db):
        auth.register_user(db, "Ada", "ada@example.com", "s3cret")
        with pytest.raises(Conflict):
            auth.register_user(db, "Ada Again", "ada@example.com", "other")

    def test_unknown_email(self, db, settings):
        with pytest.raises(NotFound):
            auth.login(db, "nobody@example.com", "whatever", settings)

    @pytest.mark.parametrize("attempt", ["s3cre", "s3cret ", "S3cret", "s3cret1", ""])
    def test_wrong_password(self, db, settings, attempt):
        auth.register_user(db, "Ada", "ada@example.com", "s3cret")
        with pytest.raises(InvalidCredentials):
            auth.login(db, "ada@example.com", attempt, settings)

    def test_long_password_differs_only_after_72_bytes(self, db, settings):
        auth.register_user(db, "Ada", "ada@example.com", "a" * 72 + "correct")
        with pytest.raises(InvalidCredentials):
            auth.login(db, "ada@example.com", "a" * 72 + "WRONG", settings)

        token = auth.login(db, "ada@example.com", "a" * 72 + "correct", settings)
        assert auth.decode_access_token(token, settings)

import time

import jwt
import pytest
from fastapi import HTTPException

from app.core.config import settings
from app.core.jwt_utils import (
    create_access_token,
    create_account_session,
    create_wallet_session,
    verify_token,
)


class TestSessionTokens:
    def test_round_trip(self):
        payload = verify_token(create_access_token("user-1", 60, {"role": "USER"}))

        assert payload["sub"] == "user-1"
        assert payload["role"] == "USER"
        assert payload["exp"] - payload["iat"] == 60

    def test_extra_claims_cannot_override_subject(self):
        payload = verify_token(create_access_token("user-1", 60, {"sub": "admin"}))
        assert payload["sub"] == "user-1"

    def test_wallet_and_account_lifetimes(self):
        wallet = verify_token(create_wallet_session("user-1", "0xabc"))
        account = verify_token(create_account_session("user-1", "a@example.com"))

        assert wallet["exp"] - wallet["iat"] == settings.WALLET_TOKEN_EXPIRE_SECONDS
        assert account["exp"] - account["iat"] == settings.ACCOUNT_TOKEN_EXPIRE_SECONDS
        assert wallet["address"] == "0xabc"
        assert account["email"] == "a@example.com"

    @pytest.mark.parametrize("subject, expires_in", [("", 60), ("user-1", 0)])
    def test_invalid_arguments(self, subject, expires_in):
        with pytest.raises(ValueError):
            create_access_token(subject, expires_in)

    def test_expired(self):
        now = int(time.time())
        token = jwt.encode(
            {"sub": "user-1", "iat": now - 120, "exp": now - 60},
            settings.ENCODE_KEY,
            algorithm=settings.ENCODE_ALGORITHM,
        )
        with pytest.raises(HTTPException) as exc_info:
            verify_token(token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token expired"

    def test_wrong_key(self):
        token = jwt.encode({"sub": "user-1"}, "another-key-0123456789abcdef0123456789abcdef", algorithm="HS256")
        with pytest.raises(HTTPException) as exc_info:
            verify_token(token)
        assert exc_info.value.detail == "Invalid token"

    def test_missing_subject(self):
        token = jwt.encode({"exp": int(time.time()) + 60}, settings.ENCODE_KEY, algorithm=settings.ENCODE_ALGORITHM)
        with pytest.raises(HTTPException) as exc_info:
            verify_token(token)
        assert exc_info.value.detail == "Invalid token payload"

    def test_missing_token(self):
        with pytest.raises(HTTPException):
            verify_token("")

"""
JWT Token Utilities

This module is the session issuer. After a user proves control of a wallet (or logs in
with email and password) it creates a self-contained JWT used on subsequent requests.
There is no server-side session table and no revocation list: expiry is the only way a
session ends.

Flow:
1. User verifies wallet signature -> create_wallet_session() generates JWT
2. User logs in with email/password -> create_account_session() generates JWT
3. User makes API request with JWT in Authorization header -> verify_token() validates it
4. Protected endpoints use get_current_user_id() from dependencies.py to extract the user id

The JWT contains:
- sub: The application user id
- iat: Issued at timestamp
- exp: Expiration timestamp
- address / email: The credential the session was opened with

Wallet sessions and account sessions have distinct lifetimes
(WALLET_TOKEN_EXPIRE_SECONDS and ACCOUNT_TOKEN_EXPIRE_SECONDS).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import HTTPException, status

from app.core.config import settings


if not settings.ENCODE_KEY:
    raise RuntimeError("ENCODE_KEY is not configured")


def create_access_token(
    subject: str, expires_in: int, extra_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Create a signed JWT asserting ``subject``.

    Args:
        subject: The user id the token is issued for
        expires_in: Lifetime in seconds
        extra_claims: Optional additional claims to include in the JWT payload

    Returns:
        A JWT token string that can be used in Authorization: Bearer <token> header

    Raises:
        ValueError: If subject is empty or the lifetime is not positive
    """
    if not subject:
        raise ValueError("subject is required")
    if expires_in <= 0:
        raise ValueError("expires_in must be positive")

    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {}
    if extra_claims:
        payload.update(extra_claims)
    payload.update(
        {
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
        }
    )

    return jwt.encode(payload, settings.ENCODE_KEY, algorithm=settings.ENCODE_ALGORITHM)


def create_wallet_session(user_id: str, address: str) -> str:
    return create_access_token(
        user_id,
        settings.WALLET_TOKEN_EXPIRE_SECONDS,
        {"address": address, "auth_method": "wallet"},
    )


def create_account_session(user_id: str, email: str) -> str:
    return create_access_token(
        user_id,
        settings.ACCOUNT_TOKEN_EXPIRE_SECONDS,
        {"email": email, "auth_method": "account"},
    )


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Checks token signature, expiration, and that the subject claim is present.

    Args:
        token: The JWT token string from Authorization header

    Returns:
        Decoded JWT payload dictionary containing sub and other claims

    Raises:
        HTTPException 401: If token is missing, expired, invalid, or missing sub
    """
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    try:
        payload = jwt.decode(token, settings.ENCODE_KEY, algorithms=[settings.ENCODE_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    return payload

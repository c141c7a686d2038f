"""
FastAPI Authentication Dependencies
This module provides FastAPI dependency functions that can be injected into route handlers
to automatically extract and validate JWT tokens from the Authorization header.
Usage in endpoints:
    @router.get("/protected")
    def protected_route(user: CurrentUser = Depends(get_current_user)):
        # user.id is automatically extracted from JWT token
        return {"user": user.id}
Flow:
1. Client sends request with Authorization: Bearer <token> header
2. FastAPI calls get_current_user() dependency
3. _extract_token() extracts token from header
4. verify_token() validates the JWT (from jwt_utils.py)
5. The user row is loaded and last_active_at is touched
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.jwt_utils import verify_token
from app.db.session import get_db
from app.models.users import User
from app.services.accounts import AccountService
from app.services.wallet_auth import WalletAuthenticator


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str]
    claims: Dict[str, Any]


def _extract_token(authorization: Optional[str]) -> Dict[str, Any]:
    """
    Extract JWT token from Authorization header.
    Supports both "Bearer <token>" and plain token formats.
    Args:
        authorization: The Authorization header value (e.g., "Bearer eyJ...")
    Returns:
        The decoded token payload
    Raises:
        HTTPException 401: If Authorization header is missing or invalid
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="A token is required for authentication",
        )

    authorization = authorization.strip()
    if authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
    else:
        token = authorization
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header",
        )

    return verify_token(token)


def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Resolve the bearer token to an existing user.
    A well-signed token for a user that no longer exists is rejected.
    """
    payload = _extract_token(authorization)
    user = db.get(User, payload["sub"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Token")

    user.last_active_at = datetime.now(timezone.utc)  # type: ignore
    db.commit()

    return CurrentUser(id=user.id, email=user.email, claims=payload)


def get_current_user_id(user: CurrentUser = Depends(get_current_user)) -> str:
    return user.id


def get_wallet_authenticator(db: Session = Depends(get_db)) -> WalletAuthenticator:
    return WalletAuthenticator(db)


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)

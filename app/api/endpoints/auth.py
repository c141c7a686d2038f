from enum import Enum
from typing import List

from fastapi import Depends, status

from app.core.dependencies import get_account_service, get_wallet_authenticator
from app.core.router_decorated import APIRouter
import app.schemas.auth as schemas
from app.services.accounts import AccountService
from app.services.wallet_auth import WalletAuthenticator

router = APIRouter()
group_tags: List[str | Enum] = ["Auth"]


@router.post(
    "/nonce",
    tags=group_tags,
    response_model=schemas.NonceResponse,
    status_code=status.HTTP_200_OK,
)
def request_nonce(
    body: schemas.NonceRequest,
    auth: WalletAuthenticator = Depends(get_wallet_authenticator),
) -> schemas.NonceResponse:
    """
    Generate and store a login nonce for a wallet address.

    Any nonce previously issued for the same address stops being valid.
    The wallet signs the returned ``message``.
    """
    challenge = auth.request_login_challenge(body.address).unwrap()
    return schemas.NonceResponse(
        nonce=challenge.nonce, message=challenge.message, expires_in=challenge.expires_in
    )


@router.post(
    "/verify",
    tags=group_tags,
    response_model=schemas.AuthResponse,
)
def verify_wallet(
    body: schemas.VerifyRequest,
    auth: WalletAuthenticator = Depends(get_wallet_authenticator),
) -> schemas.AuthResponse:
    """
    Verify a signed nonce and return a wallet session token.

    First login from an address provisions a new user bound to it; later
    logins return a session for the same user. The nonce is single-use.
    """
    session = auth.login(body.address, body.signature).unwrap()
    return schemas.AuthResponse(
        token=session.token,
        user_id=session.user_id,
        address=session.address,
        is_new_user=session.is_new_user,
    )


@router.post(
    "/auth/signup",
    tags=group_tags,
    response_model=schemas.SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup(
    body: schemas.SignupRequest,
    accounts: AccountService = Depends(get_account_service),
) -> schemas.SignupResponse:
    """Create an email/password account and its profile."""
    user = accounts.signup(body.email, body.password).unwrap()
    return schemas.SignupResponse(user_id=user.id)


@router.post(
    "/auth/login",
    tags=group_tags,
    response_model=schemas.LoginResponse,
)
def login(
    body: schemas.LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> schemas.LoginResponse:
    """Log in with email and password and return an account session token."""
    session = accounts.login(body.email, body.password).unwrap()
    return schemas.LoginResponse(token=session.token, user_id=session.user_id)

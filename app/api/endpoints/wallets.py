from enum import Enum
from typing import List

from fastapi import Depends, status

from app.core.dependencies import get_current_user_id, get_wallet_authenticator
from app.core.router_decorated import APIRouter
import app.schemas.auth as schemas
from app.services.wallet_auth import WalletAuthenticator

router = APIRouter()
group_tags: List[str | Enum] = ["Wallets"]


"""
Wallets linked to the logged-in user.

Linking is a second challenge/response round keyed by the user id instead of
the address: the user asks for a nonce, signs the returned message with the
wallet to link, and posts address + signature.
"""


@router.get(
    "/me/wallets/nonce",
    tags=group_tags,
    response_model=schemas.NonceResponse,
    status_code=status.HTTP_200_OK,
)
def request_link_nonce(
    user_id: str = Depends(get_current_user_id),
    auth: WalletAuthenticator = Depends(get_wallet_authenticator),
) -> schemas.NonceResponse:
    """Issue the message to sign for linking a wallet to the current account."""
    challenge = auth.request_link_challenge(user_id).unwrap()
    return schemas.NonceResponse(
        nonce=challenge.nonce, message=challenge.message, expires_in=challenge.expires_in
    )


@router.post(
    "/me/wallets",
    tags=group_tags,
    response_model=schemas.LinkWalletResponse,
)
def link_wallet(
    body: schemas.VerifyRequest,
    user_id: str = Depends(get_current_user_id),
    auth: WalletAuthenticator = Depends(get_wallet_authenticator),
) -> schemas.LinkWalletResponse:
    """
    Link a wallet after verifying its signature.

    - 401 when the signature was not made by ``address``
    - 409 when the wallet already belongs to another account
    - linking a wallet the account already owns succeeds again
    """
    wallet = auth.link_wallet(user_id, body.address, body.signature).unwrap()
    return schemas.LinkWalletResponse(wallet=schemas.WalletResponse.from_wallet(wallet))


@router.get(
    "/me/wallets",
    tags=group_tags,
    response_model=schemas.WalletListResponse,
)
def get_linked_wallets(
    user_id: str = Depends(get_current_user_id),
    auth: WalletAuthenticator = Depends(get_wallet_authenticator),
) -> schemas.WalletListResponse:
    """List the wallets linked to the current account, oldest first."""
    wallets = auth.list_wallets(user_id).unwrap()
    return schemas.WalletListResponse(
        wallets=[schemas.WalletResponse.from_wallet(w) for w in wallets]
    )


@router.put(
    "/me/wallets/{address}/primary",
    tags=group_tags,
    response_model=schemas.LinkWalletResponse,
)
def set_primary_wallet(
    address: str,
    user_id: str = Depends(get_current_user_id),
    auth: WalletAuthenticator = Depends(get_wallet_authenticator),
) -> schemas.LinkWalletResponse:
    """Mark one of the current account's wallets as primary."""
    wallet = auth.set_primary(user_id, address).unwrap()
    return schemas.LinkWalletResponse(
        message="Primary wallet updated.",
        wallet=schemas.WalletResponse.from_wallet(wallet),
    )

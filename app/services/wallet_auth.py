"""
Wallet authentication service

Runs the challenge/response scheme end to end:

    request challenge -> (client signs off-system) -> submit proof
        -> consume nonce -> recover signer -> bind identity -> commit -> issue session

Consuming the nonce and writing the binding happen in one transaction. If any
step fails the transaction is rolled back, so a rejected proof never leaves a
consumed-but-unbound nonce behind. Every public method returns an AuthResult;
store errors become ``upstream_failure`` and are not retried.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.eth_auth import (
    InvalidSignatureError,
    link_message,
    login_message,
    normalize_address,
    recover_address,
)
from app.core.jwt_utils import create_wallet_session
from app.models.auth import Wallet
from app.services.auth_result import AuthError, AuthErrorKind, AuthResult
from app.services.identity_binder import IdentityBinder
from app.services.nonce_store import NonceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Challenge:
    nonce: str
    message: str
    expires_in: int


@dataclass(frozen=True)
class WalletSession:
    token: str
    user_id: str
    address: str
    is_new_user: bool


class WalletAuthenticator:
    def __init__(
        self,
        db: Session,
        nonces: Optional[NonceStore] = None,
        binder: Optional[IdentityBinder] = None,
    ) -> None:
        self.db = db
        self.nonces = nonces or NonceStore(db)
        self.binder = binder or IdentityBinder(db)

    # wallet as primary login

    def request_login_challenge(self, address: str) -> AuthResult[Challenge]:
        if not address or not address.strip():
            return AuthResult.failure(AuthErrorKind.BAD_REQUEST, "Wallet address is required.")
        try:
            key = normalize_address(address)
        except ValueError as e:
            return AuthResult.failure(AuthErrorKind.BAD_REQUEST, str(e))
        return self._issue(key, login_message)

    def login(self, address: str, signature: str) -> AuthResult[WalletSession]:
        if not address or not address.strip() or not signature or not signature.strip():
            return AuthResult.failure(
                AuthErrorKind.BAD_REQUEST, "Wallet address and signature are required."
            )
        try:
            normalized = normalize_address(address)
        except ValueError as e:
            return AuthResult.failure(AuthErrorKind.BAD_REQUEST, str(e))

        try:
            consumed = self.nonces.consume(normalized)
            if not consumed.ok:
                self.db.rollback()
                return AuthResult(error=consumed.error)

            error = self._check_proof(normalized, login_message(consumed.value), signature)
            if error is not None:
                self.db.rollback()
                return AuthResult(error=error)

            bound = self.binder.resolve_or_provision(normalized)
            if not bound.ok:
                self.db.rollback()
                return AuthResult(error=bound.error)
            self.db.commit()
        except SQLAlchemyError as e:
            return self._upstream_failure("wallet login", e)

        identity = bound.value
        token = create_wallet_session(identity.user_id, normalized)
        logger.info("wallet login for user %s", identity.user_id)
        return AuthResult.success(
            WalletSession(
                token=token,
                user_id=identity.user_id,
                address=normalized,
                is_new_user=identity.is_new_user,
            )
        )

    # linking extra wallets to an authenticated account

    def request_link_challenge(self, user_id: str) -> AuthResult[Challenge]:
        return self._issue(user_id, link_message)

    def link_wallet(self, user_id: str, address: str, signature: str) -> AuthResult[Wallet]:
        if not address or not address.strip() or not signature or not signature.strip():
            return AuthResult.failure(
                AuthErrorKind.BAD_REQUEST, "Signature and address are required."
            )
        try:
            normalized = normalize_address(address)
        except ValueError as e:
            return AuthResult.failure(AuthErrorKind.BAD_REQUEST, str(e))

        try:
            consumed = self.nonces.consume(user_id)
            if not consumed.ok:
                self.db.rollback()
                return AuthResult(error=consumed.error)

            error = self._check_proof(normalized, link_message(consumed.value), signature)
            if error is not None:
                self.db.rollback()
                return AuthResult(error=error)

            linked = self.binder.link(user_id, normalized)
            if not linked.ok:
                self.db.rollback()
                return linked
            self.db.commit()
        except SQLAlchemyError as e:
            return self._upstream_failure("wallet link", e)

        return linked

    def list_wallets(self, user_id: str) -> AuthResult[List[Wallet]]:
        try:
            return AuthResult.success(self.binder.list_wallets(user_id))
        except SQLAlchemyError as e:
            return self._upstream_failure("wallet listing", e)

    def set_primary(self, user_id: str, address: str) -> AuthResult[Wallet]:
        try:
            normalized = normalize_address(address)
        except ValueError as e:
            return AuthResult.failure(AuthErrorKind.BAD_REQUEST, str(e))
        try:
            result = self.binder.set_primary(user_id, normalized)
            if result.ok:
                self.db.commit()
            else:
                self.db.rollback()
        except SQLAlchemyError as e:
            return self._upstream_failure("primary wallet update", e)
        return result

    def _issue(self, key: str, render: Callable[[str], str]) -> AuthResult[Challenge]:
        try:
            record = self.nonces.issue(key)
        except SQLAlchemyError as e:
            return self._upstream_failure("nonce issuance", e)
        return AuthResult.success(
            Challenge(
                nonce=record.nonce,
                message=render(record.nonce),
                expires_in=self.nonces.expiry_seconds,
            )
        )

    @staticmethod
    def _check_proof(address: str, message: str, signature: str) -> Optional[AuthError]:
        try:
            recovered = recover_address(message, signature)
        except InvalidSignatureError as e:
            logger.info("rejected malformed signature for %s: %s", address, e)
            return AuthError(AuthErrorKind.INVALID_SIGNATURE, "Invalid signature.")
        if recovered != address:
            logger.info("signature for %s was made by %s", address, recovered)
            return AuthError(
                AuthErrorKind.INVALID_SIGNATURE,
                "Invalid signature. Wallet ownership verification failed.",
            )
        return None

    def _upstream_failure(self, operation: str, error: Exception) -> AuthResult:
        self.db.rollback()
        logger.exception("%s failed: %s", operation, error)
        return AuthResult.failure(
            AuthErrorKind.UPSTREAM_FAILURE, f"Error during {operation}. Please try again."
        )

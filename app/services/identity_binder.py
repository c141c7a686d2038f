import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.auth import Wallet
from app.models.users import User
from app.services.auth_result import AuthErrorKind, AuthResult

logger = logging.getLogger(__name__)

ALREADY_LINKED = "This wallet is already linked to another account."


@dataclass(frozen=True)
class BoundIdentity:
    user_id: str
    address: str
    is_new_user: bool


class IdentityBinder:
    """Maps verified wallet addresses to users.

    Addresses must already be normalized. Nothing here commits: writes are
    flushed so the unique index on ``wallets.address`` gets the final say,
    and the caller commits the whole unit of work. On a uniqueness violation
    the session is rolled back and the result is a conflict.
    """

    def __init__(
        self,
        db: Session,
        chain: Optional[str] = None,
        email_domain: Optional[str] = None,
    ) -> None:
        self.db = db
        self.chain = chain or settings.WALLET_CHAIN
        self.email_domain = email_domain or settings.WALLET_EMAIL_DOMAIN

    def find_binding(self, address: str) -> Optional[Wallet]:
        return self.db.query(Wallet).filter(Wallet.address == address).first()

    def synthetic_email(self, address: str) -> str:
        return f"{address}@{self.email_domain}"

    def resolve_or_provision(self, address: str) -> AuthResult[BoundIdentity]:
        """Wallet-as-login: return the owner of ``address``, creating one if needed."""
        wallet = self.find_binding(address)
        if wallet is not None:
            user = self.db.get(User, wallet.user_id)
            if user is not None:
                user.last_active_at = datetime.now(timezone.utc)  # type: ignore
            return AuthResult.success(
                BoundIdentity(user_id=wallet.user_id, address=address, is_new_user=False)
            )

        try:
            user, created = self._provision(address)
            self._insert_binding(user.id, address, primary=not self._has_primary(user.id))
        except IntegrityError:
            self.db.rollback()
            logger.warning("lost binding race for %s", address)
            return AuthResult.failure(AuthErrorKind.CONFLICT, ALREADY_LINKED)

        logger.info("bound %s to %s user %s", address, "new" if created else "existing", user.id)
        return AuthResult.success(BoundIdentity(user_id=user.id, address=address, is_new_user=created))

    def link(self, user_id: str, address: str) -> AuthResult[Wallet]:
        """Account linking: attach ``address`` to an already authenticated user."""
        wallet = self.find_binding(address)
        if wallet is not None:
            if wallet.user_id == user_id:
                return AuthResult.success(wallet)
            return AuthResult.failure(AuthErrorKind.CONFLICT, ALREADY_LINKED)

        try:
            # first linked wallet becomes the primary one
            wallet = self._insert_binding(user_id, address, primary=not self._has_wallets(user_id))
        except IntegrityError:
            self.db.rollback()
            logger.warning("lost binding race for %s", address)
            return AuthResult.failure(AuthErrorKind.CONFLICT, ALREADY_LINKED)

        logger.info("linked %s to user %s", address, user_id)
        return AuthResult.success(wallet)

    def list_wallets(self, user_id: str) -> List[Wallet]:
        return (
            self.db.query(Wallet)
            .filter(Wallet.user_id == user_id)
            .order_by(Wallet.linked_at.asc(), Wallet.id.asc())
            .all()
        )

    def set_primary(self, user_id: str, address: str) -> AuthResult[Wallet]:
        wallets = self.list_wallets(user_id)
        target = next((w for w in wallets if w.address == address), None)
        if target is None:
            return AuthResult.failure(
                AuthErrorKind.NOT_FOUND, "Wallet is not linked to this account."
            )
        for wallet in wallets:
            wallet.is_primary = wallet is target  # type: ignore
        self.db.flush()
        return AuthResult.success(target)

    def _provision(self, address: str) -> Tuple[User, bool]:
        """Create the identity behind a wallet-only login.

        A user carrying the synthetic email without a wallet row is left over
        from an interrupted earlier attempt; that identity is reused.
        """
        email = self.synthetic_email(address)
        existing = self.db.query(User).filter(User.email == email).first()
        if existing is not None:
            existing.last_active_at = datetime.now(timezone.utc)  # type: ignore
            return existing, False

        user = User(email=email)
        self.db.add(user)
        self.db.flush()
        return user, True

    def _insert_binding(self, user_id: str, address: str, primary: bool) -> Wallet:
        wallet = Wallet(
            user_id=user_id,
            address=address,
            blockchain_type=self.chain,
            is_primary=primary,
            linked_at=datetime.now(timezone.utc),
        )
        self.db.add(wallet)
        self.db.flush()
        return wallet

    def _has_wallets(self, user_id: str) -> bool:
        return self.db.query(Wallet.id).filter(Wallet.user_id == user_id).first() is not None

    def _has_primary(self, user_id: str) -> bool:
        return (
            self.db.query(Wallet.id)
            .filter(Wallet.user_id == user_id, Wallet.is_primary.is_(True))
            .first()
            is not None
        )

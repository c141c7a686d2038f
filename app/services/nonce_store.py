import logging
import time

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.eth_auth import generate_nonce
from app.models.auth import AuthNonce
from app.services.auth_result import AuthErrorKind, AuthResult

logger = logging.getLogger(__name__)


class NonceStore:
    """Single-use challenges, one per key.

    ``issue`` commits on its own; when two requests issue for the same key,
    the last one to commit wins. ``consume`` only flushes the delete of a live
    nonce: the caller commits it together with whatever the verified signature
    unlocks, or rolls both back. An expired nonce is deleted and committed
    right away.
    """

    def __init__(self, db: Session, expiry_seconds: int | None = None) -> None:
        self.db = db
        if expiry_seconds is None:
            expiry_seconds = settings.NONCE_EXPIRY_SECONDS
        self.expiry_seconds = expiry_seconds

    def issue(self, key: str) -> AuthNonce:
        nonce = generate_nonce()
        now = int(time.time())
        expires_at = now + self.expiry_seconds

        # delete-then-insert, so a retried request just replaces the row
        self.db.query(AuthNonce).filter(AuthNonce.key == key).delete(synchronize_session="fetch")
        record = AuthNonce(key=key, nonce=nonce, created_at=now, expires_at=expires_at)
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # another request inserted the key after our delete
            self.db.rollback()
            logger.debug("concurrent nonce issue for %s, overwriting", key)
            record = self.db.get(AuthNonce, key)
            if record is None:
                record = AuthNonce(key=key)
                self.db.add(record)
            record.nonce = nonce
            record.created_at = now
            record.expires_at = expires_at
            self.db.commit()
        logger.debug("issued nonce for %s", key)
        return record

    def consume(self, key: str) -> AuthResult[str]:
        record = (
            self.db.query(AuthNonce)
            .filter(AuthNonce.key == key)
            .with_for_update()
            .first()
        )
        if record is None:
            return AuthResult.failure(
                AuthErrorKind.NOT_FOUND, "Nonce not found or expired. Please request a new one."
            )

        nonce = record.nonce
        expired = record.expires_at < int(time.time())
        self.db.delete(record)
        self.db.flush()

        if expired:
            # the expired row is gone for good
            self.db.commit()
            return AuthResult.failure(
                AuthErrorKind.NOT_FOUND, "Nonce not found or expired. Please request a new one."
            )
        return AuthResult.success(nonce)

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, Integer, String

from app.db.base import Base


class AuthNonce(Base):
    """Model for storing wallet authentication nonces.

    ``key`` is the lowercased wallet address for the login flow and the
    user id for the wallet-linking flow. One live nonce per key.
    """

    __tablename__ = "auth_nonce"

    key = Column(String(255), primary_key=True)
    nonce = Column(String(128), nullable=False)
    created_at = Column(BigInteger, nullable=False)
    expires_at = Column(BigInteger, nullable=False)


class Wallet(Base):
    """Binding between a wallet address and a user.

    Example:
    {
        "id": 1,
        "user_id": "550e8400-e29b-41d4-a716-446655440000",
        "address": "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        "blockchain_type": "ethereum",
        "is_primary": true,
        "linked_at": "2024-01-01T12:00:00"
    }
    """

    __tablename__ = "wallets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    # the unique index is what keeps concurrent binds from producing two rows
    address = Column(String(42), nullable=False, unique=True)
    blockchain_type = Column(String(32), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)
    linked_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

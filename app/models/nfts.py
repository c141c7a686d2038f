from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base


class Collection(Base):
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)


class Nft(Base):
    """Model for nfts table
    Example:
    {
        "id": 1,
        "token_id": "12",
        "name": "Garment #12",
        "description": "Limited tee",
        "image_url": "ipfs://Qm...",
        "price": 0.05,
        "on_chain_status": "MINTED",
        "creator_id": "550e8400-e29b-41d4-a716-446655440000",
        "owner_id": "550e8400-e29b-41d4-a716-446655440000"
    }
    """

    __tablename__ = "nfts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token_id = Column(String(78), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    p_hash = Column(String(64), nullable=True)
    has_warning = Column(Boolean, nullable=False, default=False)
    metadata_url = Column(Text, nullable=True)
    on_chain_status = Column(String(32), nullable=True)
    collection_id = Column(Integer, ForeignKey("collections.id"), nullable=True)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    collection = relationship("Collection", lazy="joined")

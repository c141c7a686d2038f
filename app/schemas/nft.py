from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from app.schemas.my_base_model import CustomBaseModel


class NameRef(CustomBaseModel):
    name: str = ""


class UserRef(CustomBaseModel):
    nickname: str = "Unknown"


class NftSummary(CustomBaseModel):
    """Card shown in NFT listings"""

    tokenId: str = ""
    name: str = ""
    imageUrl: Optional[str] = None
    price: Optional[float] = None
    creator: UserRef = Field(default_factory=UserRef)


class Pagination(CustomBaseModel):
    total: int = 0
    limit: int = 20
    offset: int = 0


class NftListResponse(CustomBaseModel):
    nfts: List[NftSummary] = []
    pagination: Pagination = Field(default_factory=Pagination)


class NftDetail(CustomBaseModel):
    """Full NFT record for the detail page"""

    model_config = ConfigDict(populate_by_name=True)

    id: int = 0
    collection: NameRef = Field(default_factory=lambda: NameRef(name="N/A"))
    creator: UserRef = Field(default_factory=UserRef)
    owner: UserRef = Field(default_factory=UserRef)
    name: str = ""
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    p_hash: Optional[str] = None
    has_warning: bool = False
    tokenId: str = ""
    metadata_url: Optional[str] = None
    on_chain_status: Optional[str] = None
    created_at: Optional[datetime] = None
    price: Optional[float] = None

from enum import Enum
from typing import Dict, Iterable, List

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.router_decorated import APIRouter
from app.db.session import get_db
from app.models.nfts import Nft
from app.models.users import UserProfile
from app.schemas.nft import NameRef, NftDetail, NftListResponse, NftSummary, Pagination, UserRef

router = APIRouter()
group_tags: List[str | Enum] = ["NFT"]


def _nicknames(db: Session, user_ids: Iterable[str | None]) -> Dict[str, str]:
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    rows = (
        db.query(UserProfile.user_id, UserProfile.public_username)
        .filter(UserProfile.user_id.in_(ids))
        .all()
    )
    return {row.user_id: row.public_username for row in rows}


def _user_ref(nicknames: Dict[str, str], user_id: str | None) -> UserRef:
    if user_id and user_id in nicknames:
        return UserRef(nickname=nicknames[user_id])
    return UserRef()


def _summaries(db: Session, nfts: List[Nft]) -> List[NftSummary]:
    nicknames = _nicknames(db, (nft.creator_id for nft in nfts))
    return [
        NftSummary(
            tokenId=nft.token_id,
            name=nft.name,
            imageUrl=nft.image_url,
            price=nft.price,
            creator=_user_ref(nicknames, nft.creator_id),
        )
        for nft in nfts
    ]


@router.get(
    "/search",
    tags=group_tags,
    response_model=NftListResponse,
)
def search_nfts(
    q: str = Query(default="", description="Text to look for in name or description"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
) -> NftListResponse:
    """Case-insensitive search on NFT name and description. An empty query returns nothing."""
    q = q.strip()
    if not q:
        return NftListResponse(nfts=[], pagination=Pagination(total=0, limit=limit, offset=offset))

    pattern = f"%{q}%"
    query = db.query(Nft).filter(or_(Nft.name.ilike(pattern), Nft.description.ilike(pattern)))
    total = query.count()
    nfts = query.order_by(Nft.created_at.desc(), Nft.id.desc()).offset(offset).limit(limit).all()
    return NftListResponse(
        nfts=_summaries(db, nfts),
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.get(
    "",
    tags=group_tags,
    response_model=NftListResponse,
)
def get_all_nfts(
    limit: int = Query(default=20, ge=1, le=100, description="Maximum number of NFTs to return"),
    offset: int = Query(default=0, ge=0, description="Number of NFTs to skip"),
    db: Session = Depends(get_db),
) -> NftListResponse:
    """List NFTs, newest first."""
    query = db.query(Nft)
    total = query.count()
    nfts = query.order_by(Nft.created_at.desc(), Nft.id.desc()).offset(offset).limit(limit).all()
    return NftListResponse(
        nfts=_summaries(db, nfts),
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.get(
    "/{token_id}",
    tags=group_tags,
    response_model=NftDetail,
)
def get_nft_details(token_id: str, db: Session = Depends(get_db)) -> NftDetail:
    nft = db.query(Nft).filter(Nft.token_id == token_id).first()
    if nft is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"NFT with tokenId {token_id} not found.",
        )

    nicknames = _nicknames(db, (nft.creator_id, nft.owner_id))
    return NftDetail(
        id=nft.id,
        collection=NameRef(name=nft.collection.name if nft.collection else "N/A"),
        creator=_user_ref(nicknames, nft.creator_id),
        owner=_user_ref(nicknames, nft.owner_id),
        name=nft.name,
        description=nft.description,
        imageUrl=nft.image_url,
        p_hash=nft.p_hash,
        has_warning=bool(nft.has_warning),
        tokenId=nft.token_id,
        metadata_url=nft.metadata_url,
        on_chain_status=nft.on_chain_status,
        created_at=nft.created_at,
        price=nft.price,
    )

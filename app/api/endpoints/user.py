import logging
from datetime import datetime, timezone
from enum import Enum
from typing import List

from fastapi import Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.dependencies import CurrentUser, get_current_user, get_current_user_id
from app.core.router_decorated import APIRouter
from app.db.session import get_db
from app.models.users import UserProfile
from app.schemas.my_base_model import Message
from app.schemas.user import (
    NicknameAvailability,
    NicknameRequest,
    ProfileResponse,
    ProfileSetupResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    SyncProfileRequest,
)
from app.services.accounts import unique_username

logger = logging.getLogger(__name__)

router = APIRouter()
group_tags: List[str | Enum] = ["user"]

NICKNAME_TAKEN = "Nickname is already taken."


def _nickname_taken(db: Session, nickname: str, exclude_user_id: str | None = None) -> bool:
    query = db.query(UserProfile.user_id).filter(UserProfile.public_username == nickname)
    if exclude_user_id is not None:
        query = query.filter(UserProfile.user_id != exclude_user_id)
    return query.first() is not None


def _profile_dict(profile: UserProfile) -> dict:
    return {
        "user_id": profile.user_id,
        "public_username": profile.public_username,
        "bio": profile.bio,
        "profile_image_url": profile.profile_image_url,
        "updated_at": profile.updated_at.isoformat() if profile.updated_at else None,
    }


def _commit_profile(db: Session) -> None:
    """Commit a nickname write; the unique index catches a concurrent claim."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=NICKNAME_TAKEN)


@router.post(
    "/me/profile",
    tags=group_tags,
    response_model=ProfileSetupResponse,
)
def setup_profile(
    body: NicknameRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProfileSetupResponse:
    """Set the nickname right after sign-up."""
    if _nickname_taken(db, body.nickname):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=NICKNAME_TAKEN)

    profile = db.get(UserProfile, user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found.")

    profile.public_username = body.nickname  # type: ignore
    profile.updated_at = datetime.now(timezone.utc)  # type: ignore
    _commit_profile(db)
    return ProfileSetupResponse(user=_profile_dict(profile))


@router.get(
    "/check-nickname",
    tags=group_tags,
    response_model=NicknameAvailability,
)
def check_nickname(
    nickname: str = Query(default="", description="Nickname to check"),
    db: Session = Depends(get_db),
) -> NicknameAvailability:
    """Tell whether a nickname is still free."""
    nickname = nickname.strip()
    if not nickname:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nickname query parameter is required.",
        )
    return NicknameAvailability(isAvailable=not _nickname_taken(db, nickname))


@router.get(
    "/me",
    tags=group_tags,
    response_model=ProfileResponse,
)
def get_my_profile(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    profile = db.get(UserProfile, user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found.")
    return ProfileResponse(public_username=profile.public_username, bio=profile.bio)


@router.put(
    "/me/profile",
    tags=group_tags,
    response_model=ProfileUpdateResponse,
)
def update_my_profile(
    body: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProfileUpdateResponse:
    """
    Update nickname and/or bio.

    At least one field is required. The nickname is checked against every
    other user; keeping your own nickname is fine.
    """
    nickname = body.nickname.strip() if body.nickname else None
    if not nickname and body.bio is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No update fields provided.")

    profile = db.get(UserProfile, user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found.")

    if nickname:
        if _nickname_taken(db, nickname, exclude_user_id=user_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=NICKNAME_TAKEN)
        profile.public_username = nickname  # type: ignore
    if body.bio is not None:
        profile.bio = body.bio  # type: ignore
    profile.updated_at = datetime.now(timezone.utc)  # type: ignore
    _commit_profile(db)

    return ProfileUpdateResponse(
        profile=ProfileResponse(public_username=profile.public_username, bio=profile.bio)
    )


@router.post(
    "/sync-profile",
    tags=group_tags,
    response_model=Message,
    responses={201: {"model": Message}},
)
def sync_user_profile(
    body: SyncProfileRequest | None = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create the profile right after the first login if it does not exist yet.

    Returns 201 when a profile was created, 200 when it already existed.
    """
    if db.get(UserProfile, user.id) is not None:
        return Message(message="Profile already exists.")

    meta = body.userMetaData if body else {}
    db.add(
        UserProfile(
            user_id=user.id,
            email=user.email,
            public_username=unique_username(db, f"user_{user.id[:8]}"),
            bio="",
            profile_image_url=meta.get("avatar_url"),
        )
    )
    _commit_profile(db)
    logger.info("created profile for %s", user.id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=Message(message="Profile created and synced.", status_code=201).model_dump(),
    )

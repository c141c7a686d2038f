from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.my_base_model import CustomBaseModel

NICKNAME_MAX_LENGTH = 64


class NicknameRequest(BaseModel):
    """Request model for first-time profile setup"""

    nickname: str = Field(..., description="Public username")

    @field_validator("nickname")
    @classmethod
    def validate_nickname(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nickname is required.")
        if len(v) > NICKNAME_MAX_LENGTH:
            raise ValueError(f"Nickname must be at most {NICKNAME_MAX_LENGTH} characters.")
        return v


class ProfileUpdateRequest(BaseModel):
    """Request model for profile update, every field optional"""

    nickname: Optional[str] = Field(None, description="New public username")
    bio: Optional[str] = Field(None, description="New bio, empty string clears it")


class SyncProfileRequest(BaseModel):
    userMetaData: Dict[str, Any] = Field(
        default_factory=dict, description="Metadata from the identity provider (avatar_url, ...)"
    )


class ProfileResponse(CustomBaseModel):
    """Response model for user profile"""

    public_username: str = ""
    bio: Optional[str] = None


class ProfileSetupResponse(CustomBaseModel):
    message: str = "Profile updated successfully."
    user: Dict[str, Any] = {}


class ProfileUpdateResponse(CustomBaseModel):
    message: str = "Profile updated successfully"
    profile: ProfileResponse


class NicknameAvailability(CustomBaseModel):
    isAvailable: bool = False

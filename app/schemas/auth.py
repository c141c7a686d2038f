from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from app.schemas.my_base_model import CustomBaseModel


class NonceRequest(BaseModel):
    """Request model for nonce generation - input validation"""

    address: str = Field(..., description="Wallet address (0x...)")


class NonceResponse(CustomBaseModel):
    """Response model for nonce generation - output

    ``message`` is the exact text the wallet has to sign.
    """

    nonce: str = ""
    message: str = ""
    expires_in: int = 0


class VerifyRequest(BaseModel):
    """Request model for wallet verification - input validation"""

    address: str = Field(..., description="Wallet address (0x...)")
    signature: str = Field(..., description="personal_sign signature of the issued message")


class AuthResponse(CustomBaseModel):
    """Response model for wallet login - output"""

    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user_id: str
    address: str
    is_new_user: bool = False


class SignupRequest(BaseModel):
    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password, at least 8 characters")


class SignupResponse(CustomBaseModel):
    message: str = "User created successfully"
    user_id: str = ""


class LoginRequest(BaseModel):
    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class LoginResponse(CustomBaseModel):
    message: str = "User logged in successfully"
    token: str
    token_type: str = "bearer"
    user_id: str


class WalletResponse(CustomBaseModel):
    """A wallet bound to the current user"""

    address: str = ""
    chain: str = ""
    is_primary: bool = False
    linked_at: datetime

    @classmethod
    def from_wallet(cls, wallet) -> "WalletResponse":
        return cls(
            address=wallet.address,
            chain=wallet.blockchain_type,
            is_primary=wallet.is_primary,
            linked_at=wallet.linked_at,
        )


class WalletListResponse(CustomBaseModel):
    wallets: List[WalletResponse] = []


class LinkWalletResponse(CustomBaseModel):
    message: str = "Wallet linked successfully!"
    wallet: WalletResponse

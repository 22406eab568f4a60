from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class ErrorCode(str, Enum):
    # Auth related
    UNAUTHORIZED = "AUTH_001"
    FORBIDDEN = "AUTH_002"
    TOKEN_EXPIRED = "AUTH_003"
    INVALID_CREDENTIALS = "AUTH_004"

    # Account related
    ACCOUNT_ALREADY_EXISTS = "ACCOUNT_001"
    ACCOUNT_NOT_FOUND = "ACCOUNT_002"


class Error(BaseModel):
    code: ErrorCode
    message: str
    details: Optional[dict] = None


class BaseResponse(BaseModel):
    success: bool = True
    data: Optional[dict] = None
    error: Optional[Error] = None
    meta: Optional[dict] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    email: Optional[EmailStr] = None
    account_id: Optional[int] = None


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    referral_code: Optional[str] = Field(None, max_length=32, description="추천 코드")

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if v.strip() == "":
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("referral_code")
    @classmethod
    def normalize_referral_code(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().upper()
        return v or None


class AccountLogin(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    account_id: int
    token: Token

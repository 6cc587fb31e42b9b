from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class SignUpRequest(BaseModel):
    first_name: str = Field(..., min_length=3, max_length=20)
    last_name: Optional[str] = ""
    email: EmailStr
    password: str = Field(..., min_length=6)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenRefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


class UserClaims(BaseModel):
    """Identity claims embedded in both the access and the refresh token."""
    email: str
    first_name: str
    id: str


class TokenData(BaseModel):
    user_id: str
    email: Optional[str] = None
    first_name: Optional[str] = None

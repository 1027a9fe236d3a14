"""
Account schemas. The stored password hash never leaves the server.
"""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Public profile of an account."""
    id: str
    email: str
    name: str
    created_at: datetime


class TokenResponse(BaseModel):
    """Bearer token issued by register and login, with the signed-in profile."""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

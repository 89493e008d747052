from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from .base import CamelModel


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class SignupResponse(CamelModel):
    message: str = "User created successfully"
    user_id: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class UserPublic(BaseModel):
    id: str
    username: str
    email: str
    avatar_url: str | None = None


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserPublic

# cuaderno/schemas/user.py
"""
Pydantic schemas for User entity and the auth endpoints.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field

from .base import BaseSchema, BaseResponseSchema


class UserCreate(BaseSchema):
    """
    Row-level data for a new user (password already hashed).
    """
    email: EmailStr
    password_hash: str
    full_name: Optional[str] = None


class UserUpdate(BaseSchema):
    """
    Schema for updating user profile / login bookkeeping.
    """
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    password_hash: Optional[str] = None
    last_login_at: Optional[datetime] = None


class SignupRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = Field(None, max_length=255)


class LoginRequest(BaseSchema):
    email: EmailStr
    password: str


class AuthResponse(BaseSchema):
    user_id: int
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseResponseSchema):
    """
    Current user as returned to the frontend.
    """
    email: EmailStr
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    last_login_at: Optional[datetime] = None

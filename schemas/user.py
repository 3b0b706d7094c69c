from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class UserBase(BaseModel):
    """Base schema for user data."""
    username: str = Field(..., min_length=3, max_length=30)

    @field_validator('username', mode='before')
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserCreate(UserBase):
    """Schema for registering a new user."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator('email', mode='after')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "example_user",
                "email": "user@example.com",
                "password": "secret123"
            }
        }
    }


class UserLogin(BaseModel):
    """Schema for logging in with email and password."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    """Public user fields embedded in videos and comments."""
    id: int
    username: str
    avatar: Optional[str] = None
    subscribers: int = 0

    model_config = {"from_attributes": True}


class UserResponse(UserSummary):
    """Full public profile of a user."""
    email: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthResponse(UserResponse):
    """User profile plus a freshly issued bearer token."""
    token: str

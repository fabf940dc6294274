from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class User(BaseModel):
    """A user as exposed to callers; the password hash never leaves the store"""
    id: str
    username: str
    email: str
    bio: str = ""
    avatar: str = ""
    created_at: Optional[datetime] = None


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None

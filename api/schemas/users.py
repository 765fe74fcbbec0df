"""User profile and admin identity schemas."""

from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator

from api.schemas.common import CamelModel
from core.utils.validators import validate_phone, validate_url


class UserProfileResponse(CamelModel):
    id: int
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    github: Optional[str] = None
    linkedin: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime


class UserProfileUpdate(CamelModel):
    """Profile edit. Email is the identity key and cannot be changed here."""

    name: Optional[str] = Field(None, max_length=200)
    image: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=200)
    website: Optional[str] = Field(None, max_length=500)
    github: Optional[str] = Field(None, max_length=500)
    linkedin: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator("*", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        """Trim strings; blank becomes None."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("website", "github", "linkedin", "image")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        ok, error = validate_url(v)
        if not ok:
            raise ValueError(error)
        return v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        ok, error = validate_phone(v)
        if not ok:
            raise ValueError(error)
        return v


class UserProfileEnvelope(CamelModel):
    user: UserProfileResponse
    message: Optional[str] = None


class AdminResponse(CamelModel):
    id: int
    email: str
    name: Optional[str] = None
    is_active: bool
    created_at: datetime


class AdminVerifyResponse(CamelModel):
    is_admin: bool = True
    admin: AdminResponse

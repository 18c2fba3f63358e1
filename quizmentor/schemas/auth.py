"""Authentication schemas"""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from quizmentor.core.config import settings
from quizmentor.models.user import Language, UserRole
from quizmentor.schemas.common import CamelModel


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserRegister(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)
    preferred_language: Optional[Language] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, v):
        return _normalize_email(v)

    @field_validator("preferred_language", mode="before")
    @classmethod
    def blank_language_is_default(cls, v):
        return v or None


class UserLogin(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, v):
        return _normalize_email(v)


class UserPublic(CamelModel):
    """User view returned to clients; never carries the credential"""
    id: int
    name: str
    email: str
    role: UserRole
    preferred_language: Language
    current_level: int
    profile_picture: Optional[str] = None
    is_active: bool = True


class AuthResponse(CamelModel):
    message: str
    user: UserPublic
    token: str

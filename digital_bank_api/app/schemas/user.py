"""
Pydantic models for user data.

Passwords are accepted on input only; no read schema exposes them.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator

from .common import PageMeta, check_password_strength, ensure_confirmed

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Alice"])
    email: str = Field(..., max_length=254, pattern=EMAIL_PATTERN, examples=["alice@example.com"])

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class UserCreate(UserBase):
    """Schema for registering a user."""

    password: str = Field(..., examples=["Secret-1"])
    password_confirm: str = Field(..., min_length=1, examples=["Secret-1"])

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self):
        return ensure_confirmed(self)


class UserUpdate(UserBase):
    """Schema for changing a user's name and email."""


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    id: int


class UserChanged(UserRead):
    message: str


class UserPage(PageMeta):
    data: List[UserRead]

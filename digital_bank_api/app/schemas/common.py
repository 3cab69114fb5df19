"""
Shared pieces of the request and response schemas.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer, field_validator, model_validator

SPECIAL_CHARACTERS = set("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

# Two-place decimal amount, written to JSON as a number.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def check_password_strength(value: str) -> str:
    """Reject passwords that do not satisfy the complexity rules.

    6 to 32 printable Latin characters with at least one lowercase
    letter, one uppercase letter, one digit and one special character,
    and no whitespace.
    """
    if not 6 <= len(value) <= 32:
        raise ValueError("Password must be between 6 and 32 characters")
    if any(ch.isspace() for ch in value):
        raise ValueError("Password must not contain white spaces")
    if any(not (32 < ord(ch) < 127) for ch in value):
        raise ValueError("Password must contain only Latin characters")
    if not any(ch.islower() for ch in value):
        raise ValueError("Password must contain at least 1 lowercase character")
    if not any(ch.isupper() for ch in value):
        raise ValueError("Password must contain at least 1 uppercase character")
    if not any(ch.isdigit() for ch in value):
        raise ValueError("Password must contain at least 1 numeric character")
    if not any(ch in SPECIAL_CHARACTERS for ch in value):
        raise ValueError("Password must contain at least 1 special character")
    return value


def ensure_confirmed(model, field: str = "password"):
    """Check that ``password_confirm`` repeats ``field`` on ``model``."""
    if getattr(model, field) != model.password_confirm:
        raise ValueError("Password confirmation mismatched")
    return model


class PasswordChange(BaseModel):
    """Payload for changing an account or user password."""

    password_old: str = Field(..., min_length=1, examples=["Old-pass1"])
    password_new: str = Field(..., examples=["New-pass1"])
    password_confirm: str = Field(..., min_length=1, examples=["New-pass1"])

    @field_validator("password_new")
    @classmethod
    def validate_password_new(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordChange":
        return ensure_confirmed(self, "password_new")


class PasswordChanged(BaseModel):
    id: int
    message: str = "Password changed successfully"


class PageMeta(BaseModel):
    """Pagination fields shared by every collection response."""

    page_number: int
    page_size: int
    count: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool


class ErrorResponse(BaseModel):
    """Body of every error response."""

    code: str = Field(..., examples=["NOT_FOUND"])
    message: str = Field(..., examples=["Unknown Bank Account"])

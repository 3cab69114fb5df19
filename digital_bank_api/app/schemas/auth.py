"""
Login request and response models.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, examples=["admin@example.com"])
    password: str = Field(..., min_length=1)


class LoginResult(BaseModel):
    email: str
    name: str
    user_id: int
    token: str
    token_type: str = "bearer"

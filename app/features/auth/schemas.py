"""Request/response schemas for the Auth feature"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.user import SessionUser


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str = Field(..., min_length=6)
    display_name: Optional[str] = Field(None, alias="displayName")


class SessionResponse(BaseModel):
    """Identity plus the token the client sends as ``Authorization: Bearer``"""
    user: SessionUser
    access_token: Optional[str] = None

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials sent to the login endpoint."""

    eclinic_id: str = Field(..., description="eCloud login ID")
    password: str = Field(..., description="Password")


class User(BaseModel):
    """Partial user metadata embedded in LoginResponse."""

    id: int = Field(0, description="eCloud user ID")
    eclinic_id: str = Field("", description="Unique eCloud ID")
    created_at: Optional[datetime] = Field(None, description="Set by the server when the user is created")
    is_admin: bool = Field(False, description="Whether the user is an administrator")
    active: bool = Field(False, description="Whether the account is allowed to login")


class LoginResponse(BaseModel):
    """Decoded login response."""

    token: str = Field("", description="Bearer (JWT) token")
    user: User = Field(default_factory=User)

"""
Request and response models for the identity gateway.

Request fields are optional on purpose: a missing field is a 400 with the
gateway's own message, not a framework-generated 422.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict


class SignupRequest(BaseModel):
    """Signup body."""
    model_config = ConfigDict(extra="ignore")

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Login body."""
    model_config = ConfigDict(extra="ignore")

    username: Optional[str] = None
    password: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    """Password reset body."""
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None


class LogoutRequest(BaseModel):
    """Logout body."""
    model_config = ConfigDict(extra="ignore")

    token: Optional[str] = None


class MessageResponse(BaseModel):
    """Success envelope with a message only."""
    success: bool = True
    message: str


class SignupResponse(MessageResponse):
    """Signup result."""
    userId: Optional[str] = None


class LoginResponse(MessageResponse):
    """Login result."""
    token: Optional[str] = None
    id_token: Optional[str] = None
    expires_in: Optional[int] = None


class ProfileResponse(BaseModel):
    """Profile fetch result."""
    success: bool = True
    profile: Dict[str, Any]


class GatewayResult(BaseModel):
    """Status code plus envelope body for a completed operation."""
    status_code: int
    body: Dict[str, Any]

    @classmethod
    def of(cls, status_code: int, response: BaseModel) -> "GatewayResult":
        return cls(status_code=status_code, body=response.model_dump())


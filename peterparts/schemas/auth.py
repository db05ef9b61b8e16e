from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr

from peterparts.models.user import Role
from peterparts.schemas.user import CamelModel, UserResponse


class SendOtpRequest(BaseModel):
    """Schema for requesting a login code."""
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    """Schema for submitting a login code."""
    email: EmailStr
    code: str


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str


class AuthResponse(BaseModel):
    """Schema for a successful login. The session itself travels in a cookie."""
    user: UserResponse
    message: str


class TokenPayload(CamelModel):
    """Claims of a session token whose signature and expiry were verified."""
    user_id: str
    email: str
    role: Role


class UnverifiedClaims(BaseModel):
    """
    Claims read from a token without checking its signature.

    Diagnostic only. Kept as a separate type so it can never be handed to
    code that expects a verified ``TokenPayload``.
    """
    claims: Dict[str, Any]

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self.claims.get(key, default)


class GoogleProfile(BaseModel):
    """Identity returned by Google after a successful code exchange."""
    sub: str
    email: EmailStr
    name: Optional[str] = None
    picture: Optional[str] = None

"""
Interior Tracker - Authentication Schemas
"""
import time
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class Credentials(BaseModel):
    """Email and password as entered on the sign-in form."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthSession(BaseModel):
    """
    The current session, passed explicitly wherever it is needed.

    Created at sign-in, kept in the cookie session (browser) or sent as a
    Bearer token (API), and dropped at sign-out.
    """
    access_token: str
    user_id: str
    email: Optional[str] = None
    expires_at: Optional[int] = None  # epoch seconds

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) >= self.expires_at


class UserResponse(BaseModel):
    """Current user without the token."""
    id: str
    email: Optional[str]


class Token(BaseModel):
    """Sign-in response for API clients."""
    access_token: str
    token_type: str = "bearer"
    expires_at: Optional[int] = None
    user: UserResponse


class MessageResponse(BaseModel):
    message: str

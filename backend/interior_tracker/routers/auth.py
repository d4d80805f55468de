"""
Interior Tracker - Authentication Router
Sign-up, sign-in and sign-out for API clients
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm

from interior_tracker.backends.base import Backend
from interior_tracker.schemas.auth import (
    AuthSession,
    Credentials,
    MessageResponse,
    Token,
    UserResponse,
)
from interior_tracker.services.auth import (
    SessionGate,
    get_backend,
    get_current_session_required,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/signup", response_model=MessageResponse)
async def sign_up(
    credentials: Credentials,
    backend: Backend = Depends(get_backend)
):
    """
    Register a new account.

    No session is returned: the user confirms by email first.
    """
    message = await SessionGate(backend.auth).sign_up(credentials.email, credentials.password)
    return MessageResponse(message=message)


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    backend: Backend = Depends(get_backend)
):
    """
    Sign in and return the provider's access token.

    Use form data with 'username' (the email address) and 'password' fields.
    """
    session = await SessionGate(backend.auth).sign_in(form_data.username, form_data.password)

    return Token(
        access_token=session.access_token,
        expires_at=session.expires_at,
        user=UserResponse(id=session.user_id, email=session.email)
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_session: AuthSession = Depends(get_current_session_required)
):
    """Get current authenticated user information."""
    return UserResponse(id=current_session.user_id, email=current_session.email)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_session: AuthSession = Depends(get_current_session_required),
    backend: Backend = Depends(get_backend)
):
    """End the session at the provider; the client drops its token."""
    await SessionGate(backend.auth, current_session).sign_out()
    return MessageResponse(message="Logged out successfully")

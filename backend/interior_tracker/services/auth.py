"""
Interior Tracker - Session Gate
Who is signed in, and the FastAPI dependencies that gate routes on it
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from interior_tracker.backends.base import Backend, SessionProvider
from interior_tracker.schemas.auth import AuthSession

logger = logging.getLogger(__name__)

# Cookie-session key holding the signed-in AuthSession
SESSION_KEY = "auth_session"

SIGN_UP_MESSAGE = "Check your email for the confirmation link!"

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


class LoginRequired(Exception):
    """Raised by HTML routes when there is no session; answered with a redirect to /auth."""


class SessionGate:
    """
    Sign-in state for one caller.

    The session is explicit: it starts as whatever the caller presented,
    is set by sign_in and cleared by sign_out. Provider errors propagate
    unchanged so their message reaches the user verbatim.
    """

    def __init__(self, provider: SessionProvider, session: Optional[AuthSession] = None):
        self.provider = provider
        self.session = session

    def is_authenticated(self) -> bool:
        return self.session is not None and not self.session.is_expired()

    async def sign_in(self, email: str, password: str) -> AuthSession:
        self.session = await self.provider.sign_in(email, password)
        return self.session

    async def sign_up(self, email: str, password: str) -> str:
        """Register; no session is created until the user confirms."""
        await self.provider.sign_up(email, password)
        return SIGN_UP_MESSAGE

    async def sign_out(self) -> None:
        if self.session is not None:
            await self.provider.sign_out(self.session)
        self.session = None


# ============================================================
# Cookie session helpers
# ============================================================

def load_session(request: Request) -> Optional[AuthSession]:
    data = request.session.get(SESSION_KEY)
    if not data:
        return None
    return AuthSession(**data)


def store_session(request: Request, session: AuthSession) -> None:
    request.session[SESSION_KEY] = session.model_dump()


def clear_session(request: Request) -> None:
    request.session.pop(SESSION_KEY, None)


# ============================================================
# Dependency functions for FastAPI
# ============================================================

def get_backend(request: Request) -> Backend:
    """The provider set created at startup."""
    return request.app.state.backend


async def get_current_session(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    backend: Backend = Depends(get_backend)
) -> Optional[AuthSession]:
    """Bearer token first (API clients), then the browser's cookie session."""
    if token:
        return await backend.auth.current_user(token)

    session = load_session(request)
    if session is None or session.is_expired():
        return None
    return session


async def get_current_session_required(
    current_session: Optional[AuthSession] = Depends(get_current_session)
) -> AuthSession:
    """Require an authenticated caller, raise 401 if not authenticated."""
    if not current_session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_session


async def get_session_backend(
    current_session: AuthSession = Depends(get_current_session_required),
    backend: Backend = Depends(get_backend)
) -> Backend:
    """Stores acting on behalf of the signed-in caller."""
    return backend.bind(current_session)


def get_session_gate(
    request: Request,
    backend: Backend = Depends(get_backend)
) -> SessionGate:
    return SessionGate(backend.auth, load_session(request))


async def require_view_session(
    request: Request,
    gate: SessionGate = Depends(get_session_gate)
) -> AuthSession:
    """HTML routes: no (or an expired) session sends the browser to /auth."""
    if not gate.is_authenticated():
        clear_session(request)
        raise LoginRequired()
    return gate.session


async def get_view_backend(
    current_session: AuthSession = Depends(require_view_session),
    backend: Backend = Depends(get_backend)
) -> Backend:
    return backend.bind(current_session)

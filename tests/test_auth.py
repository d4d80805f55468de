"""
Session Gate and local Session Provider tests
"""
import time

import pytest
from jose import jwt

from interior_tracker.errors import AuthenticationFailed, RemoteServiceError
from interior_tracker.schemas.auth import AuthSession
from interior_tracker.services.auth import SIGN_UP_MESSAGE, SessionGate

EMAIL = "designer@example.com"
PASSWORD = "correct horse battery"


@pytest.fixture
async def registered(backend):
    await backend.auth.sign_up(EMAIL, PASSWORD)
    return backend


def test_session_expiry():
    session = AuthSession(access_token="t", user_id="u", expires_at=1000)

    assert session.is_expired(now=1000)
    assert not session.is_expired(now=999)
    assert not AuthSession(access_token="t", user_id="u").is_expired()


def test_gate_without_session():
    assert not SessionGate(provider=None).is_authenticated()


def test_gate_with_expired_session():
    expired = AuthSession(access_token="t", user_id="u", expires_at=int(time.time()) - 10)
    assert not SessionGate(provider=None, session=expired).is_authenticated()


async def test_sign_up_creates_no_session(backend):
    gate = SessionGate(backend.auth)

    message = await gate.sign_up(EMAIL, PASSWORD)

    assert message == SIGN_UP_MESSAGE
    assert not gate.is_authenticated()


async def test_duplicate_sign_up(registered):
    with pytest.raises(RemoteServiceError, match="User already registered"):
        await SessionGate(registered.auth).sign_up(EMAIL, PASSWORD)


async def test_sign_in_and_out(registered):
    gate = SessionGate(registered.auth)

    session = await gate.sign_in(EMAIL, PASSWORD)

    assert gate.is_authenticated()
    assert session.email == EMAIL
    assert session.user_id
    assert session.expires_at > time.time()

    await gate.sign_out()

    assert gate.session is None
    assert not gate.is_authenticated()


@pytest.mark.parametrize("email,password", [(EMAIL, "wrong"), ("nobody@example.com", PASSWORD)])
async def test_sign_in_failure(registered, email, password):
    gate = SessionGate(registered.auth)

    with pytest.raises(AuthenticationFailed, match="Invalid login credentials"):
        await gate.sign_in(email, password)

    assert not gate.is_authenticated()


async def test_current_user_from_token(registered):
    session = await registered.auth.sign_in(EMAIL, PASSWORD)

    resolved = await registered.auth.current_user(session.access_token)

    assert resolved.user_id == session.user_id
    assert resolved.email == EMAIL


async def test_current_user_rejects_bad_token(registered):
    assert await registered.auth.current_user("not-a-jwt") is None


async def test_current_user_rejects_foreign_signature(registered):
    session = await registered.auth.sign_in(EMAIL, PASSWORD)
    forged = jwt.encode({"sub": session.user_id, "email": EMAIL}, "some-other-secret", algorithm="HS256")

    assert await registered.auth.current_user(forged) is None

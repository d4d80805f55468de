"""
Interior Tracker - Error Types

Every failure is scoped to the single user action that triggered it:
- ValidationFailed: rejected before any network call
- RemoteServiceError: the auth, record or blob provider failed; message is the provider's
- InvalidViewState: an annotator transition the current view state does not allow
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError


class TrackerError(Exception):
    """Base class for errors reported back to the user."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(TrackerError):
    status_code = status.HTTP_400_BAD_REQUEST


class RemoteServiceError(TrackerError):
    status_code = status.HTTP_502_BAD_GATEWAY


class NotFound(RemoteServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class AuthenticationFailed(RemoteServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidViewState(TrackerError):
    status_code = status.HTTP_409_CONFLICT


async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    """Render a TrackerError the way FastAPI renders HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


def validation_message(exc: PydanticValidationError) -> str:
    """First problem of a pydantic ValidationError as one readable line."""
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    field = ".".join(str(loc) for loc in first.get("loc", ()))
    return f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid input")

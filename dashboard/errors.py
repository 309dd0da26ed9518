"""
Error types surfaced to the API and the screens.

Backend failures keep the provider's own message; only the HTTP status is
derived here.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from firebase_admin import exceptions as firebase_exceptions
from google.api_core import exceptions as google_exceptions

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A failure reported by (or on behalf of) the managed backend."""

    status_code = 502

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(BackendError):
    status_code = 404


class AuthError(BackendError):
    status_code = 401


class PermissionDeniedError(BackendError):
    status_code = 403


class ConflictError(BackendError):
    status_code = 409


_FIREBASE_CODES: dict[str, type[BackendError]] = {
    firebase_exceptions.NOT_FOUND: NotFoundError,
    firebase_exceptions.ALREADY_EXISTS: ConflictError,
    firebase_exceptions.CONFLICT: ConflictError,
    firebase_exceptions.PERMISSION_DENIED: PermissionDeniedError,
    firebase_exceptions.UNAUTHENTICATED: AuthError,
}


def from_firebase_error(exc: firebase_exceptions.FirebaseError) -> BackendError:
    error_class = _FIREBASE_CODES.get(exc.code)
    if error_class is not None:
        return error_class(str(exc))
    if exc.code == firebase_exceptions.INVALID_ARGUMENT:
        return BackendError(str(exc), status_code=400)
    return BackendError(str(exc))


def from_google_error(exc: google_exceptions.GoogleAPICallError) -> BackendError:
    message = exc.message or str(exc)
    if isinstance(exc, google_exceptions.NotFound):
        return NotFoundError(message)
    if isinstance(exc, google_exceptions.PermissionDenied):
        return PermissionDeniedError(message)
    if isinstance(exc, google_exceptions.Unauthenticated):
        return AuthError(message)
    if isinstance(exc, (google_exceptions.AlreadyExists, google_exceptions.Conflict)):
        return ConflictError(message)
    return BackendError(message)


@contextmanager
def translate_backend_errors(operation: str) -> Iterator[None]:
    """Re-raises SDK exceptions raised inside the block as BackendError."""
    try:
        yield
    except firebase_exceptions.FirebaseError as exc:
        logger.warning("%s failed: %s", operation, exc)
        raise from_firebase_error(exc) from exc
    except google_exceptions.GoogleAPICallError as exc:
        logger.warning("%s failed: %s", operation, exc)
        raise from_google_error(exc) from exc

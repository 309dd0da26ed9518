"""
Authentication abstraction for Firebase Auth and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Protocol

import requests
from firebase_admin import auth
from firebase_admin import exceptions as firebase_exceptions

from dashboard.errors import (
    AuthError,
    BackendError,
    ConflictError,
    NotFoundError,
    from_firebase_error,
    translate_backend_errors,
)
from shared.types import Session, UserAccount

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_SIGN_IN_URL = (
    "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
)
REQUEST_TIMEOUT = 30  # seconds
MIN_PASSWORD_LENGTH = 6


class AuthClient(Protocol):
    def sign_up(
        self, email: str, password: str, display_name: str = ""
    ) -> UserAccount:
        ...

    def sign_in(self, email: str, password: str) -> Session:
        ...

    def verify_session(self, id_token: str) -> str:
        ...

    def get_user(self, uid: str) -> UserAccount:
        ...

    def update_user(self, uid: str, display_name: str) -> UserAccount:
        ...


class InMemoryAuthClient:
    """Test double that keeps accounts and issued tokens in dicts."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}

    def _find_by_email(self, email: str) -> Optional[str]:
        for uid, user in self.users.items():
            if user["email"] == email.lower():
                return uid
        return None

    def sign_up(
        self, email: str, password: str, display_name: str = ""
    ) -> UserAccount:
        if self._find_by_email(email):
            raise ConflictError(
                "The user with the provided email already exists (EMAIL_EXISTS)."
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise BackendError(
                "WEAK_PASSWORD : Password should be at least 6 characters",
                status_code=400,
            )
        uid = uuid.uuid4().hex[:28]
        self.users[uid] = {
            "email": email.lower(),
            "password": password,
            "display_name": display_name,
        }
        return self.get_user(uid)

    def sign_in(self, email: str, password: str) -> Session:
        uid = self._find_by_email(email)
        if not uid or self.users[uid]["password"] != password:
            raise AuthError("INVALID_LOGIN_CREDENTIALS")
        token = uuid.uuid4().hex
        self.tokens[token] = uid
        return Session(uid=uid, id_token=token, expires_in=3600)

    def verify_session(self, id_token: str) -> str:
        uid = self.tokens.get(id_token or "")
        if not uid:
            raise AuthError("Invalid or expired session")
        return uid

    def get_user(self, uid: str) -> UserAccount:
        user = self.users.get(uid)
        if not user:
            raise NotFoundError(f"No user record found for uid {uid}")
        return UserAccount(
            uid=uid, email=user["email"], display_name=user["display_name"]
        )

    def update_user(self, uid: str, display_name: str) -> UserAccount:
        if uid not in self.users:
            raise NotFoundError(f"No user record found for uid {uid}")
        self.users[uid]["display_name"] = display_name
        return self.get_user(uid)

    def reset(self) -> None:
        self.users.clear()
        self.tokens.clear()


class FirebaseAuthClient:
    """
    Firebase Auth via the Admin SDK.

    The Admin SDK cannot check passwords, so sign-in goes through the
    Identity Toolkit REST API with the project's web API key.
    """

    def __init__(self, client: auth.Client, api_key: Optional[str]):
        self.client = client
        self.api_key = api_key

    def _to_account(self, record: auth.UserRecord) -> UserAccount:
        return UserAccount(
            uid=record.uid,
            email=record.email or "",
            display_name=record.display_name or "",
        )

    def sign_up(
        self, email: str, password: str, display_name: str = ""
    ) -> UserAccount:
        with translate_backend_errors("create user"):
            record = self.client.create_user(
                email=email,
                password=password,
                display_name=display_name or None,
            )
        logger.info("Created user %s", record.uid)
        return self._to_account(record)

    def sign_in(self, email: str, password: str) -> Session:
        if not self.api_key:
            raise BackendError("FIREBASE_API_KEY is required for password sign-in")
        try:
            response = requests.post(
                IDENTITY_TOOLKIT_SIGN_IN_URL,
                params={"key": self.api_key},
                json={
                    "email": email,
                    "password": password,
                    "returnSecureToken": True,
                },
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.warning("Sign-in request failed: %s", e)
            raise BackendError(f"Sign-in request failed: {e}") from e

        if response.status_code != 200:
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = response.text or "Sign-in failed"
            if response.status_code == 400:
                raise AuthError(message)
            raise BackendError(message)

        payload = response.json()
        return Session(
            uid=payload["localId"],
            id_token=payload["idToken"],
            expires_in=int(payload.get("expiresIn", 3600)),
        )

    def verify_session(self, id_token: str) -> str:
        if not id_token:
            raise AuthError("Missing session token")
        try:
            decoded = self.client.verify_id_token(id_token)
        except (auth.InvalidIdTokenError, auth.UserDisabledError, ValueError) as e:
            raise AuthError(str(e)) from e
        except firebase_exceptions.FirebaseError as e:
            logger.warning("verify session failed: %s", e)
            raise from_firebase_error(e) from e
        return decoded["uid"]

    def get_user(self, uid: str) -> UserAccount:
        with translate_backend_errors(f"get user {uid}"):
            return self._to_account(self.client.get_user(uid))

    def update_user(self, uid: str, display_name: str) -> UserAccount:
        with translate_backend_errors(f"update user {uid}"):
            record = self.client.update_user(uid, display_name=display_name or None)
        return self._to_account(record)

"""
Sign-up, sign-in and the user profile document kept alongside each account.
"""

from __future__ import annotations

import logging
import time

from dashboard.auth import AuthClient
from dashboard.documents import DocumentStore
from dashboard.schemas import ProfileUpdate, SignInRequest, SignUpRequest
from shared.firebase_constants import USERS_COLLECTION
from shared.record_convert import from_document, to_document
from shared.types import Session, UserProfile

logger = logging.getLogger(__name__)


def sign_up(
    auth: AuthClient, documents: DocumentStore, payload: SignUpRequest
) -> UserProfile:
    """Creates the auth identity and its users/{uid} profile document."""
    account = auth.sign_up(payload.email, payload.password, payload.display_name)
    profile = UserProfile(
        uid=account.uid,
        email=account.email,
        display_name=account.display_name,
        created_at=time.time(),
    )
    documents.set(USERS_COLLECTION, account.uid, to_document(profile))
    logger.info("Signed up user %s", account.uid)
    return profile


def sign_in(auth: AuthClient, payload: SignInRequest) -> Session:
    return auth.sign_in(payload.email, payload.password)


def current_uid(auth: AuthClient, id_token: str | None) -> str:
    return auth.verify_session(id_token or "")


def get_profile(auth: AuthClient, documents: DocumentStore, uid: str) -> UserProfile:
    data = documents.get(USERS_COLLECTION, uid)
    if data is None:
        # Accounts created outside the dashboard have no profile document yet.
        account = auth.get_user(uid)
        return UserProfile(
            uid=uid, email=account.email, display_name=account.display_name
        )
    return from_document(UserProfile, None, {**data, "uid": uid})


def update_profile(
    auth: AuthClient, documents: DocumentStore, uid: str, payload: ProfileUpdate
) -> UserProfile:
    profile = get_profile(auth, documents, uid)
    if payload.display_name != profile.display_name:
        auth.update_user(uid, payload.display_name)
    profile.display_name = payload.display_name
    profile.phone = payload.phone
    documents.set(USERS_COLLECTION, uid, to_document(profile), merge=True)
    return profile

"""
Firebase Admin SDK initialization.

The SDK is initialized once per process; every caller shares the same
handles to Auth, Firestore, the Realtime Database and Cloud Storage.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

import firebase_admin
from firebase_admin import auth, credentials, db, firestore, storage

from dashboard.config import Settings

logger = logging.getLogger(__name__)

_handles: FirebaseHandles | None = None
_lock = threading.Lock()


@dataclass(frozen=True)
class FirebaseHandles:
    app: firebase_admin.App
    auth: auth.Client
    firestore: Any
    database: db.Reference
    bucket: Any


def _credentials(settings: Settings) -> credentials.Base:
    if settings.google_application_credentials:
        return credentials.Certificate(settings.google_application_credentials)
    return credentials.ApplicationDefault()


def _app_options(settings: Settings) -> dict:
    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    if settings.firebase_database_url:
        options["databaseURL"] = settings.firebase_database_url
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket
    return options


def init_firebase(settings: Settings) -> FirebaseHandles:
    """
    Initialize the default Firebase app and return handles to its services.

    Later calls return the handles built by the first one.
    """
    global _handles
    if _handles is not None:
        return _handles

    with _lock:
        if _handles is not None:
            return _handles

        app = firebase_admin.initialize_app(
            _credentials(settings), _app_options(settings)
        )
        _handles = FirebaseHandles(
            app=app,
            auth=auth.Client(app),
            firestore=firestore.client(app),
            database=db.reference("/", app=app),
            bucket=storage.bucket(app=app),
        )
        logger.info(
            "Initialized Firebase app for project %s", settings.firebase_project_id
        )
        return _handles

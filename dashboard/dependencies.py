"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from dashboard.auth import AuthClient, FirebaseAuthClient, InMemoryAuthClient
from dashboard.config import Settings, get_settings
from dashboard.documents import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
)
from dashboard.firebase import init_firebase
from dashboard.realtime import (
    FirebaseRealtimeStore,
    InMemoryRealtimeStore,
    RealtimeStore,
)
from dashboard.repository import FleetRepository
from dashboard.storage import BlobStore, FirebaseBlobStore, InMemoryBlobStore

_document_store: DocumentStore | None = None
_realtime_store: RealtimeStore | None = None
_blob_store: BlobStore | None = None
_auth_client: AuthClient | None = None


def use_in_memory(settings: Settings) -> bool:
    return settings.use_in_memory_backends or not settings.firebase_project_id


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store so records persist across requests.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if use_in_memory(settings):
        _document_store = InMemoryDocumentStore()
    else:
        _document_store = FirestoreDocumentStore(init_firebase(settings).firestore)
    return _document_store


def get_realtime_store() -> RealtimeStore:
    global _realtime_store
    if _realtime_store:
        return _realtime_store

    settings = get_settings()
    if use_in_memory(settings):
        _realtime_store = InMemoryRealtimeStore()
    else:
        _realtime_store = FirebaseRealtimeStore(init_firebase(settings).database)
    return _realtime_store


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store:
        return _blob_store

    settings = get_settings()
    if use_in_memory(settings):
        _blob_store = InMemoryBlobStore()
    else:
        _blob_store = FirebaseBlobStore(bucket=init_firebase(settings).bucket)
    return _blob_store


def get_auth_client() -> AuthClient:
    global _auth_client
    if _auth_client:
        return _auth_client

    settings = get_settings()
    if use_in_memory(settings):
        _auth_client = InMemoryAuthClient()
    else:
        _auth_client = FirebaseAuthClient(
            init_firebase(settings).auth, settings.firebase_api_key
        )
    return _auth_client


def get_repository() -> FleetRepository:
    return FleetRepository(
        documents=get_document_store(),
        realtime=get_realtime_store(),
        blobs=get_blob_store(),
    )


def reset_clients() -> None:
    """Drop every singleton; the next request builds fresh clients."""
    global _document_store, _realtime_store, _blob_store, _auth_client
    _document_store = None
    _realtime_store = None
    _blob_store = None
    _auth_client = None

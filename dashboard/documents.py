"""
Document store abstraction for Cloud Firestore and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import uuid
from typing import Any, Dict, Optional, Protocol

from google.cloud.firestore_v1.base_query import FieldFilter

from dashboard.errors import translate_backend_errors


class DocumentStore(Protocol):
    """Interface for document access. Collections may be nested paths."""

    def list(
        self, collection: str, filters: Optional[dict] = None
    ) -> list[tuple[str, dict]]:
        ...

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def add(self, collection: str, data: dict) -> str:
        ...

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _collection(self, collection: str) -> Dict[str, dict]:
        return self.collections.setdefault(collection, {})

    def list(
        self, collection: str, filters: Optional[dict] = None
    ) -> list[tuple[str, dict]]:
        items = []
        for doc_id, data in self._collection(collection).items():
            if filters and any(data.get(k) != v for k, v in filters.items()):
                continue
            items.append((doc_id, copy.deepcopy(data)))
        return items

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        data = self._collection(collection).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def add(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        docs = self._collection(collection)
        if merge and doc_id in docs:
            docs[doc_id].update(copy.deepcopy(data))
        else:
            docs[doc_id] = copy.deepcopy(data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()


class FirestoreDocumentStore:
    """Cloud Firestore-backed implementation."""

    def __init__(self, client: Any):
        self.client = client

    def list(
        self, collection: str, filters: Optional[dict] = None
    ) -> list[tuple[str, dict]]:
        query = self.client.collection(collection)
        for field, value in (filters or {}).items():
            query = query.where(filter=FieldFilter(field, "==", value))
        with translate_backend_errors(f"list {collection}"):
            return [(snap.id, snap.to_dict() or {}) for snap in query.stream()]

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with translate_backend_errors(f"get {collection}/{doc_id}"):
            snap = self.client.collection(collection).document(doc_id).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def add(self, collection: str, data: dict) -> str:
        with translate_backend_errors(f"add to {collection}"):
            _, doc_ref = self.client.collection(collection).add(data)
        return doc_ref.id

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        with translate_backend_errors(f"set {collection}/{doc_id}"):
            self.client.collection(collection).document(doc_id).set(data, merge=merge)

    def delete(self, collection: str, doc_id: str) -> None:
        with translate_backend_errors(f"delete {collection}/{doc_id}"):
            self.client.collection(collection).document(doc_id).delete()

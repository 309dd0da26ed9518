"""
Realtime Database abstraction and an in-memory test implementation.

Paths are slash-separated keys relative to the database root.
"""

from __future__ import annotations

import copy
from typing import Any, Optional, Protocol

from firebase_admin import db

from dashboard.errors import translate_backend_errors


class RealtimeStore(Protocol):
    def get(self, path: str) -> Any:
        ...

    def set(self, path: str, value: Any) -> None:
        ...

    def update(self, path: str, values: dict) -> None:
        ...

    def delete(self, path: str) -> None:
        ...


def _segments(path: str) -> list[str]:
    return [part for part in path.strip("/").split("/") if part]


class InMemoryRealtimeStore:
    """Nested-dict tree mirroring the Realtime Database JSON layout."""

    def __init__(self):
        self.tree: dict = {}

    def _parent(self, parts: list[str], create: bool) -> Optional[dict]:
        node = self.tree
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                if not create:
                    return None
                child = {}
                node[part] = child
            node = child
        return node

    def get(self, path: str) -> Any:
        parts = _segments(path)
        if not parts:
            return copy.deepcopy(self.tree) or None
        parent = self._parent(parts, create=False)
        if parent is None:
            return None
        return copy.deepcopy(parent.get(parts[-1]))

    def set(self, path: str, value: Any) -> None:
        parts = _segments(path)
        if not parts:
            self.tree = copy.deepcopy(value) if value else {}
            return
        if value is None:
            self.delete(path)
            return
        self._parent(parts, create=True)[parts[-1]] = copy.deepcopy(value)

    def update(self, path: str, values: dict) -> None:
        for key, value in values.items():
            self.set(f"{path.rstrip('/')}/{key}", value)

    def delete(self, path: str) -> None:
        parts = _segments(path)
        if not parts:
            self.tree = {}
            return
        parent = self._parent(parts, create=False)
        if parent is not None:
            parent.pop(parts[-1], None)

    def reset(self) -> None:
        self.tree = {}


class FirebaseRealtimeStore:
    """Firebase Realtime Database implementation over a root reference."""

    def __init__(self, root: db.Reference):
        self.root = root

    def _ref(self, path: str) -> db.Reference:
        return self.root.child(path.strip("/")) if path.strip("/") else self.root

    def get(self, path: str) -> Any:
        with translate_backend_errors(f"realtime get {path}"):
            return self._ref(path).get()

    def set(self, path: str, value: Any) -> None:
        with translate_backend_errors(f"realtime set {path}"):
            self._ref(path).set(value)

    def update(self, path: str, values: dict) -> None:
        with translate_backend_errors(f"realtime update {path}"):
            self._ref(path).update(values)

    def delete(self, path: str) -> None:
        with translate_backend_errors(f"realtime delete {path}"):
            self._ref(path).delete()

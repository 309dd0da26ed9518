"""
Storage abstraction for Firebase Cloud Storage and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol

from dashboard.errors import NotFoundError, translate_backend_errors


class BlobStore(Protocol):
    """Defines the operations the dashboard needs from object storage."""

    def upload_bytes(
        self, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        ...

    def signed_url(self, path: str, expires_in: int = 3600) -> str:
        ...

    def delete(self, path: str) -> None:
        ...


@dataclass
class InMemoryBlobStore:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def upload_bytes(
        self, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        self.stored_objects[path] = (bytes(data), content_type)

    def signed_url(self, path: str, expires_in: int = 3600) -> str:
        if path not in self.stored_objects:
            raise NotFoundError(f"No object at {path}")
        return f"{self.base_url}/{path}?expires={expires_in}"

    def delete(self, path: str) -> None:
        self.stored_objects.pop(path, None)

    def reset(self) -> None:
        self.stored_objects.clear()


@dataclass
class FirebaseBlobStore:
    """Cloud Storage client over the project's default bucket."""

    bucket: Any

    def upload_bytes(
        self, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        with translate_backend_errors(f"upload {path}"):
            self.bucket.blob(path).upload_from_string(data, content_type=content_type)

    def signed_url(self, path: str, expires_in: int = 3600) -> str:
        with translate_backend_errors(f"sign {path}"):
            return self.bucket.blob(path).generate_signed_url(
                expiration=timedelta(seconds=expires_in), method="GET"
            )

    def delete(self, path: str) -> None:
        with translate_backend_errors(f"delete {path}"):
            self.bucket.blob(path).delete()

"""
Artifact storage interface.

Defines where saved build artifacts and their build records go, enabling
pluggable backends behind the save prompt.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

from ..core.types import Hash

T = TypeVar("T", bound=BaseModel)


class StorageBackend(ABC):
    """Abstract storage backend for saved artifacts."""

    @abstractmethod
    async def store_bytes(self, key: str, data: bytes, metadata: dict[str, Any] | None = None) -> str:
        """Store raw bytes and return the storage key.

        Args:
            key: Storage key/path
            data: Raw bytes to store
            metadata: Optional metadata to associate

        Returns:
            The final storage key
        """
        ...

    @abstractmethod
    async def store_file(self, key: str, source: Path, metadata: dict[str, Any] | None = None) -> str:
        """Copy a local file into storage without loading it whole.

        Args:
            key: Storage key/path.
            source: File to copy.
            metadata: Optional metadata to associate.

        Returns:
            The final storage key.
        """
        ...

    @abstractmethod
    async def store_model(self, key: str, model: BaseModel, metadata: dict[str, Any] | None = None) -> str:
        """Store a Pydantic model as JSON."""
        ...

    @abstractmethod
    async def load_bytes(self, key: str) -> bytes:
        """Load raw bytes from storage.

        Raises:
            FileNotFoundError: If the key does not exist.
        """
        ...

    @abstractmethod
    async def load_model(self, key: str, model_type: type[T]) -> T:
        """Load a Pydantic model stored with store_model."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists in storage."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key and its metadata.

        Returns:
            True if the key was deleted, False if it did not exist.
        """
        ...

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> list[str]:
        """List all keys with the given prefix, sorted."""
        ...

    @abstractmethod
    async def get_metadata(self, key: str) -> dict[str, Any]:
        """Get metadata for a key, or an empty dict."""
        ...

    @staticmethod
    def compute_hash(data: bytes) -> Hash:
        """Compute SHA-256 hash of data.

        Args:
            data: Raw bytes to hash.

        Returns:
            Hexadecimal string representation of the SHA-256 hash.
        """
        return hashlib.sha256(data).hexdigest()

    @abstractmethod
    def get_local_path(self, key: str) -> Path | None:
        """Get the local filesystem path of a stored key, if any.

        Lets the presentation layer tell the user where an artifact was saved.
        """
        ...

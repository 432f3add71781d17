"""
Local filesystem storage backend.

Saved artifacts land under a base directory with a ``.meta.json`` sidecar
holding their hash, size and build details.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

import aiofiles
import aiofiles.os
from pydantic import BaseModel

from .interface import StorageBackend

T = TypeVar("T", bound=BaseModel)

_CHUNK_SIZE = 1024 * 1024


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: Path) -> None:
        """Initialize local storage.

        Args:
            base_path: Base directory for all storage operations
        """
        self.base_path = base_path.resolve()
        self._metadata_suffix = ".meta.json"

    def _get_full_path(self, key: str) -> Path:
        """Map a key to a path inside the base directory.

        Leading separators, parent references and drive colons are stripped so a
        key can never escape the base directory.
        """
        clean_key = key.lstrip("/\\").replace("..", "").replace(":", "")
        full_path = (self.base_path / clean_key).resolve()

        try:
            full_path.relative_to(self.base_path)
        except ValueError:
            clean_key = clean_key.replace("/", "_").replace("\\", "_")
            full_path = self.base_path / clean_key

        return full_path

    def _get_metadata_path(self, key: str) -> Path:
        return self._get_full_path(key + self._metadata_suffix)

    async def _store_metadata(self, key: str, metadata: dict[str, Any]) -> None:
        """Write the metadata sidecar for a key."""
        meta_path = self._get_metadata_path(key)
        meta_path.parent.mkdir(parents=True, exist_ok=True)

        metadata["_stored_at"] = datetime.utcnow().isoformat()
        metadata["_key"] = key

        async with aiofiles.open(meta_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(metadata, indent=2, default=str))

    async def store_bytes(self, key: str, data: bytes, metadata: dict[str, Any] | None = None) -> str:
        full_path = self._get_full_path(key)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(full_path, "wb") as f:
            await f.write(data)

        meta = metadata or {}
        meta["size_bytes"] = len(data)
        meta["hash"] = self.compute_hash(data)
        await self._store_metadata(key, meta)

        return key

    async def store_file(self, key: str, source: Path, metadata: dict[str, Any] | None = None) -> str:
        """Copy a file into storage in chunks, hashing as it goes.

        Raises:
            FileNotFoundError: If the source file does not exist.
        """
        full_path = self._get_full_path(key)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        digest = hashlib.sha256()
        size = 0
        async with aiofiles.open(source, "rb") as src, aiofiles.open(full_path, "wb") as dst:
            while chunk := await src.read(_CHUNK_SIZE):
                digest.update(chunk)
                size += len(chunk)
                await dst.write(chunk)

        meta = metadata or {}
        meta["size_bytes"] = size
        meta["hash"] = digest.hexdigest()
        meta["source"] = str(source)
        await self._store_metadata(key, meta)

        return key

    async def store_model(self, key: str, model: BaseModel, metadata: dict[str, Any] | None = None) -> str:
        meta = metadata or {}
        meta["model_type"] = type(model).__name__
        return await self.store_bytes(key, model.model_dump_json(indent=2).encode("utf-8"), meta)

    async def load_bytes(self, key: str) -> bytes:
        full_path = self._get_full_path(key)

        if not full_path.exists():
            raise FileNotFoundError(f"Key not found: {key}")

        async with aiofiles.open(full_path, "rb") as f:
            return await f.read()

    async def load_model(self, key: str, model_type: type[T]) -> T:
        return model_type.model_validate_json(await self.load_bytes(key))

    async def exists(self, key: str) -> bool:
        return self._get_full_path(key).exists()

    async def delete(self, key: str) -> bool:
        full_path = self._get_full_path(key)
        meta_path = self._get_metadata_path(key)

        deleted = False
        if full_path.exists():
            await aiofiles.os.remove(full_path)
            deleted = True
        if meta_path.exists():
            await aiofiles.os.remove(meta_path)

        return deleted

    async def list_keys(self, prefix: str = "") -> list[str]:
        search_path = self._get_full_path(prefix) if prefix else self.base_path
        if not search_path.exists():
            return []

        return sorted(
            path.relative_to(self.base_path).as_posix()
            for path in search_path.rglob("*")
            if path.is_file() and not path.name.endswith(self._metadata_suffix)
        )

    async def get_metadata(self, key: str) -> dict[str, Any]:
        meta_path = self._get_metadata_path(key)
        if not meta_path.exists():
            return {}

        async with aiofiles.open(meta_path, "r", encoding="utf-8") as f:
            return json.loads(await f.read())

    def get_local_path(self, key: str) -> Path | None:
        full_path = self._get_full_path(key)
        if full_path.exists():
            return full_path
        return None

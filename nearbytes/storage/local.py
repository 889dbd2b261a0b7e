"""
Local file-based storage backend.

Works for any medium mounted as a directory: a local folder, a sync
service folder or a network share.

Directory structure:
    {base_path}/
      blocks/
        {block_hash}.bin        encrypted blocks
      {hex(public_key)}/
        {event_hash}.bin        signed events
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from ..exceptions import StorageIOError
from .base import StorageBackend, StorageConfig
from .file_ops import (
    ensure_directory,
    file_exists,
    list_file_names,
    read_bytes,
    remove_file,
    write_bytes_atomic,
)

logger = logging.getLogger(__name__)


class FilesystemStorageBackend(StorageBackend):
    """Storage backend rooted at a local directory."""

    def __init__(self, base_path: Path | str) -> None:
        """Initialize local storage.

        Args:
            base_path: Root directory of the storage medium
        """
        self.base_path = Path(base_path)

    @classmethod
    def from_config(cls, config: StorageConfig) -> FilesystemStorageBackend:
        return cls(Path(config.storage_dir).expanduser())

    def _resolve(self, path: str) -> Path:
        """Map a relative storage path under base_path.

        Absolute paths and '..' segments are rejected.
        """
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise StorageIOError("resolve", path, ValueError("path escapes storage root"))
        return self.base_path.joinpath(*relative.parts)

    async def write_file(self, path: str, data: bytes) -> None:
        target = self._resolve(path)
        await write_bytes_atomic(target, bytes(data))
        logger.debug("Wrote %d bytes to %s", len(data), path)

    async def read_file(self, path: str) -> bytes | None:
        return await read_bytes(self._resolve(path))

    async def list_files(self, directory: str) -> list[str]:
        return await list_file_names(self._resolve(directory))

    async def create_directory(self, path: str) -> None:
        await ensure_directory(self._resolve(path))

    async def exists(self, path: str) -> bool:
        return await file_exists(self._resolve(path))

    async def delete_file(self, path: str) -> None:
        await remove_file(self._resolve(path))

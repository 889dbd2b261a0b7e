"""
Abstract storage backend interface and configuration.

Defines the contract that every storage medium (local folder, synced
folder, network share) must implement.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import yaml

from ..exceptions import StorageIOError

STORAGE_DIR_ENV = "NEARBYTES_STORAGE_DIR"
DEFAULT_SETTINGS_PATH = Path.home() / ".nearbytes" / "settings.yaml"
DEFAULT_STORAGE_DIR = Path.home() / "MEGA" / "NearbytesStorage"


@dataclass
class StorageConfig:
    """Configuration for a nearbytes storage root.

    Configuration can be provided directly, via environment variables
    or via a YAML settings file:

    Environment Variables:
        NEARBYTES_STORAGE_DIR: Storage root directory

    Settings file (~/.nearbytes/settings.yaml):

    ```yaml
    storage_dir: /mnt/share/nearbytes
    skip_existing_blocks: true
    ```

    Attributes:
        storage_dir: Root of the storage medium
        skip_existing_blocks: Skip block writes whose address already exists
    """

    storage_dir: str = str(DEFAULT_STORAGE_DIR)
    skip_existing_blocks: bool = True

    @classmethod
    def from_environment(cls, settings_path: Path | None = None) -> StorageConfig:
        """Create configuration from the environment, falling back to settings.

        Args:
            settings_path: Optional settings file consulted when the
                environment does not name a storage directory

        Returns:
            StorageConfig populated from environment variables
        """
        config = cls.from_file(settings_path or DEFAULT_SETTINGS_PATH)
        env_dir = os.environ.get(STORAGE_DIR_ENV)
        if env_dir:
            config.storage_dir = env_dir
        return config

    @classmethod
    def from_file(cls, path: Path) -> StorageConfig:
        """Create configuration from a YAML settings file.

        A missing file yields the defaults. An unreadable or malformed
        file is an error.
        """
        path = Path(path)
        if not path.exists():
            return cls()

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StorageIOError("load_settings", str(path), e) from e
        if not isinstance(data, dict):
            raise StorageIOError("load_settings", str(path), ValueError("expected a mapping"))

        return cls(
            storage_dir=str(data.get("storage_dir", DEFAULT_STORAGE_DIR)),
            skip_existing_blocks=bool(data.get("skip_existing_blocks", True)),
        )


class StorageBackend(ABC):
    """Abstract interface for the storage medium.

    Paths are relative, '/'-separated. Implementations must make every
    write atomic (write to a temporary location, then rename into place)
    so readers only ever observe complete files.
    """

    @abstractmethod
    async def write_file(self, path: str, data: bytes) -> None:
        """Atomically write data, creating parent directories.

        Raises:
            StorageIOError: If the write fails
        """
        ...

    @abstractmethod
    async def read_file(self, path: str) -> bytes | None:
        """Read a whole file.

        Returns:
            File contents, or None if the file does not exist

        Raises:
            StorageIOError: If the read fails
        """
        ...

    @abstractmethod
    async def list_files(self, directory: str) -> list[str]:
        """List regular file names in a directory (empty if it does not exist)."""
        ...

    @abstractmethod
    async def create_directory(self, path: str) -> None:
        """Create a directory and its parents (idempotent)."""
        ...

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether a path exists."""
        ...

    @abstractmethod
    async def delete_file(self, path: str) -> None:
        """Delete a file. Deleting an absent file is not an error."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None

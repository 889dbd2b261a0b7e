"""
Storage layer.

Provides the storage backend contract, a filesystem backend, and the
two shared stores built on it: the content-addressed block store and
the per-identity signed event log.

Example:
    >>> from nearbytes.storage import StorageConfig, FilesystemStorageBackend
    >>> config = StorageConfig.from_environment()
    >>> backend = FilesystemStorageBackend.from_config(config)
"""

from .base import (
    DEFAULT_STORAGE_DIR,
    STORAGE_DIR_ENV,
    StorageBackend,
    StorageConfig,
)
from .block_store import BlockStore
from .event_log import EventLog
from .local import FilesystemStorageBackend

__all__ = [
    # Configuration
    "StorageConfig",
    "STORAGE_DIR_ENV",
    "DEFAULT_STORAGE_DIR",
    # Backends
    "StorageBackend",
    "FilesystemStorageBackend",
    # Stores
    "BlockStore",
    "EventLog",
]

"""
Nearbytes

Secret-keyed encrypted file volumes over untrusted shared storage.

Provides:
- Deterministic identities derived from a secret (P-256 key pair + namespace)
- Content-addressed AES-256-GCM encrypted blocks
- Signed, append-only CREATE_FILE / DELETE_FILE event logs
- Replay of verified events into the current file state

Usage:

    >>> from nearbytes import StorageConfig, create_file_service
    >>> service = create_file_service(StorageConfig(storage_dir="/mnt/share/nb"))
    >>> meta = await service.add_file("correct horse battery", "notes.txt", b"hi")
    >>> await service.get_file("correct horse battery", meta.block_hash)
    b'hi'

Storage media:

    # Any directory: local folder, sync service folder, network share
    from nearbytes.storage import FilesystemStorageBackend
"""

from .crypto import CryptoProvider, DefaultCryptoProvider, KeyPair
from .events import (
    CreateFile,
    DeleteFile,
    EventLogEntry,
    EventType,
    FileMetadata,
    FileSystemState,
    SignedEvent,
)

# Exceptions
from .exceptions import (
    BlockNotFoundError,
    CryptoError,
    DecodeError,
    DecryptionError,
    EncryptionError,
    EventNotFoundError,
    InvalidHashError,
    InvalidSecretError,
    KeyDerivationError,
    NearbytesError,
    SigningError,
    StorageError,
    StorageIOError,
    ValidationError,
    VerificationError,
)
from .identity import Identity, derive_identity
from .logging_utils import configure_structured_logging
from .replay import ReplayEngine, Volume
from .service import FileService, StoredData, create_file_service
from .storage import (
    BlockStore,
    EventLog,
    FilesystemStorageBackend,
    StorageBackend,
    StorageConfig,
)

__version__ = "0.1.0"

__all__ = [
    # Facade
    "FileService",
    "StoredData",
    "create_file_service",
    "Volume",
    "ReplayEngine",
    # Identity and crypto
    "Identity",
    "KeyPair",
    "derive_identity",
    "CryptoProvider",
    "DefaultCryptoProvider",
    # Events and state
    "EventType",
    "CreateFile",
    "DeleteFile",
    "SignedEvent",
    "EventLogEntry",
    "FileMetadata",
    "FileSystemState",
    # Storage
    "StorageConfig",
    "StorageBackend",
    "FilesystemStorageBackend",
    "BlockStore",
    "EventLog",
    # Logging
    "configure_structured_logging",
    # Exceptions
    "NearbytesError",
    "ValidationError",
    "InvalidSecretError",
    "InvalidHashError",
    "CryptoError",
    "KeyDerivationError",
    "EncryptionError",
    "DecryptionError",
    "SigningError",
    "VerificationError",
    "StorageError",
    "StorageIOError",
    "BlockNotFoundError",
    "EventNotFoundError",
    "DecodeError",
]

"""
File operations facade.

Composes identity derivation, the block store, the event log and the
replay engine into the operations exposed to front-ends:
open / add / delete / list / get, plus store / retrieve of data under
per-file wrapped keys.

Each call re-derives keys from the secret and re-reads storage; the
service holds no per-identity state. Front-ends must never receive the
secret or private scalar back: results carry only public identity data
and file metadata.

Example:
    >>> service = create_file_service(StorageConfig.from_environment())
    >>> meta = await service.add_file("my long secret", "a.txt", b"hello")
    >>> [f.filename for f in await service.list_files("my long secret")]
    ['a.txt']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .crypto.keys import KeyPair
from .crypto.provider import CryptoProvider, DefaultCryptoProvider
from .events.types import CreateFile, FileMetadata, FileSystemState
from .events.writer import Clock, EventWriter, now_ms
from .exceptions import DecryptionError, ValidationError
from .identity.derivation import derive_identity
from .identity.types import NamespaceMapper, default_namespace_mapper
from .logging_utils import VolumeLoggerAdapter
from .replay import ReplayEngine, Volume
from .storage.base import StorageBackend, StorageConfig
from .storage.block_store import BlockStore
from .storage.event_log import EventLog
from .storage.local import FilesystemStorageBackend

logger = logging.getLogger(__name__)


def _require_filename(filename: str) -> str:
    if not isinstance(filename, str) or not filename.strip():
        raise ValidationError("filename", "File name cannot be empty")
    try:
        filename.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValidationError("filename", "File name is not valid UTF-8", filename) from e
    return filename


@dataclass(frozen=True)
class StoredData:
    """Result of storing data under its own wrapped data key."""

    event_hash: str
    metadata: FileMetadata


class FileService:
    """Secret-keyed file operations over an untrusted storage medium."""

    def __init__(
        self,
        crypto: CryptoProvider,
        storage: StorageBackend,
        clock: Clock | None = None,
        namespace_mapper: NamespaceMapper = default_namespace_mapper,
        skip_existing_blocks: bool = True,
    ) -> None:
        """Initialize the file service.

        Args:
            crypto: Crypto capability
            storage: Storage backend shared by blocks and event logs
            clock: Epoch-milliseconds time source for event timestamps
            namespace_mapper: Public key to namespace function
            skip_existing_blocks: Dedup identical ciphertext on write
        """
        self.crypto = crypto
        self.storage = storage
        self.clock = clock or now_ms
        self.namespace_mapper = namespace_mapper
        self.blocks = BlockStore(storage, crypto, skip_if_exists=skip_existing_blocks)
        self.event_log = EventLog(storage, crypto)
        self.replay = ReplayEngine(self.event_log, crypto)

    def _open(self, secret: str):
        key_pair, identity = derive_identity(secret, self.crypto, self.namespace_mapper)
        return key_pair, identity, VolumeLoggerAdapter(logger, identity.namespace)

    async def open_volume(self, secret: str) -> Volume:
        """Derive the identity, ensure its namespace exists and replay it."""
        _, identity, log = self._open(secret)
        await self.event_log.ensure_namespace(identity)
        state = await self.replay.materialize(identity)
        log.info("Opened volume with %d files", len(state))
        return Volume(identity=identity, state=state)

    async def materialize(self, secret: str) -> FileSystemState:
        """Replay the volume's event log into its current file state."""
        _, identity, _ = self._open(secret)
        return await self.replay.materialize(identity)

    async def add_file(
        self,
        secret: str,
        filename: str,
        data: bytes,
        mime_type: str | None = None,
    ) -> FileMetadata:
        """Encrypt and store data, then append a signed CREATE_FILE event.

        Raises:
            ValidationError: Empty filename or short secret (before any I/O)
        """
        _require_filename(filename)
        key_pair, identity, log = self._open(secret)

        symmetric_key = self.crypto.derive_symmetric_key(key_pair.private_scalar)
        ciphertext = self.crypto.encrypt_sym(bytes(data), symmetric_key)

        await self.event_log.ensure_namespace(identity)
        block_hash = await self.blocks.store_block(ciphertext)

        event = EventWriter(self.crypto, key_pair, self.clock).create_file(
            filename=filename,
            block_hash=block_hash,
            size=len(data),
            mime_type=mime_type,
        )
        event_hash = await self.event_log.store_event(identity, event)

        log.info("Added file (%d bytes) as event %s", len(data), event_hash)
        return FileMetadata.from_event(event.payload)

    async def delete_file(self, secret: str, filename: str) -> None:
        """Append a signed DELETE_FILE event.

        Never consults current state: deleting an absent name succeeds.
        """
        _require_filename(filename)
        key_pair, identity, log = self._open(secret)

        event = EventWriter(self.crypto, key_pair, self.clock).delete_file(filename)

        await self.event_log.ensure_namespace(identity)
        event_hash = await self.event_log.store_event(identity, event)
        log.info("Deleted file as event %s", event_hash)

    async def list_files(self, secret: str) -> list[FileMetadata]:
        """Current files sorted by (created_at, filename)."""
        return (await self.materialize(secret)).list_files()

    async def get_file(self, secret: str, block_hash: str) -> bytes:
        """Retrieve and decrypt a block under the volume key.

        Blocks stored with a wrapped data key are read through
        get_file_by_name or retrieve_data instead.

        Raises:
            BlockNotFoundError: If no such block exists
            DecryptionError: Wrong secret or tampered ciphertext
        """
        key_pair, _, log = self._open(secret)
        return await self._decrypt_block(key_pair, block_hash, b"", log)

    async def get_file_by_name(self, secret: str, filename: str) -> bytes:
        """Resolve a filename through replay and decrypt its block.

        Raises:
            ValidationError: If the name is empty or not in the volume
        """
        _require_filename(filename)
        key_pair, identity, log = self._open(secret)
        meta = (await self.replay.materialize(identity)).get(filename)
        if meta is None:
            raise ValidationError("filename", "File does not exist in volume", filename)
        return await self._decrypt_block(key_pair, meta.block_hash, meta.encrypted_key, log)

    async def store_data(
        self,
        secret: str,
        filename: str,
        data: bytes,
        mime_type: str | None = None,
    ) -> StoredData:
        """Encrypt data under a fresh data key and record the wrapped key.

        The data key is wrapped under the volume key and carried in the
        CREATE_FILE event, so identical data never shares a block.

        Raises:
            ValidationError: Empty filename or short secret (before any I/O)
        """
        _require_filename(filename)
        key_pair, identity, log = self._open(secret)

        data_key = self.crypto.generate_symmetric_key()
        ciphertext = self.crypto.encrypt_sym(bytes(data), data_key)
        volume_key = self.crypto.derive_symmetric_key(key_pair.private_scalar)
        wrapped_key = self.crypto.encrypt_sym(data_key, volume_key)

        await self.event_log.ensure_namespace(identity)
        block_hash = await self.blocks.store_block(ciphertext)

        event = EventWriter(self.crypto, key_pair, self.clock).create_file(
            filename=filename,
            block_hash=block_hash,
            size=len(data),
            mime_type=mime_type,
            encrypted_key=wrapped_key,
        )
        event_hash = await self.event_log.store_event(identity, event)

        log.info("Stored data (%d bytes) as event %s", len(data), event_hash)
        return StoredData(event_hash=event_hash, metadata=FileMetadata.from_event(event.payload))

    async def retrieve_data(self, secret: str, event_hash: str) -> bytes:
        """Fetch one CREATE_FILE event, verify it and decrypt its block.

        Raises:
            EventNotFoundError: If the event is not in this volume
            VerificationError: Bad signature or content address
            ValidationError: If the event is not a CREATE_FILE event
            DecryptionError: Wrong secret or tampered ciphertext
        """
        key_pair, identity, log = self._open(secret)
        entry = await self.event_log.retrieve_entry(identity, event_hash)
        self.replay.verify([entry], identity)

        payload = entry.payload
        if not isinstance(payload, CreateFile):
            raise ValidationError("event_hash", "Event is not a CREATE_FILE event", event_hash)
        return await self._decrypt_block(key_pair, payload.block_hash, payload.encrypted_key, log)

    async def _decrypt_block(
        self,
        key_pair: KeyPair,
        block_hash: str,
        encrypted_key: bytes,
        log: VolumeLoggerAdapter,
    ) -> bytes:
        volume_key = self.crypto.derive_symmetric_key(key_pair.private_scalar)
        ciphertext = await self.blocks.retrieve_block(block_hash)
        try:
            data_key = self.crypto.decrypt_sym(encrypted_key, volume_key) if encrypted_key else volume_key
            return self.crypto.decrypt_sym(ciphertext, data_key)
        except DecryptionError:
            log.warning("Decryption failed for block %s", block_hash)
            raise


def create_file_service(
    config: StorageConfig | None = None,
    crypto: CryptoProvider | None = None,
    clock: Clock | None = None,
) -> FileService:
    """Build a FileService over a filesystem backend.

    Args:
        config: Storage configuration (defaults to the environment)
        crypto: Crypto capability (defaults to DefaultCryptoProvider)
        clock: Time source for event timestamps

    Returns:
        A new, independent FileService
    """
    config = config or StorageConfig.from_environment()
    return FileService(
        crypto=crypto or DefaultCryptoProvider(),
        storage=FilesystemStorageBackend.from_config(config),
        clock=clock,
        skip_existing_blocks=config.skip_existing_blocks,
    )

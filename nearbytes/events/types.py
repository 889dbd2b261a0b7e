"""
Event types for the signed, append-only file log.

Events are immutable once written. A volume's file state is never
stored; it is recomputed by replaying these events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

from ..id_utils import EMPTY_HASH


class EventType(IntEnum):
    """Event discriminants. Values are the on-wire type byte."""

    CREATE_FILE = 0
    DELETE_FILE = 1


@dataclass(frozen=True)
class CreateFile:
    """A file was created or overwritten.

    Attributes:
        filename: Logical file name within the volume
        block_hash: Content address of the encrypted block
        size: Plaintext size in bytes
        created_at: Epoch milliseconds
        mime_type: Optional MIME type
        encrypted_key: Wrapped key material (empty for blocks encrypted
            directly under the volume key)
    """

    filename: str
    block_hash: str
    size: int
    created_at: int
    mime_type: str | None = None
    encrypted_key: bytes = b""

    @property
    def event_type(self) -> EventType:
        return EventType.CREATE_FILE

    @property
    def timestamp(self) -> int:
        return self.created_at

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "type": self.event_type.name,
            "filename": self.filename,
            "blockHash": self.block_hash,
            "size": self.size,
            "mimeType": self.mime_type,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class DeleteFile:
    """A filename was removed from the volume.

    Only the logical pointer goes away; the block stays in storage.
    """

    filename: str
    deleted_at: int
    encrypted_key: bytes = b""

    @property
    def event_type(self) -> EventType:
        return EventType.DELETE_FILE

    @property
    def timestamp(self) -> int:
        return self.deleted_at

    @property
    def block_hash(self) -> str:
        return EMPTY_HASH

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "type": self.event_type.name,
            "filename": self.filename,
            "deletedAt": self.deleted_at,
        }


EventPayload = Union[CreateFile, DeleteFile]


@dataclass(frozen=True)
class SignedEvent:
    """A payload and the signature over its canonical bytes."""

    payload: EventPayload
    signature: bytes


@dataclass(frozen=True)
class EventLogEntry:
    """A signed event together with its storage key."""

    event_hash: str
    signed_event: SignedEvent

    @property
    def payload(self) -> EventPayload:
        return self.signed_event.payload


@dataclass(frozen=True)
class FileMetadata:
    """Materialized metadata of a file in the current state."""

    filename: str
    block_hash: str
    size: int
    created_at: int
    mime_type: str | None = None
    # Non-empty when the block is under its own wrapped data key.
    encrypted_key: bytes = field(default=b"", repr=False)

    @classmethod
    def from_event(cls, event: CreateFile) -> FileMetadata:
        return cls(
            filename=event.filename,
            block_hash=event.block_hash,
            size=event.size,
            created_at=event.created_at,
            mime_type=event.mime_type,
            encrypted_key=event.encrypted_key,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for CLI/HTTP consumers."""
        return {
            "filename": self.filename,
            "blockHash": self.block_hash,
            "size": self.size,
            "mimeType": self.mime_type,
            "createdAt": self.created_at,
        }


def _listing_key(meta: FileMetadata) -> tuple[int, str]:
    return (meta.created_at, meta.filename)


@dataclass(frozen=True)
class FileSystemState:
    """Filename to metadata mapping produced by a replay.

    Never persisted. Two replays over the same verified events compare equal.
    """

    files: dict[str, FileMetadata] = field(default_factory=dict)

    def get(self, filename: str) -> FileMetadata | None:
        return self.files.get(filename)

    def names(self) -> list[str]:
        return sorted(self.files)

    def list_files(self) -> list[FileMetadata]:
        """All files sorted by (created_at, filename)."""
        return sorted(self.files.values(), key=_listing_key)

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, filename: object) -> bool:
        return filename in self.files

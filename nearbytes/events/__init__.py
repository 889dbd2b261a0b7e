"""
Event-sourced file log model.

A volume's files are a stream of immutable, signed CREATE_FILE and
DELETE_FILE events; the current state is replayed, never stored.
"""

from .codec import (
    decode_payload,
    decode_signed_event,
    encode_payload,
    encode_signed_event,
)
from .reader import FileStateReader, event_sort_key
from .types import (
    CreateFile,
    DeleteFile,
    EventLogEntry,
    EventPayload,
    EventType,
    FileMetadata,
    FileSystemState,
    SignedEvent,
)
from .writer import Clock, EventWriter, now_ms

__all__ = [
    # Event types
    "EventType",
    "CreateFile",
    "DeleteFile",
    "EventPayload",
    "SignedEvent",
    "EventLogEntry",
    # Materialized state
    "FileMetadata",
    "FileSystemState",
    # Codec
    "encode_payload",
    "decode_payload",
    "encode_signed_event",
    "decode_signed_event",
    # Utilities
    "Clock",
    "now_ms",
    "event_sort_key",
    "EventWriter",
    "FileStateReader",
]

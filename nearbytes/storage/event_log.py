"""
Per-identity signed event log.

Each event is stored under <namespace>/<sha256(canonical payload)>.bin.
Storage keys are content-derived, so concurrent writers never collide
and re-storing an identical event is a harmless overwrite. No method
mutates or removes an existing event.
"""

from __future__ import annotations

import logging

from ..crypto.provider import CryptoProvider
from ..events.codec import decode_signed_event, encode_payload, encode_signed_event
from ..events.types import EventLogEntry, SignedEvent
from ..exceptions import EventNotFoundError, VerificationError
from ..id_utils import event_path, normalize_hash, parse_hash_file_name
from ..identity.types import Identity
from .base import StorageBackend

logger = logging.getLogger(__name__)


class EventLog:
    """Append-only event store keyed by event hash."""

    def __init__(self, storage: StorageBackend, crypto: CryptoProvider) -> None:
        self.storage = storage
        self.crypto = crypto

    def event_hash(self, event: SignedEvent) -> str:
        """Hash of the event's canonical payload bytes."""
        return self.crypto.compute_hash(encode_payload(event.payload))

    async def ensure_namespace(self, identity: Identity) -> None:
        """Create the identity's namespace directory (idempotent)."""
        await self.storage.create_directory(identity.namespace)

    async def store_event(self, identity: Identity, event: SignedEvent) -> str:
        """Append a signed event.

        Returns:
            The event hash (its storage key)
        """
        event_hash = self.event_hash(event)
        await self.storage.write_file(
            event_path(identity.namespace, event_hash),
            encode_signed_event(event),
        )
        logger.debug("Stored event %s in %s", event_hash, identity.namespace[:16])
        return event_hash

    async def list_events(self, identity: Identity) -> list[str]:
        """List event hashes in the namespace, sorted.

        Files that are not '<hash>.bin' are ignored.
        """
        names = await self.storage.list_files(identity.namespace)
        hashes = [h for h in (parse_hash_file_name(name) for name in names) if h is not None]
        return sorted(hashes)

    async def retrieve_event(self, identity: Identity, event_hash: str) -> SignedEvent:
        """Read and decode one event.

        Raises:
            EventNotFoundError: If the event does not exist
            DecodeError: If the stored bytes are malformed
            VerificationError: If the payload does not hash to its storage key
        """
        return (await self.retrieve_entry(identity, event_hash)).signed_event

    async def retrieve_entry(self, identity: Identity, event_hash: str) -> EventLogEntry:
        """Read one event as a log entry, checking its content address."""
        event_hash = normalize_hash(event_hash)
        data = await self.storage.read_file(event_path(identity.namespace, event_hash))
        if data is None:
            raise EventNotFoundError(event_hash, identity.namespace)

        signed_event, payload_bytes = decode_signed_event(data)
        actual_hash = self.crypto.compute_hash(payload_bytes)
        if actual_hash != event_hash:
            raise VerificationError(
                f"Event payload hashes to {actual_hash}, stored as {event_hash}",
                event_hash=event_hash,
            )
        return EventLogEntry(event_hash=event_hash, signed_event=signed_event)

"""
Replay engine: turns an identity's event log into file state.

Every call runs the whole pipeline against storage; nothing is cached.

1. Load    - list event hashes, read and decode every event
2. Verify  - re-encode each payload and check its signature against the
             identity's public key; one failure fails the whole call
3. Order   - timestamp, then filename, then create/delete discriminator
4. Fold    - creates overwrite, deletes remove (absent names are a no-op)

Any storage, decode or verification failure propagates; a partial
state is never returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .crypto.provider import CryptoProvider
from .events.codec import encode_payload
from .events.reader import FileStateReader
from .events.types import EventLogEntry, FileSystemState
from .exceptions import VerificationError
from .identity.types import Identity
from .storage.event_log import EventLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Volume:
    """An opened volume: public identity plus its replayed state.

    Holds no secret or private key material.
    """

    identity: Identity
    state: FileSystemState

    @property
    def public_key_hex(self) -> str:
        return self.identity.public_key_hex

    @property
    def path(self) -> str:
        return self.identity.namespace

    def to_dict(self) -> dict[str, Any]:
        """Serialize for CLI/HTTP consumers."""
        return {
            "publicKey": self.public_key_hex,
            "path": self.path,
            "fileCount": len(self.state),
        }


class ReplayEngine:
    """Loads, verifies, orders and folds an identity's events."""

    def __init__(
        self,
        event_log: EventLog,
        crypto: CryptoProvider,
        reader: FileStateReader | None = None,
    ) -> None:
        """Initialize the replay engine.

        Args:
            event_log: Event log to read from
            crypto: Crypto capability used for verification
            reader: Ordering/fold implementation
        """
        self.event_log = event_log
        self.crypto = crypto
        self.reader = reader or FileStateReader()

    async def load(self, identity: Identity) -> list[EventLogEntry]:
        """Read every event in the identity's namespace."""
        entries = []
        for event_hash in await self.event_log.list_events(identity):
            entries.append(await self.event_log.retrieve_entry(identity, event_hash))
        return entries

    def verify(self, entries: list[EventLogEntry], identity: Identity) -> None:
        """Verify every entry's signature over its canonical payload bytes.

        Raises:
            VerificationError: On the first entry that does not verify
        """
        for entry in entries:
            payload_bytes = encode_payload(entry.payload)
            if not self.crypto.verify(payload_bytes, entry.signed_event.signature, identity.public_key):
                logger.warning(
                    "Signature verification failed for event %s", entry.event_hash,
                    extra={"volume": identity.namespace[:16]},
                )
                raise VerificationError(
                    f"Event signature verification failed for event {entry.event_hash}",
                    event_hash=entry.event_hash,
                )

    async def materialize(self, identity: Identity) -> FileSystemState:
        """Run load, verify, order and fold for an identity."""
        entries = await self.load(identity)
        self.verify(entries, identity)
        state = self.reader.compute_state(entries)
        logger.debug(
            "Replayed %d events into %d files", len(entries), len(state),
            extra={"volume": identity.namespace[:16]},
        )
        return state

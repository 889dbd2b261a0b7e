"""
Event writer for creating signed file events.

Builds payloads, stamps them with the injected clock and signs their
canonical bytes with the volume's private scalar.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from ..crypto.keys import KeyPair
from ..crypto.provider import CryptoProvider
from .codec import encode_payload
from .types import CreateFile, DeleteFile, EventPayload, SignedEvent

Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class EventWriter:
    """Creates signed events for one key pair.

    Example:
        writer = EventWriter(crypto, key_pair)
        event = writer.create_file("a.txt", block_hash, size=5)
    """

    def __init__(
        self,
        crypto: CryptoProvider,
        key_pair: KeyPair,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the event writer.

        Args:
            crypto: Crypto capability used for signing
            key_pair: Key pair of the volume being written
            clock: Epoch-milliseconds time source (defaults to wall clock)
        """
        self.crypto = crypto
        self.key_pair = key_pair
        self.clock = clock or now_ms

    def sign(self, payload: EventPayload) -> SignedEvent:
        """Sign the canonical bytes of a payload."""
        signature = self.crypto.sign(encode_payload(payload), self.key_pair.private_scalar)
        return SignedEvent(payload=payload, signature=signature)

    def create_file(
        self,
        filename: str,
        block_hash: str,
        size: int,
        mime_type: str | None = None,
        encrypted_key: bytes = b"",
    ) -> SignedEvent:
        """Create a signed CREATE_FILE event."""
        payload = CreateFile(
            filename=filename,
            block_hash=block_hash,
            size=size,
            created_at=self.clock(),
            mime_type=mime_type,
            encrypted_key=encrypted_key,
        )
        return self.sign(payload)

    def delete_file(self, filename: str) -> SignedEvent:
        """Create a signed DELETE_FILE event."""
        return self.sign(DeleteFile(filename=filename, deleted_at=self.clock()))

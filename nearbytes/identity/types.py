"""
Identity types.

An identity is a public key plus the storage namespace that is a pure
function of it. The secret it came from is never stored.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..exceptions import InvalidSecretError

MIN_SECRET_LENGTH = 8

# Maps a public key to the directory holding its event log.
NamespaceMapper = Callable[[bytes], str]


def default_namespace_mapper(public_key: bytes) -> str:
    """Hex encoding of the public key."""
    return public_key.hex()


def validate_secret(secret: str) -> str:
    """Return the secret unchanged, or raise InvalidSecretError."""
    if not isinstance(secret, str):
        raise InvalidSecretError("Secret must be a string")
    if len(secret) < MIN_SECRET_LENGTH:
        raise InvalidSecretError(f"Secret must be at least {MIN_SECRET_LENGTH} characters long")
    return secret


@dataclass(frozen=True)
class Identity:
    """Public identity of a volume.

    Attributes:
        public_key: 65-byte uncompressed P-256 point
        namespace: Storage directory for this identity's event log
    """

    public_key: bytes
    namespace: str

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "publicKey": self.public_key_hex,
            "namespace": self.namespace,
        }

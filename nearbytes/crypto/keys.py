"""Key material types."""

from __future__ import annotations

from dataclasses import dataclass

PRIVATE_SCALAR_LENGTH = 32
PUBLIC_KEY_LENGTH = 65  # 0x04 || x || y


@dataclass(frozen=True)
class KeyPair:
    """A P-256 key pair derived from a secret.

    Attributes:
        private_scalar: 32-byte big-endian private scalar
        public_key: 65-byte uncompressed SEC1 point (scalar * G)
    """

    private_scalar: bytes
    public_key: bytes

    def __repr__(self) -> str:
        # Keep private material out of tracebacks and logs.
        return f"KeyPair(public_key={self.public_key.hex()[:16]}..., private_scalar=<redacted>)"

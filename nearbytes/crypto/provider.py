"""
Crypto capability interface.

The replay engine and the file service depend on this abstract
provider rather than on concrete primitives, so tests and alternative
implementations can be injected.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .asymmetric import PBKDF2_ITERATIONS, derive_keys, derive_symmetric_key, sign, verify
from .hashing import compute_hash
from .keys import KeyPair
from .symmetric import decrypt_sym, encrypt_sym, generate_symmetric_key


class CryptoProvider(ABC):
    """Abstract base class for the cryptographic capability.

    All operations are synchronous and CPU-bound; only storage I/O
    suspends.
    """

    @abstractmethod
    def compute_hash(self, data: bytes) -> str:
        """Content hash of data as lowercase hex."""
        ...

    @abstractmethod
    def derive_keys(self, secret: str) -> KeyPair:
        """Deterministically derive a key pair from a secret."""
        ...

    @abstractmethod
    def derive_symmetric_key(self, private_scalar: bytes) -> bytes:
        """Derive the block encryption key from the private scalar."""
        ...

    @abstractmethod
    def generate_symmetric_key(self) -> bytes:
        """Random data key for wrapped-key storage."""
        ...

    @abstractmethod
    def encrypt_sym(self, data: bytes, key: bytes) -> bytes:
        """Encrypt with a fresh IV: IV || ciphertext || tag."""
        ...

    @abstractmethod
    def decrypt_sym(self, encrypted: bytes, key: bytes) -> bytes:
        """Decrypt, failing closed on tamper or wrong key."""
        ...

    @abstractmethod
    def sign(self, data: bytes, private_scalar: bytes) -> bytes:
        """Sign data with the private scalar."""
        ...

    @abstractmethod
    def verify(self, data: bytes, signature: bytes, public_key: bytes) -> bool:
        """Verify a signature against a public key."""
        ...


class DefaultCryptoProvider(CryptoProvider):
    """SHA-256, PBKDF2/HKDF, ECDSA P-256 and AES-256-GCM via `cryptography`."""

    def __init__(self, pbkdf2_iterations: int = PBKDF2_ITERATIONS):
        """Initialize the provider.

        Args:
            pbkdf2_iterations: Override for test doubles only. Identities
                derived with a non-default count are incompatible with
                every other reader.
        """
        self.pbkdf2_iterations = pbkdf2_iterations

    def compute_hash(self, data: bytes) -> str:
        return compute_hash(data)

    def derive_keys(self, secret: str) -> KeyPair:
        return derive_keys(secret, self.pbkdf2_iterations)

    def derive_symmetric_key(self, private_scalar: bytes) -> bytes:
        return derive_symmetric_key(private_scalar)

    def generate_symmetric_key(self) -> bytes:
        return generate_symmetric_key()

    def encrypt_sym(self, data: bytes, key: bytes) -> bytes:
        return encrypt_sym(data, key)

    def decrypt_sym(self, encrypted: bytes, key: bytes) -> bytes:
        return decrypt_sym(encrypted, key)

    def sign(self, data: bytes, private_scalar: bytes) -> bytes:
        return sign(data, private_scalar)

    def verify(self, data: bytes, signature: bytes, public_key: bytes) -> bool:
        return verify(data, signature, public_key)

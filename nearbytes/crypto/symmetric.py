"""
AES-256-GCM encryption for blocks.

Ciphertexts are self-describing: IV (12 bytes) || ciphertext || tag (16 bytes).
Every call draws a fresh IV, so encrypting the same plaintext twice yields
two different ciphertexts (and two different block addresses).
"""

from __future__ import annotations

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import DecryptionError, EncryptionError

IV_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32


def generate_symmetric_key() -> bytes:
    """Fresh random 32-byte data key."""
    return AESGCM.generate_key(bit_length=KEY_LENGTH * 8)


def encrypt_sym(data: bytes, key: bytes) -> bytes:
    """Encrypt data under a 32-byte key, returning IV || ciphertext || tag."""
    if len(key) != KEY_LENGTH:
        raise EncryptionError(f"Symmetric key must be {KEY_LENGTH} bytes, got {len(key)}")
    try:
        iv = os.urandom(IV_LENGTH)
        ct = AESGCM(key).encrypt(iv, bytes(data), None)
    except (TypeError, ValueError, OverflowError) as e:
        raise EncryptionError(f"Failed to encrypt data: {e}", e) from e
    return iv + ct


def decrypt_sym(encrypted: bytes, key: bytes) -> bytes:
    """Authenticate and decrypt. Never returns partial plaintext."""
    if len(key) != KEY_LENGTH:
        raise DecryptionError(f"Symmetric key must be {KEY_LENGTH} bytes, got {len(key)}")
    if len(encrypted) < IV_LENGTH + TAG_LENGTH:
        raise DecryptionError(
            f"Encrypted data too short: expected at least {IV_LENGTH + TAG_LENGTH} bytes, "
            f"got {len(encrypted)}"
        )
    iv, ct = bytes(encrypted[:IV_LENGTH]), bytes(encrypted[IV_LENGTH:])
    try:
        return AESGCM(key).decrypt(iv, ct, None)
    except InvalidTag as e:
        raise DecryptionError(
            "Failed to decrypt data: authentication failed. "
            "This may indicate a wrong secret or tampered data.",
            e,
        ) from e

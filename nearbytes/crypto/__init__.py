"""
Cryptographic primitives for nearbytes.

- SHA-256 content addressing
- PBKDF2-derived P-256 identities, ECDSA signatures
- HKDF-derived AES-256-GCM block encryption
"""

from .asymmetric import (
    CURVE_ORDER,
    PBKDF2_ITERATIONS,
    derive_keys,
    derive_symmetric_key,
    sign,
    verify,
)
from .hashing import compute_hash
from .keys import PRIVATE_SCALAR_LENGTH, PUBLIC_KEY_LENGTH, KeyPair
from .provider import CryptoProvider, DefaultCryptoProvider
from .symmetric import IV_LENGTH, TAG_LENGTH, decrypt_sym, encrypt_sym, generate_symmetric_key

__all__ = [
    "CryptoProvider",
    "DefaultCryptoProvider",
    "KeyPair",
    "compute_hash",
    "derive_keys",
    "derive_symmetric_key",
    "sign",
    "verify",
    "generate_symmetric_key",
    "encrypt_sym",
    "decrypt_sym",
    "CURVE_ORDER",
    "PBKDF2_ITERATIONS",
    "PRIVATE_SCALAR_LENGTH",
    "PUBLIC_KEY_LENGTH",
    "IV_LENGTH",
    "TAG_LENGTH",
]

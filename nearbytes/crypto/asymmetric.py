"""
Deterministic P-256 identities and ECDSA signatures.

A secret is stretched with PBKDF2-HMAC-SHA256 into a private scalar,
reduced modulo the curve order. The public key is the scalar multiple
of the base point, so anything signed with the scalar verifies against
the public key that names the storage namespace.
"""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from ..exceptions import KeyDerivationError, SigningError, VerificationError
from .keys import PRIVATE_SCALAR_LENGTH, PUBLIC_KEY_LENGTH, KeyPair

PBKDF2_ITERATIONS = 100_000
PRIVATE_KEY_SALT = b"nearbytes-private-key-v1"
SYMMETRIC_KEY_SALT = b"nearbytes-sym-key-derivation-v1"
SYMMETRIC_KEY_INFO = b"nearbytes-symmetric-key"
SYMMETRIC_KEY_LENGTH = 32

# Order n of the P-256 base point
CURVE_ORDER = 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551

_CURVE = ec.SECP256R1()


def _reduce_scalar(seed: bytes) -> int:
    scalar = int.from_bytes(seed, "big") % CURVE_ORDER
    return scalar or 1


def _private_key(private_scalar: bytes) -> ec.EllipticCurvePrivateKey:
    if len(private_scalar) != PRIVATE_SCALAR_LENGTH:
        raise ValueError(
            f"private scalar must be {PRIVATE_SCALAR_LENGTH} bytes, got {len(private_scalar)}"
        )
    return ec.derive_private_key(int.from_bytes(private_scalar, "big"), _CURVE)


def derive_keys(secret: str, iterations: int = PBKDF2_ITERATIONS) -> KeyPair:
    """Derive the key pair for a secret. Pure and deterministic."""
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=PRIVATE_SCALAR_LENGTH,
            salt=PRIVATE_KEY_SALT,
            iterations=iterations,
        )
        scalar = _reduce_scalar(kdf.derive(secret.encode("utf-8")))
        private_key = ec.derive_private_key(scalar, _CURVE)
        public_key = private_key.public_key().public_bytes(
            Encoding.X962, PublicFormat.UncompressedPoint
        )
    except (TypeError, ValueError, UnicodeEncodeError, UnsupportedAlgorithm) as e:
        raise KeyDerivationError(f"Failed to derive keys: {e}", e) from e

    return KeyPair(
        private_scalar=scalar.to_bytes(PRIVATE_SCALAR_LENGTH, "big"),
        public_key=public_key,
    )


def derive_symmetric_key(private_scalar: bytes) -> bytes:
    """HKDF-SHA256 a 32-byte block encryption key from the private scalar."""
    if len(private_scalar) != PRIVATE_SCALAR_LENGTH:
        raise KeyDerivationError(
            f"Private scalar must be {PRIVATE_SCALAR_LENGTH} bytes, got {len(private_scalar)}"
        )
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=SYMMETRIC_KEY_LENGTH,
        salt=SYMMETRIC_KEY_SALT,
        info=SYMMETRIC_KEY_INFO,
    )
    return hkdf.derive(private_scalar)


def sign(data: bytes, private_scalar: bytes) -> bytes:
    """ECDSA P-256 / SHA-256 signature over data, DER encoded."""
    try:
        return _private_key(private_scalar).sign(bytes(data), ec.ECDSA(hashes.SHA256()))
    except (TypeError, ValueError) as e:
        raise SigningError(f"Failed to sign data: {e}", e) from e


def verify(data: bytes, signature: bytes, public_key: bytes) -> bool:
    """Check a DER signature. Returns False for any invalid signature.

    Raises VerificationError only when the public key itself is unusable.
    """
    if len(public_key) != PUBLIC_KEY_LENGTH:
        raise VerificationError(
            f"Invalid public key length: expected {PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}"
        )
    try:
        key = ec.EllipticCurvePublicKey.from_encoded_point(_CURVE, bytes(public_key))
    except ValueError as e:
        raise VerificationError(f"Invalid public key: {e}", cause=e) from e

    try:
        key.verify(bytes(signature), bytes(data), ec.ECDSA(hashes.SHA256()))
    except InvalidSignature:
        return False
    return True

"""
Secret to identity derivation.

Same secret, same identity, on every machine: nothing here reads
randomness, clocks or storage.
"""

from __future__ import annotations

from ..crypto.keys import KeyPair
from ..crypto.provider import CryptoProvider
from .types import Identity, NamespaceMapper, default_namespace_mapper, validate_secret


def derive_identity(
    secret: str,
    crypto: CryptoProvider,
    namespace_mapper: NamespaceMapper = default_namespace_mapper,
) -> tuple[KeyPair, Identity]:
    """Validate the secret and derive its key pair and identity.

    Args:
        secret: Volume secret (at least 8 characters)
        crypto: Crypto capability used for key derivation
        namespace_mapper: Public key to namespace function

    Returns:
        Tuple of (key_pair, identity)

    Raises:
        InvalidSecretError: If the secret is too short
        KeyDerivationError: If key derivation fails
    """
    key_pair = crypto.derive_keys(validate_secret(secret))
    identity = Identity(
        public_key=key_pair.public_key,
        namespace=namespace_mapper(key_pair.public_key),
    )
    return key_pair, identity

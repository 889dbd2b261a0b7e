"""
Identity derivation for nearbytes.

A secret deterministically yields a key pair and a storage namespace.
"""

from ..crypto.keys import KeyPair
from .derivation import derive_identity
from .types import (
    MIN_SECRET_LENGTH,
    Identity,
    NamespaceMapper,
    default_namespace_mapper,
    validate_secret,
)

__all__ = [
    "Identity",
    "KeyPair",
    "NamespaceMapper",
    "MIN_SECRET_LENGTH",
    "default_namespace_mapper",
    "derive_identity",
    "validate_secret",
]

"""Content-hash and storage-key utilities.

Centralizes the key format knowledge so callers never need to
construct or parse storage paths directly.

Block files:  blocks/{block_hash}.bin
Event files:  {namespace}/{event_hash}.bin

Hashes are SHA-256 digests rendered as 64 lowercase hex characters.
"""

from __future__ import annotations

import re

from .exceptions import InvalidHashError

HASH_HEX_LENGTH = 64
FILE_SUFFIX = ".bin"
BLOCKS_DIR = "blocks"

# Placeholder content hash carried by delete events.
EMPTY_HASH = "0" * HASH_HEX_LENGTH

_HASH_RE = re.compile(r"^[0-9a-f]{64}$")


def normalize_hash(value: str) -> str:
    """Lowercase and strip a hash, raising InvalidHashError if malformed."""
    if not isinstance(value, str):
        raise InvalidHashError(repr(value))
    normalized = value.strip().lower()
    if not _HASH_RE.match(normalized):
        raise InvalidHashError(value)
    return normalized


def is_hash(value: str) -> bool:
    """Return True if value is already a canonical 64-char lowercase hex hash."""
    return isinstance(value, str) and bool(_HASH_RE.match(value))


def block_path(block_hash: str) -> str:
    """Storage path of an encrypted block."""
    return f"{BLOCKS_DIR}/{block_hash}{FILE_SUFFIX}"


def event_path(namespace: str, event_hash: str) -> str:
    """Storage path of a signed event inside an identity namespace."""
    return f"{namespace}/{event_hash}{FILE_SUFFIX}"


def parse_hash_file_name(name: str) -> str | None:
    """Extract the hash from a '<hash>.bin' file name.

    Returns None for names that are not hash files (temp files,
    sync-tool artifacts, etc.) so listings can skip them.
    """
    if not name.endswith(FILE_SUFFIX):
        return None
    candidate = name[: -len(FILE_SUFFIX)]
    return candidate if is_hash(candidate) else None

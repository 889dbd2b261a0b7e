"""
Content-addressed encrypted block store.

Blocks live under blocks/<sha256(ciphertext)>.bin, are written once and
never mutated or deleted by file operations. Dedup only catches
byte-identical ciphertext: encrypting the same plaintext twice uses two
IVs and so produces two blocks.
"""

from __future__ import annotations

import logging

from ..crypto.provider import CryptoProvider
from ..exceptions import BlockNotFoundError
from ..id_utils import block_path, normalize_hash
from .base import StorageBackend

logger = logging.getLogger(__name__)


class BlockStore:
    """Stores and retrieves encrypted blocks by content address."""

    def __init__(
        self,
        storage: StorageBackend,
        crypto: CryptoProvider,
        skip_if_exists: bool = True,
    ) -> None:
        """Initialize the block store.

        Args:
            storage: Storage backend holding the blocks directory
            crypto: Crypto capability used for content hashing
            skip_if_exists: Default dedup behavior for store_block
        """
        self.storage = storage
        self.crypto = crypto
        self.skip_if_exists = skip_if_exists

    async def store_block(self, ciphertext: bytes, skip_if_exists: bool | None = None) -> str:
        """Store a block and return its content address.

        Args:
            ciphertext: Encrypted block bytes
            skip_if_exists: Override the store-wide dedup setting

        Returns:
            The block hash
        """
        block_hash = self.crypto.compute_hash(ciphertext)
        path = block_path(block_hash)
        skip = self.skip_if_exists if skip_if_exists is None else skip_if_exists

        if skip and await self.storage.exists(path):
            logger.debug("Block %s already stored, skipping write", block_hash)
            return block_hash

        await self.storage.write_file(path, ciphertext)
        logger.debug("Stored block %s (%d bytes)", block_hash, len(ciphertext))
        return block_hash

    async def retrieve_block(self, block_hash: str) -> bytes:
        """Read a block by content address.

        Raises:
            InvalidHashError: If block_hash is malformed
            BlockNotFoundError: If no block is stored under that address
        """
        block_hash = normalize_hash(block_hash)
        data = await self.storage.read_file(block_path(block_hash))
        if data is None:
            raise BlockNotFoundError(block_hash)
        return data

    async def has_block(self, block_hash: str) -> bool:
        return await self.storage.exists(block_path(normalize_hash(block_hash)))

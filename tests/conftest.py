"""
Shared test configuration and fixtures.

Provides a temporary storage root, a fast crypto provider, a
controllable clock and a storage backend wrapper that records every
call so tests can assert what did (or did not) touch storage.
"""

from __future__ import annotations

import tempfile
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest

from nearbytes.crypto import DefaultCryptoProvider
from nearbytes.service import FileService
from nearbytes.storage import FilesystemStorageBackend, StorageBackend

SECRET = "correct horse battery staple"
OTHER_SECRET = "a completely different secret"

# Fewer PBKDF2 rounds keep service tests fast. Identities derived this
# way never leave the test's temporary directory.
FAST_ITERATIONS = 1_000


class FakeClock:
    """Deterministic epoch-milliseconds clock."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        current = self.now
        self.now += self.step
        return current

    def set(self, value: int) -> None:
        self.now = value


class RecordingStorageBackend(StorageBackend):
    """Delegating backend that records (operation, path) for every call."""

    def __init__(self, inner: StorageBackend):
        self.inner = inner
        self.calls: list[tuple[str, str]] = []

    def ops(self, operation: str) -> list[str]:
        return [path for op, path in self.calls if op == operation]

    async def write_file(self, path: str, data: bytes) -> None:
        self.calls.append(("write_file", path))
        await self.inner.write_file(path, data)

    async def read_file(self, path: str) -> bytes | None:
        self.calls.append(("read_file", path))
        return await self.inner.read_file(path)

    async def list_files(self, directory: str) -> list[str]:
        self.calls.append(("list_files", directory))
        return await self.inner.list_files(directory)

    async def create_directory(self, path: str) -> None:
        self.calls.append(("create_directory", path))
        await self.inner.create_directory(path)

    async def exists(self, path: str) -> bool:
        self.calls.append(("exists", path))
        return await self.inner.exists(path)

    async def delete_file(self, path: str) -> None:
        self.calls.append(("delete_file", path))
        await self.inner.delete_file(path)


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary storage root."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def crypto() -> DefaultCryptoProvider:
    """Crypto provider with a reduced PBKDF2 round count."""
    return DefaultCryptoProvider(pbkdf2_iterations=FAST_ITERATIONS)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def backend(temp_dir: Path) -> AsyncIterator[FilesystemStorageBackend]:
    """Filesystem backend rooted at the temporary directory."""
    storage = FilesystemStorageBackend(temp_dir)
    yield storage
    await storage.close()


@pytest.fixture
def recording(backend: FilesystemStorageBackend) -> RecordingStorageBackend:
    return RecordingStorageBackend(backend)


@pytest.fixture
def service(
    crypto: DefaultCryptoProvider,
    recording: RecordingStorageBackend,
    clock: FakeClock,
) -> FileService:
    """File service over recorded filesystem storage with a fake clock."""
    return FileService(crypto=crypto, storage=recording, clock=clock)

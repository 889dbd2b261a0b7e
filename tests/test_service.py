"""Tests for the FileService facade."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from nearbytes import create_file_service
from nearbytes.crypto import DefaultCryptoProvider
from nearbytes.exceptions import (
    BlockNotFoundError,
    DecryptionError,
    EventNotFoundError,
    InvalidSecretError,
    ValidationError,
)
from nearbytes.service import FileService
from nearbytes.storage import FilesystemStorageBackend, StorageConfig

from conftest import FAST_ITERATIONS, FakeClock, RecordingStorageBackend

SECRET = "correct horse battery staple"
OTHER_SECRET = "a completely different secret"


class TestExampleScenarios:
    """End-to-end add / delete / list / get flows."""

    async def test_add_then_list(self, service: FileService) -> None:
        await service.add_file(SECRET, "a.txt", b"hello")
        files = await service.list_files(SECRET)

        assert len(files) == 1
        assert files[0].filename == "a.txt"
        assert files[0].size == 5

    async def test_later_write_wins(self, service: FileService) -> None:
        await service.add_file(SECRET, "a.txt", b"hello")
        await service.add_file(SECRET, "a.txt", b"world")
        files = await service.list_files(SECRET)

        assert [f.filename for f in files] == ["a.txt"]
        assert files[0].size == 5
        assert await service.get_file(SECRET, files[0].block_hash) == b"world"

    async def test_delete_keeps_block(self, service: FileService) -> None:
        meta = await service.add_file(SECRET, "a.txt", b"x")
        await service.delete_file(SECRET, "a.txt")

        assert await service.list_files(SECRET) == []
        assert await service.get_file(SECRET, meta.block_hash) == b"x"

    async def test_independent_opens_agree(
        self, service: FileService, temp_dir: Path, crypto: DefaultCryptoProvider
    ) -> None:
        """Test a second service over the same folder sees the same state."""
        await service.add_file(SECRET, "a.txt", b"one")
        await service.add_file(SECRET, "b.bin", b"\x00\xff", mime_type="application/octet-stream")
        await service.delete_file(SECRET, "a.txt")
        await service.add_file(SECRET, "c.txt", b"three")

        other = FileService(crypto=crypto, storage=FilesystemStorageBackend(temp_dir))

        first = await service.open_volume(SECRET)
        second = await other.open_volume(SECRET)

        assert first == second
        assert first.state.names() == ["b.bin", "c.txt"]

    async def test_wrong_secret_cannot_decrypt(self, service: FileService) -> None:
        meta = await service.add_file(SECRET, "a.txt", b"private")
        with pytest.raises(DecryptionError):
            await service.get_file(OTHER_SECRET, meta.block_hash)


class TestAddFile:
    """Tests for add_file."""

    @pytest.mark.parametrize("data", [b"", bytes(range(256)), b"\x00" * 4096])
    async def test_round_trip(self, service: FileService, data: bytes) -> None:
        meta = await service.add_file(SECRET, "blob", data)

        assert meta.size == len(data)
        assert await service.get_file(SECRET, meta.block_hash) == data

    async def test_returns_metadata(self, service: FileService, clock: FakeClock) -> None:
        clock.set(1_234)
        meta = await service.add_file(SECRET, "a.txt", b"hello", mime_type="text/plain")

        assert meta.filename == "a.txt"
        assert meta.created_at == 1_234
        assert meta.mime_type == "text/plain"
        assert len(meta.block_hash) == 64

    async def test_storage_layout(self, service: FileService, temp_dir: Path) -> None:
        meta = await service.add_file(SECRET, "a.txt", b"hello")
        volume = await service.open_volume(SECRET)

        assert (temp_dir / "blocks" / f"{meta.block_hash}.bin").is_file()
        assert len(list((temp_dir / volume.path).glob("*.bin"))) == 1

    async def test_plaintext_not_stored(self, service: FileService, temp_dir: Path) -> None:
        await service.add_file(SECRET, "a.txt", b"very recognisable plaintext")
        for path in temp_dir.rglob("*.bin"):
            assert b"very recognisable plaintext" not in path.read_bytes()

    @pytest.mark.parametrize("filename", ["", "   ", "\t\n"])
    async def test_empty_filename_touches_no_storage(
        self, service: FileService, recording: RecordingStorageBackend, filename: str
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.add_file(SECRET, filename, b"data")

        assert exc_info.value.field == "filename"
        assert recording.calls == []

    async def test_short_secret_touches_no_storage(
        self, service: FileService, recording: RecordingStorageBackend
    ) -> None:
        with pytest.raises(InvalidSecretError):
            await service.add_file("short", "a.txt", b"data")
        assert recording.calls == []

    async def test_same_content_twice_two_blocks(self, service: FileService) -> None:
        a = await service.add_file(SECRET, "a.txt", b"same")
        b = await service.add_file(SECRET, "b.txt", b"same")
        assert a.block_hash != b.block_hash

    async def test_event_references_stored_block(
        self, service: FileService, recording: RecordingStorageBackend, temp_dir: Path
    ) -> None:
        """Test the event names the address the block store wrote under."""
        meta = await service.add_file(SECRET, "a.txt", b"hello")
        block_path = f"blocks/{meta.block_hash}.bin"
        stored = (temp_dir / block_path).read_bytes()

        assert meta.block_hash == service.crypto.compute_hash(stored)
        writes = recording.ops("write_file")
        assert writes[0] == block_path
        assert len(writes) == 2

    async def test_unencodable_filename_touches_no_storage(
        self, service: FileService, recording: RecordingStorageBackend
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.add_file(SECRET, "bad \ud800 name", b"data")

        assert exc_info.value.field == "filename"
        assert recording.calls == []


class TestWrappedKeyStorage:
    """Tests for store_data / retrieve_data with per-file data keys."""

    @pytest.mark.parametrize("data", [b"", b"hello", bytes(range(256)) * 8])
    async def test_round_trip(self, service: FileService, data: bytes) -> None:
        stored = await service.store_data(SECRET, "blob", data)

        assert stored.metadata.size == len(data)
        assert await service.retrieve_data(SECRET, stored.event_hash) == data

    async def test_readable_by_name(self, service: FileService) -> None:
        await service.store_data(SECRET, "a.txt", b"wrapped", mime_type="text/plain")

        assert await service.get_file_by_name(SECRET, "a.txt") == b"wrapped"
        files = await service.list_files(SECRET)
        assert [(f.filename, f.mime_type) for f in files] == [("a.txt", "text/plain")]

    async def test_event_carries_wrapped_key(
        self, service: FileService, crypto: DefaultCryptoProvider
    ) -> None:
        stored = await service.store_data(SECRET, "a.txt", b"hello")
        volume = await service.open_volume(SECRET)
        event = await service.event_log.retrieve_event(volume.identity, stored.event_hash)

        wrapped = event.payload.encrypted_key
        key_pair = crypto.derive_keys(SECRET)
        data_key = crypto.decrypt_sym(wrapped, crypto.derive_symmetric_key(key_pair.private_scalar))

        assert wrapped == stored.metadata.encrypted_key
        assert len(data_key) == 32
        assert data_key != crypto.derive_symmetric_key(key_pair.private_scalar)

    async def test_wrapped_key_not_in_metadata_dict(self, service: FileService) -> None:
        stored = await service.store_data(SECRET, "a.txt", b"hello")
        assert "encryptedKey" not in stored.metadata.to_dict()

    async def test_block_not_readable_with_volume_key(self, service: FileService) -> None:
        stored = await service.store_data(SECRET, "a.txt", b"hello")
        with pytest.raises(DecryptionError):
            await service.get_file(SECRET, stored.metadata.block_hash)

    async def test_same_data_twice_two_blocks(self, service: FileService) -> None:
        a = await service.store_data(SECRET, "a.txt", b"same")
        b = await service.store_data(SECRET, "b.txt", b"same")

        assert a.metadata.block_hash != b.metadata.block_hash
        assert a.metadata.encrypted_key != b.metadata.encrypted_key

    async def test_other_volume_cannot_find_event(self, service: FileService) -> None:
        stored = await service.store_data(SECRET, "a.txt", b"private")
        with pytest.raises(EventNotFoundError):
            await service.retrieve_data(OTHER_SECRET, stored.event_hash)

    async def test_delete_event_rejected(
        self, service: FileService, recording: RecordingStorageBackend
    ) -> None:
        await service.delete_file(SECRET, "a.txt")
        event_path = next(p for p in recording.ops("write_file") if not p.startswith("blocks/"))
        event_hash = event_path.rsplit("/", 1)[1].removesuffix(".bin")

        with pytest.raises(ValidationError) as exc_info:
            await service.retrieve_data(SECRET, event_hash)
        assert exc_info.value.field == "event_hash"

    async def test_empty_filename_touches_no_storage(
        self, service: FileService, recording: RecordingStorageBackend
    ) -> None:
        with pytest.raises(ValidationError):
            await service.store_data(SECRET, "  ", b"data")
        assert recording.calls == []


class TestDeleteFile:
    """Tests for delete_file."""

    async def test_delete_absent_is_noop(self, service: FileService) -> None:
        await service.add_file(SECRET, "keep.txt", b"k")
        before = await service.materialize(SECRET)

        await service.delete_file(SECRET, "ghost.txt")

        assert await service.materialize(SECRET) == before

    async def test_always_appends_event(
        self, service: FileService, recording: RecordingStorageBackend
    ) -> None:
        """Test delete never reads state and writes exactly one event."""
        await service.delete_file(SECRET, "ghost.txt")

        assert recording.ops("read_file") == []
        assert recording.ops("list_files") == []
        assert len(recording.ops("write_file")) == 1

    async def test_delete_then_readd(self, service: FileService) -> None:
        await service.add_file(SECRET, "a.txt", b"one")
        await service.delete_file(SECRET, "a.txt")
        await service.add_file(SECRET, "a.txt", b"two")

        assert await service.get_file_by_name(SECRET, "a.txt") == b"two"

    async def test_empty_filename(self, service: FileService) -> None:
        with pytest.raises(ValidationError):
            await service.delete_file(SECRET, " ")


class TestQueries:
    """Tests for list / open / get operations."""

    async def test_list_sorted_by_created_at_then_name(
        self, service: FileService, clock: FakeClock
    ) -> None:
        clock.step = 0
        clock.set(10)
        await service.add_file(SECRET, "b.txt", b"b")
        await service.add_file(SECRET, "a.txt", b"a")
        clock.set(5)
        await service.add_file(SECRET, "z.txt", b"z")

        assert [f.filename for f in await service.list_files(SECRET)] == ["z.txt", "a.txt", "b.txt"]

    async def test_volumes_are_isolated(self, service: FileService) -> None:
        await service.add_file(SECRET, "mine.txt", b"m")
        await service.add_file(OTHER_SECRET, "theirs.txt", b"t")

        assert [f.filename for f in await service.list_files(SECRET)] == ["mine.txt"]
        assert [f.filename for f in await service.list_files(OTHER_SECRET)] == ["theirs.txt"]

    async def test_open_empty_volume(self, service: FileService, temp_dir: Path) -> None:
        volume = await service.open_volume(SECRET)

        assert len(volume.state) == 0
        assert (temp_dir / volume.path).is_dir()
        assert volume.to_dict()["fileCount"] == 0
        assert SECRET not in str(volume.to_dict())

    async def test_get_file_by_name_missing(self, service: FileService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.get_file_by_name(SECRET, "nope.txt")
        assert exc_info.value.field == "filename"

    async def test_get_unknown_block(self, service: FileService) -> None:
        with pytest.raises(BlockNotFoundError):
            await service.get_file(SECRET, "0" * 64)


class TestLogging:
    """Tests for service logging."""

    async def test_add_logs_volume_prefix_only(
        self, service: FileService, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="nearbytes")
        await service.add_file(SECRET, "a.txt", b"hello")
        volume = await service.open_volume(SECRET)

        records = [r for r in caplog.records if r.name == "nearbytes.service"]
        assert records
        assert all(r.volume == volume.path[:16] for r in records)
        assert all(SECRET not in r.getMessage() for r in caplog.records)


def test_create_file_service(temp_dir: Path) -> None:
    service = create_file_service(
        StorageConfig(storage_dir=str(temp_dir), skip_existing_blocks=False),
        crypto=DefaultCryptoProvider(pbkdf2_iterations=FAST_ITERATIONS),
    )

    assert isinstance(service.storage, FilesystemStorageBackend)
    assert service.storage.base_path == temp_dir
    assert service.blocks.skip_if_exists is False

"""
Binary file operations for local storage.

Provides async file primitives with:
- Atomic writes using temp file + rename
- Idempotent removal
- Listings that skip directories and in-flight temp files
"""

import os
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from ..exceptions import StorageIOError

TEMP_PREFIX = ".tmp_"


def _process_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Mode a plain open() would create with; mkstemp alone gives 0600.
FILE_MODE = 0o666 & ~_process_umask()


async def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        await aiofiles.os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise StorageIOError("create_directory", str(path), e) from e


async def read_bytes(path: Path) -> bytes | None:
    """Read a binary file.

    Args:
        path: Path to file

    Returns:
        File contents or None if file doesn't exist
    """
    try:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StorageIOError("read_file", str(path), e) from e


async def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write a binary file atomically using temp file + rename.

    A crash before the rename leaves only a '.tmp_' orphan, which
    listings ignore.

    Args:
        path: Target path
        data: Bytes to write
    """
    await ensure_directory(path.parent)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=TEMP_PREFIX,
        suffix=".bin",
    )
    try:
        os.close(fd)
        os.chmod(temp_path, FILE_MODE)
        async with aiofiles.open(temp_path, "wb") as f:
            await f.write(data)
            await f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        await aiofiles.os.replace(temp_path, path)
    except Exception as e:
        # Clean up temp file on error
        try:
            await aiofiles.os.remove(temp_path)
        except OSError:
            pass
        raise StorageIOError("write_file", str(path), e) from e


async def file_exists(path: Path) -> bool:
    """Check if a path exists.

    Args:
        path: Path to check

    Returns:
        True if path exists
    """
    try:
        return await aiofiles.os.path.exists(path)
    except OSError:
        return False


async def remove_file(path: Path) -> bool:
    """Remove a file if it exists.

    Args:
        path: Path to remove

    Returns:
        True if file was removed, False if it didn't exist
    """
    try:
        await aiofiles.os.remove(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        raise StorageIOError("remove", str(path), e) from e


async def list_file_names(path: Path) -> list[str]:
    """List regular files in a directory.

    Args:
        path: Directory to list

    Returns:
        Sorted file names, excluding subdirectories and temp files
    """
    try:
        if not await aiofiles.os.path.isdir(path):
            return []

        names = []
        for entry in await aiofiles.os.listdir(path):
            if entry.startswith(TEMP_PREFIX):
                continue
            if await aiofiles.os.path.isfile(path / entry):
                names.append(entry)
        return sorted(names)
    except OSError as e:
        raise StorageIOError("list_files", str(path), e) from e

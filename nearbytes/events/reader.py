"""
File state reader for the signed event log.

Orders verified events deterministically and folds them into the
current filename -> metadata mapping.
"""

from __future__ import annotations

from .types import CreateFile, DeleteFile, EventLogEntry, EventPayload, FileMetadata, FileSystemState

# Tie-break markers. Any create sorts before a delete with the same
# timestamp and filename, so a simultaneous delete wins.
_CREATE_MARKER = "C:"
_DELETE_MARKER = "D"


def event_sort_key(payload: EventPayload) -> tuple[int, str, str]:
    """Total order over payloads.

    1. the event's own timestamp (created_at / deleted_at)
    2. filename, lexicographic by code point
    3. "C:<block_hash>" for creates, "D" for deletes
    """
    if isinstance(payload, CreateFile):
        discriminator = _CREATE_MARKER + payload.block_hash
    else:
        discriminator = _DELETE_MARKER
    return (payload.timestamp, payload.filename, discriminator)


class FileStateReader:
    """Computes file state from verified event log entries.

    Entries may arrive in any order (directory listings are unordered);
    the result depends only on the set of payloads.
    """

    def order_entries(self, entries: list[EventLogEntry]) -> list[EventLogEntry]:
        """Sort entries by event_sort_key, then by event hash.

        The event hash only separates byte-identical payloads that differ
        elsewhere (e.g. encrypted key material), which fold identically.
        """
        return sorted(entries, key=lambda e: (event_sort_key(e.payload), e.event_hash))

    def compute_state(self, entries: list[EventLogEntry]) -> FileSystemState:
        """Order then fold entries.

        Args:
            entries: Verified entries (any order)

        Returns:
            The materialized FileSystemState
        """
        return self.fold([entry.payload for entry in self.order_entries(entries)])

    def fold(self, payloads: list[EventPayload]) -> FileSystemState:
        """Apply already-ordered payloads.

        CREATE_FILE inserts or overwrites; DELETE_FILE removes the name if
        present and is otherwise a no-op.
        """
        files: dict[str, FileMetadata] = {}
        for payload in payloads:
            if isinstance(payload, CreateFile):
                files[payload.filename] = FileMetadata.from_event(payload)
            elif isinstance(payload, DeleteFile):
                files.pop(payload.filename, None)
        return FileSystemState(files=files)

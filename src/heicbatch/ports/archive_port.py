from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ArchiveWriterPort(Protocol):
    def add(self, path: str, data: bytes) -> None:
        """Add an entry at the given archive path."""

    def serialize(self) -> bytes:
        """Return the finished archive; raise ArchiveError if it cannot be produced."""

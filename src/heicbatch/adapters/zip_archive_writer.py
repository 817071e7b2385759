from __future__ import annotations

import io
import zipfile

from heicbatch.domain.errors import ArchiveError
from heicbatch.ports.archive_port import ArchiveWriterPort


class ZipArchiveWriter(ArchiveWriterPort):
    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, mode="w", compression=compression)
        self._entries: list[str] = []
        self._closed = False

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def add(self, path: str, data: bytes) -> None:
        if self._closed:
            raise ArchiveError("Archive already serialized.")
        try:
            self._zip.writestr(path, data)
        except (OSError, ValueError, zipfile.LargeZipFile) as exc:
            raise ArchiveError(f"Failed to add '{path}' to archive: {exc}") from exc
        self._entries.append(path)

    def serialize(self) -> bytes:
        if not self._closed:
            try:
                self._zip.close()
            except (OSError, ValueError, zipfile.LargeZipFile) as exc:
                raise ArchiveError(f"Failed to create ZIP file: {exc}") from exc
            self._closed = True
        return self._buffer.getvalue()

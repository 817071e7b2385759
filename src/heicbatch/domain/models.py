from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field, replace
from typing import Union


@dataclass(frozen=True)
class FileItem:
    original_name: str
    data: bytes = field(repr=False)
    relative_path: str = ""
    final_name: str | None = None
    renamed_from: str | None = None
    is_heic: bool = False

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def current_name(self) -> str:
        return self.final_name or self.original_name

    @property
    def mime_type(self) -> str:
        guessed, _ = mimetypes.guess_type(self.current_name)
        return guessed or "application/octet-stream"

    def with_resolution(self, final_name: str, is_heic: bool) -> FileItem:
        renamed_from = self.original_name if final_name != self.original_name else None
        return replace(self, final_name=final_name, renamed_from=renamed_from, is_heic=is_heic)


@dataclass(frozen=True)
class Converted:
    original: str
    output_name: str
    original_size: int
    converted_size: int
    was_renamed: bool


@dataclass(frozen=True)
class PassedThrough:
    name: str
    was_renamed: bool


@dataclass(frozen=True)
class Failed:
    name: str
    error_message: str


ConversionOutcome = Union[Converted, PassedThrough, Failed]


@dataclass(frozen=True)
class RenamedEntry:
    from_name: str
    to_name: str

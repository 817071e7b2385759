from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ImageCodecPort(Protocol):
    def is_heic(self, data: bytes) -> bool:
        """Return True when the bytes hold a HEIC/HEIF image."""

    def convert_to_jpeg(self, data: bytes, quality: float) -> bytes:
        """Return JPEG bytes for a HEIC/HEIF image; raise ConversionError on failure."""

from __future__ import annotations

import io

from heicbatch.domain.errors import ConversionError
from heicbatch.ports.codec_port import ImageCodecPort

# pillow-heif also decodes AVIF, which is not converted here.
_HEIF_MIMETYPES = {"image/heic", "image/heif", "image/heic-sequence", "image/heif-sequence"}


class PillowHeifCodecAdapter(ImageCodecPort):
    def __init__(self) -> None:
        self._opener_registered = False

    def is_heic(self, data: bytes) -> bool:
        try:
            from pillow_heif import get_file_mimetype, is_supported
        except ImportError as exc:
            raise RuntimeError(
                "pillow-heif is required to detect HEIC images. Install with: pip install pillow-heif"
            ) from exc
        header = bytes(data[:16])
        return is_supported(header) and get_file_mimetype(header) in _HEIF_MIMETYPES

    def convert_to_jpeg(self, data: bytes, quality: float) -> bytes:
        try:
            from PIL import Image, ImageOps
        except ImportError as exc:
            raise RuntimeError(
                "Pillow and pillow-heif are required for HEIC conversion. "
                "Install with: pip install pillow pillow-heif"
            ) from exc
        self._register_opener()

        try:
            with Image.open(io.BytesIO(data)) as image:
                oriented = ImageOps.exif_transpose(image)
                rgb = oriented.convert("RGB")
                buffer = io.BytesIO()
                rgb.save(buffer, format="JPEG", quality=self._jpeg_quality(quality))
                return buffer.getvalue()
        except Exception as exc:
            raise ConversionError(str(exc) or "Failed to convert image.") from exc

    def _register_opener(self) -> None:
        if self._opener_registered:
            return
        try:
            from pillow_heif import register_heif_opener
        except ImportError as exc:
            raise RuntimeError(
                "pillow-heif is required to decode HEIC images. Install with: pip install pillow-heif"
            ) from exc
        register_heif_opener()
        self._opener_registered = True

    @staticmethod
    def _jpeg_quality(quality: float) -> int:
        return max(1, min(100, round(quality * 100)))

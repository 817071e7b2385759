from __future__ import annotations

from typing import Any

from heicbatch.adapters.pillow_heif_codec import PillowHeifCodecAdapter
from heicbatch.adapters.zip_archive_writer import ZipArchiveWriter
from heicbatch.services.conversion_service import ConversionService
from heicbatch.services.mapping_service import MappingService
from heicbatch.settings import CONVERSION_WORKERS, JPEG_QUALITY


def build_services(
    quality: float | None = None,
    workers: int | None = None,
) -> dict[str, Any]:
    codec = PillowHeifCodecAdapter()
    return {
        "mapping_service": MappingService(),
        "conversion_service": ConversionService(
            codec=codec,
            archive_factory=ZipArchiveWriter,
            quality=JPEG_QUALITY if quality is None else quality,
            workers=CONVERSION_WORKERS if workers is None else workers,
        ),
        "codec": codec,
    }

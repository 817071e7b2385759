from .pillow_heif_codec import PillowHeifCodecAdapter
from .zip_archive_writer import ZipArchiveWriter

__all__ = ["PillowHeifCodecAdapter", "ZipArchiveWriter"]

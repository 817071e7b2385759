from .archive_port import ArchiveWriterPort
from .codec_port import ImageCodecPort

__all__ = ["ArchiveWriterPort", "ImageCodecPort"]

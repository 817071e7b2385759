from .conversion_service import ConversionService
from .mapping_service import MappingService, detect_source_kind

__all__ = ["ConversionService", "MappingService", "detect_source_kind"]

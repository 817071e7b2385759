from .mapping import DuplicateRow, MappingLoadResult, MappingTable, ParseDiagnostics, SkippedRow
from .models import ConversionOutcome, Converted, Failed, FileItem, PassedThrough, RenamedEntry
from .rename_logic import jpeg_output_name, resolve_final_name
from .report import BatchReport, BatchResult, BatchSummary, SingleFileResult

__all__ = [
    "BatchReport",
    "BatchResult",
    "BatchSummary",
    "ConversionOutcome",
    "Converted",
    "DuplicateRow",
    "Failed",
    "FileItem",
    "MappingLoadResult",
    "MappingTable",
    "ParseDiagnostics",
    "PassedThrough",
    "RenamedEntry",
    "SingleFileResult",
    "SkippedRow",
    "jpeg_output_name",
    "resolve_final_name",
]

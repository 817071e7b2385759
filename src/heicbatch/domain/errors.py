from __future__ import annotations


class HeicBatchError(Exception):
    """Base class for errors raised by the conversion workflow."""


class MappingParseError(HeicBatchError):
    """The mapping source could not be parsed at all."""


class MissingWorksheet(MappingParseError):
    def __init__(self, message: str = "Could not find worksheet in Excel file") -> None:
        super().__init__(message)


class InvalidMappingSource(MappingParseError):
    pass


class UnsupportedMappingFileType(HeicBatchError):
    def __init__(self, filename: str) -> None:
        super().__init__(
            f"Unsupported mapping file '{filename}'. "
            "Please select an Excel (.xlsx, .xls) or CSV file."
        )
        self.filename = filename


class ConversionError(HeicBatchError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ArchiveError(HeicBatchError):
    pass

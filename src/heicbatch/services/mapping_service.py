from __future__ import annotations

import logging

from openpyxl.utils import column_index_from_string

from heicbatch.domain.errors import MappingParseError, UnsupportedMappingFileType
from heicbatch.domain.mapping import (
    MappingLoadResult,
    MappingRow,
    MappingTable,
    ParseDiagnostics,
    build_mapping,
)
from heicbatch.services.xlsx_reader import read_sheet_rows
from heicbatch.settings import (
    MAPPING_CSV_DELIMITER,
    MAPPING_CSV_SKIP_HEADER,
    MAPPING_SHEET_SKIP_HEADER,
    MAPPING_SOURCE_COLUMN,
    MAPPING_TARGET_COLUMN,
)

logger = logging.getLogger(__name__)

SPREADSHEET = "spreadsheet"
DELIMITED_TEXT = "delimited-text"

_SOURCE_KINDS = {
    ".xlsx": SPREADSHEET,
    ".xls": SPREADSHEET,
    ".csv": DELIMITED_TEXT,
}


def detect_source_kind(filename: str) -> str:
    lowered = filename.lower()
    for extension, kind in _SOURCE_KINDS.items():
        if lowered.endswith(extension):
            return kind
    raise UnsupportedMappingFileType(filename)


class MappingService:
    def __init__(
        self,
        columns: tuple[str, str] | None = None,
        sheet_skip_header: bool | None = None,
        csv_skip_header: bool | None = None,
        delimiter: str | None = None,
    ) -> None:
        self._columns = columns or (MAPPING_SOURCE_COLUMN, MAPPING_TARGET_COLUMN)
        self._sheet_skip_header = (
            MAPPING_SHEET_SKIP_HEADER if sheet_skip_header is None else sheet_skip_header
        )
        self._csv_skip_header = MAPPING_CSV_SKIP_HEADER if csv_skip_header is None else csv_skip_header
        self._delimiter = delimiter or MAPPING_CSV_DELIMITER
        if len(self._delimiter) != 1:
            raise ValueError(f"Delimiter must be a single character, got {self._delimiter!r}")

    @property
    def columns(self) -> tuple[str, str]:
        return self._columns

    def load(self, filename: str, data: bytes) -> MappingLoadResult:
        """
        Parse a mapping file chosen by the user.

        Unsupported extensions raise before any parsing. A source that cannot
        be parsed at all comes back with `error` set and an empty table, which
        callers treat differently from a parse that found zero valid rows.
        """
        kind = detect_source_kind(filename)
        try:
            if kind == SPREADSHEET:
                table, diagnostics = self.parse_sheet(data)
            else:
                table, diagnostics = self.parse_delimited(data)
        except MappingParseError as exc:
            logger.warning("Failed to parse mapping file %s: %s", filename, exc)
            return MappingLoadResult(
                table=MappingTable(),
                diagnostics=ParseDiagnostics(),
                source_kind=kind,
                error=str(exc),
            )

        logger.info(
            "Loaded %d file mappings from %s (%d rows skipped, %d duplicate keys)",
            len(table),
            filename,
            len(diagnostics.skipped_rows),
            len(diagnostics.duplicate_rows),
        )
        for duplicate in diagnostics.duplicate_rows:
            logger.debug(
                "Row %d overrides mapping for %s from row %d: %s -> %s",
                duplicate.row_number,
                duplicate.key,
                duplicate.first_row_number,
                duplicate.first_value,
                duplicate.new_value,
            )
        return MappingLoadResult(table=table, diagnostics=diagnostics, source_kind=kind)

    def parse_sheet(
        self, data: bytes, skip_header: bool | None = None
    ) -> tuple[MappingTable, ParseDiagnostics]:
        skip = self._sheet_skip_header if skip_header is None else skip_header
        rows = read_sheet_rows(data, columns=self._columns, skip_header=skip)
        return build_mapping(rows, column_labels=self._columns)

    def parse_delimited(
        self, data: bytes, skip_header: bool | None = None
    ) -> tuple[MappingTable, ParseDiagnostics]:
        """
        Parse newline-separated records split on the delimiter.

        Fields are split positionally: quotes are stripped from each field but
        do not protect an embedded delimiter. Blank or whitespace-only lines are
        ignored entirely and produce no skipped-row diagnostic; they still count
        toward line numbers.
        """
        skip = self._csv_skip_header if skip_header is None else skip_header
        text = data.decode("utf-8-sig", errors="replace")
        source_index = column_index_from_string(self._columns[0]) - 1
        target_index = column_index_from_string(self._columns[1]) - 1

        rows: list[MappingRow] = []
        for line_number, line in enumerate(text.split("\n"), start=1):
            if skip and line_number == 1:
                continue
            if not line.strip():
                continue
            fields = self._split_record(line.rstrip("\r"))
            rows.append(
                MappingRow(
                    row_number=line_number,
                    source=_field(fields, source_index),
                    target=_field(fields, target_index),
                )
            )
        return build_mapping(rows, column_labels=self._columns)

    def _split_record(self, line: str) -> list[str]:
        return [value.strip().replace('"', "") for value in line.split(self._delimiter)]


def _field(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""

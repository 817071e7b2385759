from __future__ import annotations

import io
import zipfile
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils import column_index_from_string
from openpyxl.utils.exceptions import InvalidFileException

from heicbatch.domain.errors import InvalidMappingSource, MissingWorksheet
from heicbatch.domain.mapping import MappingRow


def read_sheet_rows(
    data: bytes,
    columns: tuple[str, str] = ("Q", "R"),
    skip_header: bool = True,
) -> list[MappingRow]:
    """
    Read the two designated columns from the first worksheet of an xlsx workbook.

    Row numbers are the sheet's own 1-based row numbers. Rows with no values
    at all are ignored; any other row is returned, with "" for an empty cell.
    """
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        raise InvalidMappingSource("File is not a valid Excel workbook.") from exc

    try:
        if not workbook.worksheets:
            raise MissingWorksheet()
        worksheet = workbook.worksheets[0]
        source_offset = column_index_from_string(columns[0]) - 1
        target_offset = column_index_from_string(columns[1]) - 1
        min_row = 2 if skip_header else 1

        rows: list[MappingRow] = []
        for row_number, values in enumerate(
            worksheet.iter_rows(min_row=min_row, values_only=True), start=min_row
        ):
            if all(value is None for value in values):
                continue
            rows.append(
                MappingRow(
                    row_number=row_number,
                    source=_cell_text(values, source_offset),
                    target=_cell_text(values, target_offset),
                )
            )
        return rows
    finally:
        workbook.close()


def _cell_text(values: tuple[Any, ...], offset: int) -> str:
    if offset >= len(values) or values[offset] is None:
        return ""
    return str(values[offset]).strip()

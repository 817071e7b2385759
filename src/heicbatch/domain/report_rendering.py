from __future__ import annotations

from .mapping import MappingLoadResult
from .models import Converted, Failed
from .report import BatchResult, SingleFileResult

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")

_SOURCE_LABELS = {
    "spreadsheet": "Excel",
    "delimited-text": "CSV",
}


def format_file_size(num_bytes: int) -> str:
    """
    Examples:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if num_bytes <= 0:
        return "0 Bytes"
    exponent = 0
    scaled = float(num_bytes)
    while scaled >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        scaled /= 1024
        exponent += 1
    value = float(f"{scaled:.2f}")
    return f"{value:g} {_SIZE_UNITS[exponent]}"


def mapping_status_message(result: MappingLoadResult) -> tuple[str, str]:
    """Return (level, message) describing a loaded mapping source."""
    label = _SOURCE_LABELS.get(result.source_kind or "", "mapping")
    if result.error is not None:
        return "error", f"Failed to parse {label} file: {result.error}"
    count = len(result.table)
    if count == 0:
        return "warning", f"No file mappings found in {label} columns"
    message = f"Loaded {count} file mappings from {label}"
    notes = []
    if result.diagnostics.skipped_rows:
        notes.append(f"{len(result.diagnostics.skipped_rows)} rows skipped")
    if result.diagnostics.duplicate_rows:
        notes.append(f"{len(result.diagnostics.duplicate_rows)} duplicate names overwritten")
    if notes:
        return "warning", f"{message} ({', '.join(notes)})"
    return "success", message


def render_mapping_conflicts(result: MappingLoadResult) -> list[str]:
    lines = []
    for row in result.diagnostics.duplicate_rows:
        lines.append(
            f"Row {row.row_number}: '{row.key}' was '{row.first_value}' "
            f"(row {row.first_row_number}), now '{row.new_value}'"
        )
    for row in result.diagnostics.skipped_rows:
        missing = ", ".join(sorted(row.missing_columns))
        lines.append(f"Row {row.row_number}: skipped, missing column {missing}")
    return lines


def batch_status_message(result: BatchResult) -> tuple[str, str]:
    summary = result.summary
    if summary.total == 0:
        return "info", "No image files found."
    if summary.succeeded == 0:
        return "error", "No files could be processed"
    if summary.failed:
        return (
            "warning",
            f"Processed {summary.succeeded}/{summary.total} files. "
            f"{summary.failed} files failed to convert.",
        )
    message = f"Successfully processed all {summary.total} files!"
    if summary.renamed:
        message += f" {summary.renamed} files were renamed using the mapping file."
    return "success", message


def single_status_message(result: SingleFileResult) -> tuple[str, str]:
    outcome = result.outcome
    if isinstance(outcome, Failed):
        return "error", f"Error: {outcome.error_message or 'Failed to process file'}"
    if isinstance(outcome, Converted):
        if outcome.original_size:
            change = (outcome.original_size - outcome.converted_size) / outcome.original_size * 100
        else:
            change = 0.0
        direction = "larger" if outcome.converted_size > outcome.original_size else "smaller"
        message = f"Successfully converted! File is {abs(change):.1f}% {direction}"
        if result.conversion_ms is not None:
            message += f" ({result.conversion_ms}ms)"
        if outcome.was_renamed:
            message += " File was renamed using the mapping file."
        return "success", message
    message = "This is not a HEIC/HEIF file. No conversion needed."
    if outcome.was_renamed:
        message += " File was renamed using the mapping file."
    return "info", message


def render_batch_summary(result: BatchResult) -> str:
    summary = result.summary
    lines = [
        f"Converted: {summary.converted}",
        f"Passed through: {summary.passed_through}",
        f"Renamed: {summary.renamed}",
        f"Failed: {summary.failed}",
    ]
    if summary.converted:
        lines.append(
            f"HEIC size: {format_file_size(summary.original_bytes)} -> "
            f"JPEG size: {format_file_size(summary.converted_bytes)}"
        )
    if result.archive_filename and result.archive_bytes is not None:
        lines.append(
            f"Archive: {result.archive_filename} ({format_file_size(len(result.archive_bytes))})"
        )
    if result.report.renamed:
        lines.append("")
        lines.append(f"Renamed Files ({len(result.report.renamed)})")
        lines.extend(f"  - {entry.from_name} -> {entry.to_name}" for entry in result.report.renamed)
    if result.report.failed:
        lines.append("")
        lines.append(f"Failed Files ({len(result.report.failed)})")
        lines.extend(f"  - {item.name}: {item.error_message}" for item in result.report.failed)
    return "\n".join(lines) + "\n"

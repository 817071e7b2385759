from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from time import perf_counter

from heicbatch.domain.mapping import MappingTable
from heicbatch.domain.models import Converted, Failed, FileItem, PassedThrough
from heicbatch.domain.rename_logic import (
    archive_path,
    dedupe_archive_path,
    jpeg_output_name,
    resolve_final_name,
)
from heicbatch.domain.report import BatchReport, BatchResult, SingleFileResult
from heicbatch.ports.archive_port import ArchiveWriterPort
from heicbatch.ports.codec_port import ImageCodecPort
from heicbatch.services.time_utils import archive_filename
from heicbatch.settings import CONVERSION_WORKERS, JPEG_QUALITY

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]

_ANALYZING = "Analyzing files..."
_CREATING_ARCHIVE = "Creating ZIP file..."


class ConversionService:
    def __init__(
        self,
        codec: ImageCodecPort,
        archive_factory: Callable[[], ArchiveWriterPort],
        quality: float | None = None,
        workers: int | None = None,
    ) -> None:
        self._codec = codec
        self._archive_factory = archive_factory
        self._quality = JPEG_QUALITY if quality is None else quality
        self._workers = max(1, CONVERSION_WORKERS if workers is None else workers)

    def process_files(
        self,
        items: Sequence[FileItem],
        table: MappingTable,
        progress_callback: ProgressCallback | None = None,
    ) -> BatchResult | SingleFileResult | None:
        if not items:
            return None
        if len(items) == 1:
            return self.run_single(items[0], table)
        return self.run_batch(items, table, progress_callback)

    def run_single(self, item: FileItem, table: MappingTable) -> SingleFileResult:
        resolved = self._resolve(item, table)
        name = resolved.current_name
        was_renamed = resolved.renamed_from is not None
        if not resolved.is_heic:
            return SingleFileResult(
                item=resolved,
                outcome=PassedThrough(name=name, was_renamed=was_renamed),
                output_name=name,
                output_bytes=resolved.data,
            )

        started = perf_counter()
        converted = self._convert(resolved)
        if isinstance(converted, Exception):
            return SingleFileResult(
                item=resolved,
                outcome=Failed(name=name, error_message=_error_message(converted)),
            )
        conversion_ms = int((perf_counter() - started) * 1000)
        output_name = jpeg_output_name(name)
        return SingleFileResult(
            item=resolved,
            outcome=Converted(
                original=resolved.original_name,
                output_name=output_name,
                original_size=resolved.size,
                converted_size=len(converted),
                was_renamed=was_renamed,
            ),
            output_name=output_name,
            output_bytes=converted,
            conversion_ms=conversion_ms,
        )

    def run_batch(
        self,
        items: Sequence[FileItem],
        table: MappingTable,
        progress_callback: ProgressCallback | None = None,
    ) -> BatchResult:
        """
        Convert a batch into one archive, recording one outcome per input file.

        Outcomes, renames, archive entries and progress all follow input order,
        including when conversions run on the worker pool. A failed conversion
        only affects its own file; archive errors abort the whole run.
        """
        report = BatchReport()
        total = len(items)
        if total == 0:
            return BatchResult(report=report, summary=report.finalize())

        resolved_items: list[FileItem] = []
        for position, item in enumerate(items, start=1):
            resolved_items.append(self._resolve(item, table))
            self._emit_progress(progress_callback, position, total, _ANALYZING)

        heic_count = sum(1 for item in resolved_items if item.is_heic)
        run_mode = "serial" if self._workers <= 1 or heic_count <= 1 else "parallel"
        logger.info(
            "Converting batch of %d files (%d HEIC, mode=%s)", total, heic_count, run_mode
        )
        precomputed = self._convert_parallel(resolved_items) if run_mode == "parallel" else {}

        writer = self._archive_factory()
        used_paths: set[str] = set()
        entries: list[str] = []
        for position, item in enumerate(resolved_items, start=1):
            name = item.current_name
            was_renamed = item.renamed_from is not None
            if item.is_heic:
                message = f"Converting {name}..."
                if position in precomputed:
                    converted = precomputed[position]
                else:
                    converted = self._convert(item)
                if isinstance(converted, Exception):
                    logger.warning("Failed to convert %s: %s", name, converted)
                    report.record(Failed(name=name, error_message=_error_message(converted)))
                    self._emit_progress(progress_callback, position, total, message)
                    continue
                output_name = jpeg_output_name(name)
                payload = converted
            else:
                message = f"Adding {name}..."
                output_name = name
                payload = item.data

            requested_path = archive_path(item.relative_path, output_name)
            entry_path = dedupe_archive_path(requested_path, used_paths)
            if entry_path != requested_path:
                output_name = entry_path.rsplit("/", 1)[-1]
            writer.add(entry_path, payload)
            used_paths.add(entry_path)
            entries.append(entry_path)

            if item.is_heic:
                report.record(
                    Converted(
                        original=item.original_name,
                        output_name=output_name,
                        original_size=item.size,
                        converted_size=len(payload),
                        was_renamed=was_renamed,
                    )
                )
            else:
                report.record(PassedThrough(name=output_name, was_renamed=was_renamed))
            if item.renamed_from is not None:
                report.record_rename(item.renamed_from, output_name)
            self._emit_progress(progress_callback, position, total, message)

        summary = report.finalize()
        if not entries:
            logger.info("No files could be processed; skipping archive creation")
            return BatchResult(report=report, summary=summary)

        self._emit_progress(progress_callback, 1, 1, _CREATING_ARCHIVE)
        archive_bytes = writer.serialize()
        filename = archive_filename()
        logger.info(
            "Created %s with %d entries (%d converted, %d failed)",
            filename,
            len(entries),
            summary.converted,
            summary.failed,
        )
        return BatchResult(
            report=report,
            summary=summary,
            archive_bytes=archive_bytes,
            archive_filename=filename,
            archive_entries=entries,
        )

    def _resolve(self, item: FileItem, table: MappingTable) -> FileItem:
        final_name = resolve_final_name(item.original_name, table)
        return item.with_resolution(final_name, self._detect_heic(item))

    def _detect_heic(self, item: FileItem) -> bool:
        try:
            return bool(self._codec.is_heic(item.data))
        except (OSError, ValueError) as exc:
            logger.warning("Could not inspect %s, treating as non-HEIC: %s", item.original_name, exc)
            return False

    def _convert(self, item: FileItem) -> bytes | Exception:
        try:
            return self._codec.convert_to_jpeg(item.data, self._quality)
        except Exception as exc:
            return exc

    def _convert_parallel(self, items: list[FileItem]) -> dict[int, bytes | Exception]:
        results: dict[int, bytes | Exception] = {}
        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            future_map = {
                executor.submit(self._convert, item): position
                for position, item in enumerate(items, start=1)
                if item.is_heic
            }
            for future in as_completed(future_map):
                results[future_map[future]] = future.result()
        return results

    @staticmethod
    def _emit_progress(
        callback: ProgressCallback | None,
        current: int,
        total: int,
        message: str,
    ) -> None:
        if callback is None:
            return
        callback(current, total, message)


def _error_message(exc: Exception) -> str:
    return str(exc) or type(exc).__name__

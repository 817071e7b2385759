import io
import re
import time
import zipfile
from unittest.mock import Mock

import pytest

from heicbatch.adapters.zip_archive_writer import ZipArchiveWriter
from heicbatch.domain.errors import ArchiveError, ConversionError
from heicbatch.domain.mapping import MappingTable
from heicbatch.domain.models import Converted, Failed, FileItem, PassedThrough, RenamedEntry
from heicbatch.domain.report import BatchResult, SingleFileResult
from heicbatch.services.conversion_service import ConversionService


def _fake_codec(fail_on: bytes = b"HEIC-bad") -> Mock:
    codec = Mock()
    codec.is_heic.side_effect = lambda data: data.startswith(b"HEIC")

    def _convert(data: bytes, quality: float) -> bytes:
        if data == fail_on:
            raise ConversionError("Unsupported HEIF feature")
        return b"JPEG:" + data

    codec.convert_to_jpeg.side_effect = _convert
    return codec


def _service(codec: Mock | None = None, archive_factory=ZipArchiveWriter, workers: int = 1) -> ConversionService:
    return ConversionService(
        codec=codec or _fake_codec(),
        archive_factory=archive_factory,
        quality=0.8,
        workers=workers,
    )


def _zip_names(data: bytes) -> list[str]:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return archive.namelist()


def test_mixed_batch_isolates_failure() -> None:
    items = [
        FileItem("good.heic", b"HEIC-good"),
        FileItem("bad.heic", b"HEIC-bad"),
        FileItem("pic.png", b"PNG"),
    ]

    result = _service().run_batch(items, MappingTable())

    assert result.report.converted == [
        Converted(original="good.heic", output_name="good.jpg", original_size=9, converted_size=14, was_renamed=False)
    ]
    assert result.report.failed == [Failed(name="bad.heic", error_message="Unsupported HEIF feature")]
    assert result.report.passed_through == [PassedThrough(name="pic.png", was_renamed=False)]
    assert len(result.report.outcomes) == len(items)
    assert result.archive_bytes is not None
    assert _zip_names(result.archive_bytes) == ["good.jpg", "pic.png"]
    assert result.archive_entries == ["good.jpg", "pic.png"]
    assert re.fullmatch(r"converted_images_\d{8}T\d{6}\.zip", result.archive_filename)


def test_archive_contents_are_converted_and_original_bytes() -> None:
    items = [FileItem("a.heic", b"HEIC-a", relative_path="trip/"), FileItem("b.jpg", b"JPG-b")]

    result = _service().run_batch(items, MappingTable())

    with zipfile.ZipFile(io.BytesIO(result.archive_bytes)) as archive:
        assert archive.read("trip/a.jpg") == b"JPEG:HEIC-a"
        assert archive.read("b.jpg") == b"JPG-b"


def test_renames_apply_to_both_branches_and_use_output_names() -> None:
    table = MappingTable([("a.heic", "beach.HEIC"), ("b.png", "park.png")])
    items = [FileItem("a.heic", b"HEIC-a"), FileItem("b.png", b"PNG"), FileItem("c.png", b"PNG")]

    result = _service().run_batch(items, table)

    assert result.report.renamed == [
        RenamedEntry(from_name="a.heic", to_name="beach.jpg"),
        RenamedEntry(from_name="b.png", to_name="park.png"),
    ]
    assert result.report.converted[0].original == "a.heic"
    assert result.report.converted[0].was_renamed is True
    assert result.report.passed_through[0] == PassedThrough(name="park.png", was_renamed=True)
    assert _zip_names(result.archive_bytes) == ["beach.jpg", "park.png", "c.png"]


def test_failed_conversion_reports_renamed_name_without_rename_entry() -> None:
    table = MappingTable([("x.heic", "renamed.heic")])

    result = _service().run_batch([FileItem("x.heic", b"HEIC-bad"), FileItem("y.png", b"P")], table)

    assert result.report.failed == [Failed(name="renamed.heic", error_message="Unsupported HEIF feature")]
    assert result.report.renamed == []


def test_outcomes_follow_input_order() -> None:
    items = [
        FileItem("1.png", b"P1"),
        FileItem("2.heic", b"HEIC-2"),
        FileItem("3.heic", b"HEIC-bad"),
        FileItem("4.png", b"P4"),
    ]

    result = _service().run_batch(items, MappingTable())

    assert [type(outcome) for outcome in result.report.outcomes] == [
        PassedThrough,
        Converted,
        Failed,
        PassedThrough,
    ]


def test_parallel_workers_preserve_input_order() -> None:
    codec = Mock()
    codec.is_heic.return_value = True
    delays = {b"HEIC-0": 0.05, b"HEIC-1": 0.03, b"HEIC-2": 0.0}

    def _convert(data: bytes, quality: float) -> bytes:
        time.sleep(delays[data])
        return data.lower()

    codec.convert_to_jpeg.side_effect = _convert
    items = [FileItem(f"{index}.heic", f"HEIC-{index}".encode()) for index in range(3)]

    result = _service(codec=codec, workers=3).run_batch(items, MappingTable())

    assert [outcome.output_name for outcome in result.report.outcomes] == ["0.jpg", "1.jpg", "2.jpg"]
    assert _zip_names(result.archive_bytes) == ["0.jpg", "1.jpg", "2.jpg"]


def test_progress_is_reported_per_file_for_each_phase() -> None:
    progress = Mock()
    items = [FileItem("a.heic", b"HEIC-a"), FileItem("b.png", b"PNG")]

    _service().run_batch(items, MappingTable(), progress_callback=progress)

    assert progress.call_args_list == [
        ((1, 2, "Analyzing files..."),),
        ((2, 2, "Analyzing files..."),),
        ((1, 2, "Converting a.heic..."),),
        ((2, 2, "Adding b.png..."),),
        ((1, 1, "Creating ZIP file..."),),
    ]


def test_detection_error_treats_file_as_non_heic() -> None:
    codec = _fake_codec()
    codec.is_heic.side_effect = OSError("read failed")

    result = _service(codec=codec).run_batch(
        [FileItem("a.heic", b"HEIC-a"), FileItem("b.heic", b"HEIC-b")], MappingTable()
    )

    assert result.report.passed_through == [
        PassedThrough(name="a.heic", was_renamed=False),
        PassedThrough(name="b.heic", was_renamed=False),
    ]
    codec.convert_to_jpeg.assert_not_called()


def test_unexpected_codec_error_is_isolated_per_file() -> None:
    codec = _fake_codec()
    codec.convert_to_jpeg.side_effect = [RuntimeError(), b"JPEG"]

    result = _service(codec=codec).run_batch(
        [FileItem("a.heic", b"HEIC-a"), FileItem("b.heic", b"HEIC-b")], MappingTable()
    )

    assert result.report.failed == [Failed(name="a.heic", error_message="RuntimeError")]
    assert [item.output_name for item in result.report.converted] == ["b.jpg"]


def test_colliding_output_names_are_deduplicated() -> None:
    table = MappingTable([("a.heic", "same.heic"), ("b.heic", "same.heic")])

    result = _service().run_batch([FileItem("a.heic", b"HEIC-a"), FileItem("b.heic", b"HEIC-b")], table)

    assert _zip_names(result.archive_bytes) == ["same.jpg", "same_01.jpg"]
    assert [entry.to_name for entry in result.report.renamed] == ["same.jpg", "same_01.jpg"]


def test_empty_batch_is_a_no_op() -> None:
    factory = Mock()

    result = _service(archive_factory=factory).run_batch([], MappingTable())

    assert result.summary.total == 0
    assert result.archive_bytes is None
    factory.assert_not_called()


def test_all_failures_produce_report_without_archive() -> None:
    writer = Mock()
    items = [FileItem("a.heic", b"HEIC-bad"), FileItem("b.heic", b"HEIC-bad")]

    result = _service(archive_factory=lambda: writer).run_batch(items, MappingTable())

    assert result.summary.failed == 2
    assert result.archive_bytes is None
    assert result.archive_filename is None
    writer.add.assert_not_called()
    writer.serialize.assert_not_called()


def test_archive_serialization_failure_aborts_run() -> None:
    writer = Mock()
    writer.serialize.side_effect = ArchiveError("disk full")
    items = [FileItem("a.heic", b"HEIC-a"), FileItem("b.png", b"PNG")]

    with pytest.raises(ArchiveError, match="disk full"):
        _service(archive_factory=lambda: writer).run_batch(items, MappingTable())


def test_run_single_renames_and_converts() -> None:
    table = MappingTable([("photo.heic", "vacation.heic")])

    result = _service().run_single(FileItem("photo.heic", b"HEIC-photo"), table)

    assert isinstance(result, SingleFileResult)
    assert result.output_name == "vacation.jpg"
    assert result.output_bytes == b"JPEG:HEIC-photo"
    assert result.outcome == Converted(
        original="photo.heic",
        output_name="vacation.jpg",
        original_size=10,
        converted_size=15,
        was_renamed=True,
    )
    assert result.was_renamed
    assert result.conversion_ms is not None


def test_run_single_passes_through_non_heic() -> None:
    result = _service().run_single(FileItem("pic.png", b"PNG"), MappingTable())

    assert result.outcome == PassedThrough(name="pic.png", was_renamed=False)
    assert result.output_bytes == b"PNG"


def test_run_single_failure_is_reported_as_outcome() -> None:
    result = _service().run_single(FileItem("x.heic", b"HEIC-bad"), MappingTable())

    assert result.outcome == Failed(name="x.heic", error_message="Unsupported HEIF feature")
    assert result.output_bytes is None


def test_process_files_dispatches_on_item_count() -> None:
    factory = Mock(side_effect=ZipArchiveWriter)
    service = _service(archive_factory=factory)

    assert service.process_files([], MappingTable()) is None
    assert isinstance(service.process_files([FileItem("a.heic", b"HEIC-a")], MappingTable()), SingleFileResult)
    factory.assert_not_called()

    batch = service.process_files([FileItem("a.heic", b"HEIC-a"), FileItem("b.png", b"P")], MappingTable())
    assert isinstance(batch, BatchResult)
    factory.assert_called_once()


def test_quality_is_passed_to_codec() -> None:
    codec = _fake_codec()

    ConversionService(codec=codec, archive_factory=ZipArchiveWriter, quality=0.5, workers=1).run_single(
        FileItem("a.heic", b"HEIC-a"), MappingTable()
    )

    codec.convert_to_jpeg.assert_called_once_with(b"HEIC-a", 0.5)

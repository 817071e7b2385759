from __future__ import annotations

import logging
import sys
from pathlib import Path

import streamlit as st
from dotenv import load_dotenv

_SRC_ROOT = Path(__file__).resolve().parents[2]
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))
load_dotenv(_SRC_ROOT.parent / ".env", override=False)

from heicbatch.container import build_services
from heicbatch.domain.errors import HeicBatchError
from heicbatch.domain.mapping import MappingLoadResult, MappingTable
from heicbatch.domain.models import Converted, FileItem
from heicbatch.domain.report import BatchResult, SingleFileResult
from heicbatch.domain.report_rendering import (
    batch_status_message,
    format_file_size,
    mapping_status_message,
    render_mapping_conflicts,
    single_status_message,
)
from heicbatch.settings import LOG_LEVEL

logger = logging.getLogger(__name__)

_MESSAGE_WIDGETS = {
    "success": st.success,
    "info": st.info,
    "warning": st.warning,
    "error": st.error,
}


def _init_state() -> None:
    st.session_state.setdefault("services", None)
    st.session_state.setdefault("mapping_result", None)
    st.session_state.setdefault("mapping_file_key", None)
    st.session_state.setdefault("uploader_generation", 0)


def _get_services():
    if st.session_state["services"] is None:
        st.session_state["services"] = build_services()
    return st.session_state["services"]


def _reset() -> None:
    st.session_state["mapping_result"] = None
    st.session_state["mapping_file_key"] = None
    st.session_state["uploader_generation"] += 1


def _show(level: str, message: str) -> None:
    _MESSAGE_WIDGETS.get(level, st.info)(message)


def _current_table() -> MappingTable:
    result: MappingLoadResult | None = st.session_state.get("mapping_result")
    if result is None:
        return MappingTable()
    return result.table


def _render_mapping_section(generation: int) -> None:
    st.subheader("1. Optional: filename mapping")
    mapping_file = st.file_uploader(
        "Excel or CSV with original names in column Q and new names in column R",
        type=["xlsx", "xls", "csv"],
        key=f"mapping_upload_{generation}",
    )
    if mapping_file is None:
        st.session_state["mapping_result"] = None
        st.session_state["mapping_file_key"] = None
        return

    file_key = (mapping_file.name, mapping_file.size)
    if st.session_state.get("mapping_file_key") != file_key:
        try:
            result = _get_services()["mapping_service"].load(
                mapping_file.name, mapping_file.getvalue()
            )
        except HeicBatchError as exc:
            st.session_state["mapping_result"] = None
            st.session_state["mapping_file_key"] = None
            st.error(str(exc))
            return
        st.session_state["mapping_result"] = result
        st.session_state["mapping_file_key"] = file_key

    result = st.session_state["mapping_result"]
    _show(*mapping_status_message(result))
    conflicts = render_mapping_conflicts(result)
    if conflicts:
        with st.expander(f"Mapping details ({len(conflicts)})", expanded=False):
            for line in conflicts:
                st.write(line)


def _render_single_result(result: SingleFileResult) -> None:
    _show(*single_status_message(result))
    item = result.item
    left, right = st.columns(2)
    with left:
        st.markdown(f"**{item.current_name}**")
        if item.renamed_from:
            st.caption(f"Renamed from: {item.renamed_from}")
        st.caption(f"{'HEIC/HEIF' if item.is_heic else item.mime_type} • {format_file_size(item.size)}")
        if not item.is_heic and item.mime_type.startswith("image/"):
            st.image(item.data)
        elif not item.is_heic:
            st.warning("Unsupported file type. Please select a HEIC/HEIF or image file.")
    with right:
        if isinstance(result.outcome, Converted) and result.output_bytes is not None:
            st.image(result.output_bytes, caption="Converted JPEG image")
            st.caption(
                f"JPEG • {format_file_size(len(result.output_bytes))} • {result.conversion_ms}ms"
            )
            st.download_button(
                "Download JPEG",
                data=result.output_bytes,
                file_name=result.output_name,
                mime="image/jpeg",
            )


def _render_batch_result(result: BatchResult) -> None:
    _show(*batch_status_message(result))
    summary = result.summary
    cols = st.columns(4)
    cols[0].metric("Converted", summary.converted)
    cols[1].metric("Passed through", summary.passed_through)
    cols[2].metric("Renamed", summary.renamed)
    cols[3].metric("Failed", summary.failed)

    if result.archive_bytes is not None and result.archive_filename:
        st.caption(f"ZIP • {format_file_size(len(result.archive_bytes))}")
        st.download_button(
            "Download ZIP",
            data=result.archive_bytes,
            file_name=result.archive_filename,
            mime="application/zip",
        )
    if result.report.renamed:
        with st.expander(f"Renamed Files ({len(result.report.renamed)})", expanded=False):
            for entry in result.report.renamed:
                st.write(f"• {entry.from_name} → {entry.to_name}")
    if result.report.failed:
        with st.expander(f"Failed Files ({len(result.report.failed)})", expanded=False):
            for item in result.report.failed:
                st.write(f"• {item.name}: {item.error_message}")


def main() -> None:
    logging.basicConfig(level=LOG_LEVEL)
    st.set_page_config(page_title="HEIC Batch Converter")
    _init_state()
    st.title("HEIC to JPEG Batch Converter")

    if st.button("Reset"):
        _reset()
    generation = st.session_state["uploader_generation"]

    _render_mapping_section(generation)

    st.subheader("2. Images")
    uploads = st.file_uploader(
        "HEIC/HEIF or other image files",
        accept_multiple_files=True,
        key=f"image_upload_{generation}",
    )
    if not uploads or not st.button("Convert"):
        return

    items = [FileItem(original_name=upload.name, data=upload.getvalue()) for upload in uploads]
    progress_bar = st.progress(0.0, text="Processing...")

    def _on_progress(current: int, total: int, message: str) -> None:
        progress_bar.progress(min(current / total, 1.0) if total else 1.0, text=message)

    try:
        result = _get_services()["conversion_service"].process_files(
            items, _current_table(), progress_callback=_on_progress
        )
    except HeicBatchError as exc:
        logger.exception("Batch conversion failed")
        progress_bar.empty()
        st.error(f"Error: {exc or 'Failed to process files'}")
        return
    progress_bar.empty()

    if isinstance(result, SingleFileResult):
        _render_single_result(result)
    elif isinstance(result, BatchResult):
        _render_batch_result(result)


if __name__ == "__main__":
    main()

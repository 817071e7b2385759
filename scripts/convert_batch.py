from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

_REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(_REPO_ROOT / ".env", override=False)

from heicbatch.container import build_services
from heicbatch.domain.errors import HeicBatchError
from heicbatch.domain.mapping import MappingTable
from heicbatch.domain.models import FileItem
from heicbatch.domain.report_rendering import (
    batch_status_message,
    mapping_status_message,
    render_batch_summary,
    render_mapping_conflicts,
)
from heicbatch.settings import LOG_LEVEL


def collect_files(input_dir: Path) -> list[FileItem]:
    items: list[FileItem] = []
    for path in sorted(p for p in input_dir.rglob("*") if p.is_file()):
        parent = path.parent.relative_to(input_dir).as_posix()
        relative_path = "" if parent == "." else f"{parent}/"
        items.append(
            FileItem(original_name=path.name, data=path.read_bytes(), relative_path=relative_path)
        )
    return items


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Convert HEIC/HEIF images in a folder to JPEG and bundle them into a ZIP."
    )
    parser.add_argument("input_dir", help="Folder with images (searched recursively)")
    parser.add_argument("--mapping", help="Excel (.xlsx/.xls) or CSV file mapping old to new names")
    parser.add_argument("--out-dir", default=".", help="Where to write the ZIP (default: .)")
    parser.add_argument("--quality", type=float, default=None, help="JPEG quality between 0 and 1")
    parser.add_argument("--workers", type=int, default=None, help="Parallel conversions")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        print(f"Input folder not found: {input_dir}", file=sys.stderr)
        return 2

    services = build_services(quality=args.quality, workers=args.workers)
    table = MappingTable()
    if args.mapping:
        mapping_path = Path(args.mapping)
        try:
            mapping_result = services["mapping_service"].load(mapping_path.name, mapping_path.read_bytes())
        except HeicBatchError as exc:
            print(f"[mapping] {exc}", file=sys.stderr)
            return 2
        level, message = mapping_status_message(mapping_result)
        print(f"[mapping] {level}: {message}")
        for line in render_mapping_conflicts(mapping_result):
            print(f"[mapping]   {line}")
        table = mapping_result.table

    items = collect_files(input_dir)

    def _on_progress(current: int, total: int, message: str) -> None:
        print(f"[{current}/{total}] {message}")

    try:
        result = services["conversion_service"].run_batch(items, table, progress_callback=_on_progress)
    except HeicBatchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    level, message = batch_status_message(result)
    print(f"{level}: {message}")
    print(render_batch_summary(result), end="")
    if result.archive_bytes is None or result.archive_filename is None:
        return 1 if result.summary.total else 0

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    archive_path = out_dir / result.archive_filename
    archive_path.write_bytes(result.archive_bytes)
    print(f"Wrote {archive_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import os

JPEG_QUALITY = float(os.getenv("JPEG_QUALITY", "0.8"))
CONVERSION_WORKERS = int(os.getenv("CONVERSION_WORKERS", "1"))
MAPPING_SOURCE_COLUMN = os.getenv("MAPPING_SOURCE_COLUMN", "Q").strip().upper()
MAPPING_TARGET_COLUMN = os.getenv("MAPPING_TARGET_COLUMN", "R").strip().upper()
MAPPING_SHEET_SKIP_HEADER = os.getenv("MAPPING_SHEET_SKIP_HEADER", "1") == "1"
MAPPING_CSV_SKIP_HEADER = os.getenv("MAPPING_CSV_SKIP_HEADER", "0") == "1"
MAPPING_CSV_DELIMITER = os.getenv("MAPPING_CSV_DELIMITER", ",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

from __future__ import annotations

from datetime import datetime, timezone


def utc_timestamp_compact(now: datetime | None = None) -> str:
    """
    Examples:
        >>> utc_timestamp_compact(datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        '20250102T030405'
    """
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y%m%dT%H%M%S")


def archive_filename(now: datetime | None = None) -> str:
    return f"converted_images_{utc_timestamp_compact(now)}.zip"

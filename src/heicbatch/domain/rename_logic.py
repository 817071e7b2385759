from __future__ import annotations

import re

from .mapping import MappingTable

_HEIF_EXTENSION = re.compile(r"\.(heic|heif)$", re.IGNORECASE)


def resolve_final_name(original_name: str, table: MappingTable) -> str:
    """
    Return the mapped name for a file, or the name itself when unmapped.

    Examples:
        >>> resolve_final_name("photo.heic", MappingTable([("photo.heic", "vacation.heic")]))
        'vacation.heic'
        >>> resolve_final_name("other.png", MappingTable())
        'other.png'
    """
    mapped = table.get(original_name)
    return mapped if mapped else original_name


def jpeg_output_name(name: str) -> str:
    """
    Examples:
        >>> jpeg_output_name("vacation.HEIC")
        'vacation.jpg'
        >>> jpeg_output_name("scan")
        'scan.jpg'
    """
    return _HEIF_EXTENSION.sub("", name) + ".jpg"


def archive_path(relative_path: str, name: str) -> str:
    return f"{relative_path}{name}"


def dedupe_archive_path(path: str, used_paths: set[str]) -> str:
    """
    Apply a deterministic collision policy to archive entry paths.

    Example:
        dedupe_archive_path("trip/photo.jpg", {"trip/photo.jpg"})
        # 'trip/photo_01.jpg'
    """
    if path not in used_paths:
        return path
    directory, slash, name = path.rpartition("/")
    return _next_available_name(f"{directory}{slash}", name, used_paths)


def _next_available_name(prefix: str, name: str, used_paths: set[str]) -> str:
    base, ext = _split_extension(name)
    counter = 1
    while True:
        candidate = f"{prefix}{base}_{counter:02d}{ext}"
        if candidate not in used_paths:
            return candidate
        counter += 1


def _split_extension(name: str) -> tuple[str, str]:
    """
    Split a filename into (base, extension), keeping the dot in the extension.
    """
    base, dot, ext = name.rpartition(".")
    if dot == "":
        return name, ""
    if base == "":
        return "", f".{ext}"
    return base, f".{ext}"

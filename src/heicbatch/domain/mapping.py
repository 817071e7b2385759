from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


class MappingTable:
    """
    Ordered filename mapping with unique keys.

    Writing an existing key replaces its value in place, so iteration order is
    the order in which keys were first seen.

    Example:
        >>> table = MappingTable()
        >>> table.put("a.heic", "b.heic") is None
        True
        >>> table.put("a.heic", "c.heic")
        'b.heic'
        >>> dict(table.items())
        {'a.heic': 'c.heic'}
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._entries: dict[str, str] = {}
        for key, value in pairs:
            self.put(key, value)

    def put(self, key: str, value: str) -> str | None:
        previous = self._entries.get(key)
        self._entries[key] = value
        return previous

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._entries.get(key, default)

    def items(self) -> list[tuple[str, str]]:
        return list(self._entries.items())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MappingTable):
            return self._entries == other._entries
        if isinstance(other, dict):
            return self._entries == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"MappingTable({self._entries!r})"


@dataclass(frozen=True)
class SkippedRow:
    row_number: int
    missing_columns: frozenset[str]
    raw_values: tuple[str, str]


@dataclass(frozen=True)
class DuplicateRow:
    row_number: int
    key: str
    first_row_number: int
    first_value: str
    new_value: str


@dataclass
class ParseDiagnostics:
    skipped_rows: list[SkippedRow] = field(default_factory=list)
    duplicate_rows: list[DuplicateRow] = field(default_factory=list)


@dataclass(frozen=True)
class MappingRow:
    row_number: int
    source: str
    target: str


@dataclass
class MappingLoadResult:
    table: MappingTable
    diagnostics: ParseDiagnostics
    source_kind: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_mapping(
    rows: Iterable[MappingRow],
    column_labels: tuple[str, str] = ("Q", "R"),
) -> tuple[MappingTable, ParseDiagnostics]:
    """
    Classify extracted rows into table entries, skipped rows and duplicates.

    A row is kept only when both values are non-empty. A repeated key takes
    the newer value; the diagnostic keeps the first occurrence for reporting.
    """
    table = MappingTable()
    diagnostics = ParseDiagnostics()
    first_seen: dict[str, tuple[int, str]] = {}
    source_label, target_label = column_labels

    for row in rows:
        missing = set()
        if not row.source:
            missing.add(source_label)
        if not row.target:
            missing.add(target_label)
        if missing:
            diagnostics.skipped_rows.append(
                SkippedRow(
                    row_number=row.row_number,
                    missing_columns=frozenset(missing),
                    raw_values=(row.source, row.target),
                )
            )
            continue

        if row.source in first_seen:
            first_row_number, first_value = first_seen[row.source]
            diagnostics.duplicate_rows.append(
                DuplicateRow(
                    row_number=row.row_number,
                    key=row.source,
                    first_row_number=first_row_number,
                    first_value=first_value,
                    new_value=row.target,
                )
            )
        else:
            first_seen[row.source] = (row.row_number, row.target)
        table.put(row.source, row.target)

    return table, diagnostics

from __future__ import annotations

from dataclasses import dataclass, field

from .models import ConversionOutcome, Converted, Failed, FileItem, PassedThrough, RenamedEntry


@dataclass(frozen=True)
class BatchSummary:
    converted: int
    passed_through: int
    failed: int
    renamed: int
    original_bytes: int
    converted_bytes: int

    @property
    def total(self) -> int:
        return self.converted + self.passed_through + self.failed

    @property
    def succeeded(self) -> int:
        return self.converted + self.passed_through

    @property
    def bytes_delta(self) -> int:
        return self.converted_bytes - self.original_bytes


@dataclass
class BatchReport:
    converted: list[Converted] = field(default_factory=list)
    passed_through: list[PassedThrough] = field(default_factory=list)
    failed: list[Failed] = field(default_factory=list)
    renamed: list[RenamedEntry] = field(default_factory=list)
    outcomes: list[ConversionOutcome] = field(default_factory=list)

    def record(self, outcome: ConversionOutcome) -> None:
        self.outcomes.append(outcome)
        if isinstance(outcome, Converted):
            self.converted.append(outcome)
        elif isinstance(outcome, PassedThrough):
            self.passed_through.append(outcome)
        elif isinstance(outcome, Failed):
            self.failed.append(outcome)
        else:
            raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")

    def record_rename(self, from_name: str, to_name: str) -> None:
        self.renamed.append(RenamedEntry(from_name=from_name, to_name=to_name))

    def finalize(self) -> BatchSummary:
        return BatchSummary(
            converted=len(self.converted),
            passed_through=len(self.passed_through),
            failed=len(self.failed),
            renamed=len(self.renamed),
            original_bytes=sum(item.original_size for item in self.converted),
            converted_bytes=sum(item.converted_size for item in self.converted),
        )


@dataclass
class BatchResult:
    report: BatchReport
    summary: BatchSummary
    archive_bytes: bytes | None = field(default=None, repr=False)
    archive_filename: str | None = None
    archive_entries: list[str] = field(default_factory=list)


@dataclass
class SingleFileResult:
    item: FileItem
    outcome: ConversionOutcome
    output_name: str | None = None
    output_bytes: bytes | None = field(default=None, repr=False)
    conversion_ms: int | None = None

    @property
    def was_renamed(self) -> bool:
        return self.item.renamed_from is not None

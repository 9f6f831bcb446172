"""
Per-run state for a voter ingestion batch.

`RowOutcome` is what every row produces; `BatchContext` carries the zone
lookup, resolver config and the single-writer `BatchSummary` through the
pipeline. A fresh context is built for every run.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from django.conf import settings

from .zones import ResolverConfig, ZoneLookup


class OutcomeKind(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class RowOutcome:
    kind: OutcomeKind
    row_number: int
    voter_id: str | None = None
    reason: str | None = None
    detail: str | None = None
    exception: BaseException | None = None

    @classmethod
    def inserted(cls, row_number, voter_id):
        return cls(OutcomeKind.INSERTED, row_number, voter_id)

    @classmethod
    def updated(cls, row_number, voter_id):
        return cls(OutcomeKind.UPDATED, row_number, voter_id)

    @classmethod
    def duplicate(cls, row_number, voter_id, detail=None):
        return cls(OutcomeKind.DUPLICATE, row_number, voter_id, detail=detail)

    @classmethod
    def skipped(cls, row_number, voter_id, reason):
        return cls(OutcomeKind.SKIPPED, row_number, voter_id, reason=reason)

    @classmethod
    def error(cls, row_number, voter_id, detail, exception=None):
        return cls(
            OutcomeKind.ERROR, row_number, voter_id, detail=detail, exception=exception
        )


@dataclass
class BatchSummary:
    inserted: int = 0
    updated: int = 0
    duplicates: int = 0
    skipped: int = 0
    errors: int = 0
    skip_reasons: Counter = field(default_factory=Counter)
    region_fallbacks: Counter = field(default_factory=Counter)
    missing_zone_codes: Counter = field(default_factory=Counter)
    expected_rows: int = 0
    final_voter_count: int | None = None
    chunks: int = 0

    @property
    def processed(self) -> int:
        return self.inserted + self.updated + self.duplicates + self.skipped + self.errors

    @property
    def success_rate(self) -> float:
        if not self.expected_rows:
            return 0.0
        return (self.inserted + self.updated) / self.expected_rows * 100

    def merge(self, other: "BatchSummary") -> None:
        """Add a chunk tally into this summary."""
        self.inserted += other.inserted
        self.updated += other.updated
        self.duplicates += other.duplicates
        self.skipped += other.skipped
        self.errors += other.errors
        self.skip_reasons.update(other.skip_reasons)
        self.region_fallbacks.update(other.region_fallbacks)
        self.missing_zone_codes.update(other.missing_zone_codes)
        self.chunks += other.chunks

    def as_dict(self) -> dict[str, Any]:
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "duplicates": self.duplicates,
            "skipped": self.skipped,
            "errors": self.errors,
            "skip_reasons": dict(self.skip_reasons),
            "region_fallbacks": dict(self.region_fallbacks),
            "missing_zone_codes": dict(self.missing_zone_codes),
            "expected_rows": self.expected_rows,
            "final_voter_count": self.final_voter_count,
            "chunks": self.chunks,
            "success_rate": round(self.success_rate, 1),
        }


@dataclass
class BatchContext:
    lookup: ZoneLookup
    config: ResolverConfig
    mode: str = "INSERT"
    today: date = field(default_factory=date.today)
    email_domain: str = field(
        default_factory=lambda: getattr(settings, "VOTER_EMAIL_DOMAIN", "kms-election.com")
    )
    chunk_size: int = field(
        default_factory=lambda: getattr(settings, "VOTER_INGEST_CHUNK_SIZE", 50)
    )
    progress_every: int = field(
        default_factory=lambda: getattr(settings, "VOTER_PROGRESS_EVERY", 50)
    )
    verbose_error_limit: int = field(
        default_factory=lambda: getattr(settings, "VOTER_VERBOSE_ERROR_LIMIT", 10)
    )
    summary: BatchSummary = field(default_factory=BatchSummary)

    def record(self, outcome: RowOutcome, summary: BatchSummary | None = None) -> None:
        """Fold one row outcome into `summary` (the batch summary by default)."""
        summary = self.summary if summary is None else summary
        if outcome.kind is OutcomeKind.INSERTED:
            summary.inserted += 1
        elif outcome.kind is OutcomeKind.UPDATED:
            summary.updated += 1
        elif outcome.kind is OutcomeKind.DUPLICATE:
            summary.duplicates += 1
        elif outcome.kind is OutcomeKind.SKIPPED:
            summary.skipped += 1
            summary.skip_reasons[outcome.reason or "unknown"] += 1
        else:
            summary.errors += 1

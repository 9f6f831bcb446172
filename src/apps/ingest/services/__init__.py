"""
Voter roll ingestion services.

Reader -> Normalizer -> Zone Resolver -> Sink, plus the wipe and zone
audit operations that run around an ingest.
"""

from .audit import AuditReport, ZoneIssue, audit_zone_assignments
from .context import BatchContext, BatchSummary, OutcomeKind, RowOutcome
from .errors import IngestError, MissingColumnsError, SourceFileError, ZoneTableError
from .normalizer import (
    NormalizedVoter,
    calculate_age,
    derive_age,
    normalize_dob,
    normalize_phone,
    normalize_row,
    resolve_region_alias,
    safe_int,
    split_composite_region,
)
from .processor import VoterBatchProcessor
from .readers import RawRow, SourceTable, map_columns, open_source, split_csv_line
from .sink import PreparedVoter, VoterSink, placeholder_email, placeholder_phone, prepare_voter
from .validators import validate_columns
from .wipe import WipeResult, wipe_voter_data
from .zones import ResolverConfig, ZoneAssignment, ZoneLookup, ZoneRef, resolve_zones

__all__ = [
    # Audit
    "AuditReport",
    # Context
    "BatchContext",
    "BatchSummary",
    # Errors
    "IngestError",
    "MissingColumnsError",
    # Normalization
    "NormalizedVoter",
    "OutcomeKind",
    # Sink
    "PreparedVoter",
    # Reading
    "RawRow",
    # Zones
    "ResolverConfig",
    "RowOutcome",
    "SourceFileError",
    "SourceTable",
    # Processing
    "VoterBatchProcessor",
    "VoterSink",
    # Wipe
    "WipeResult",
    "ZoneAssignment",
    "ZoneIssue",
    "ZoneLookup",
    "ZoneRef",
    "ZoneTableError",
    "audit_zone_assignments",
    "calculate_age",
    "derive_age",
    "map_columns",
    "normalize_dob",
    "normalize_phone",
    "normalize_row",
    "open_source",
    "placeholder_email",
    "placeholder_phone",
    "prepare_voter",
    "resolve_region_alias",
    "resolve_zones",
    "safe_int",
    "split_composite_region",
    "split_csv_line",
    "validate_columns",
    "wipe_voter_data",
]

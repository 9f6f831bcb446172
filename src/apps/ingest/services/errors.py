"""
Setup-phase errors for voter roll ingestion.

Any of these aborts the whole batch. Row-level problems never raise; they
are reported as `RowOutcome` values instead.
"""


class IngestError(Exception):
    """Base exception for batch-level ingestion failures."""

    pass


class SourceFileError(IngestError):
    """Raised when the source file is missing, unreadable or of an unknown type."""

    pass


class MissingColumnsError(IngestError):
    """Raised when mandatory columns cannot be found in the header row."""

    def __init__(self, missing: list[str], headers: list[str] | None = None):
        self.missing = missing
        self.headers = headers or []
        super().__init__(
            f"Missing required column(s): {', '.join(missing)}. "
            f"Found headers: {', '.join(self.headers) or '(none)'}"
        )


class ZoneTableError(IngestError):
    """Raised when the zone table is empty or cannot be loaded."""

    pass

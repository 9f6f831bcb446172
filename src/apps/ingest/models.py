from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class IngestionBatch(models.Model):
    """
    Tracks a single voter roll ingestion run.

    One batch = one source file read top to bottom. Holds the structured
    end-of-run summary so runs can be compared and scripted against.
    """

    class Mode(models.TextChoices):
        INSERT = "INSERT", _("Insert (full reload)")
        UPSERT = "UPSERT", _("Upsert (mastersheet reconciliation)")

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending Processing")
        PROCESSING = "PROCESSING", _("Processing Rows")
        COMPLETED = "COMPLETED", _("Completed Successfully")
        FAILED = "FAILED", _("Failed with Errors")
        PARTIAL = "PARTIAL", _("Partially Completed")

    # Identity & Source
    source_file = models.CharField(
        max_length=1024, help_text="Path of the roll file that was read"
    )
    sheet_name = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Worksheet requested for spreadsheet sources",
    )
    mode = models.CharField(max_length=10, choices=Mode.choices, default=Mode.INSERT)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ingestion_batches",
        help_text="User who started this run, if any",
    )
    uploaded_at = models.DateTimeField(
        auto_now_add=True, help_text="When the batch was created"
    )

    # Processing State
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    started_at = models.DateTimeField(
        null=True, blank=True, help_text="When processing started"
    )
    completed_at = models.DateTimeField(
        null=True, blank=True, help_text="When processing finished"
    )

    # Statistics
    total_rows = models.IntegerField(
        default=0, help_text="Non-blank data rows in the source file"
    )
    items_created = models.IntegerField(default=0, help_text="Voters inserted")
    items_updated = models.IntegerField(default=0, help_text="Voters updated in place")
    items_skipped = models.IntegerField(
        default=0, help_text="Rows skipped by validation or zone resolution"
    )
    items_duplicate = models.IntegerField(
        default=0, help_text="Rows rejected as duplicate voter IDs"
    )
    items_failed = models.IntegerField(
        default=0, help_text="Rows that failed with an unexpected error"
    )
    skip_reasons = models.JSONField(
        default=dict, blank=True, help_text="Skipped row count per reason"
    )
    region_fallbacks = models.JSONField(
        default=dict,
        blank=True,
        help_text="Unmapped region labels that fell back to the default region",
    )
    missing_zone_codes = models.JSONField(
        default=dict,
        blank=True,
        help_text="'CODE:ELECTION_TYPE' keys absent from the zone table",
    )
    final_voter_count = models.IntegerField(
        null=True, blank=True, help_text="Voters stored after the run"
    )

    # Error Tracking
    error_message = models.TextField(
        null=True, blank=True, help_text="Top-level error if batch failed"
    )

    class Meta:
        db_table = "ingest_batches"
        verbose_name = "Ingestion Batch"
        verbose_name_plural = "Ingestion Batches"
        ordering = ["-uploaded_at"]
        indexes = [
            models.Index(fields=["status", "mode"], name="ingest_batc_status_3f1c2a_idx"),
        ]

    def __str__(self):
        return f"{self.source_file} - {self.get_mode_display()} ({self.status})"

    @property
    def duration(self):
        """Calculate processing duration if completed."""
        if self.started_at and self.completed_at:
            return self.completed_at - self.started_at
        return None


class ProcessingFailure(models.Model):
    """
    Records individual row failures for inspection.

    Duplicates and unexpected errors are recorded here together with the
    raw row so the source file can be corrected and re-ingested.
    """

    batch = models.ForeignKey(
        IngestionBatch,
        on_delete=models.CASCADE,
        related_name="failures",
        help_text="Which batch this failure occurred in",
    )

    voter_id = models.CharField(
        max_length=50, null=True, blank=True, help_text="Voter ID if known"
    )

    row_number = models.IntegerField(help_text="Row number in source file")

    error_type = models.CharField(
        max_length=100,
        help_text="Type of error (e.g., 'DUPLICATE', 'IntegrityError')",
    )

    error_message = models.TextField(help_text="Detailed error message")

    row_data = models.JSONField(help_text="Raw row data that caused the failure")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "ingest_failures"
        verbose_name = "Processing Failure"
        verbose_name_plural = "Processing Failures"
        ordering = ["batch", "row_number"]
        indexes = [
            models.Index(fields=["batch", "created_at"], name="ingest_fail_batch_i_7d2e90_idx"),
            models.Index(fields=["error_type"], name="ingest_fail_error_t_41b8c6_idx"),
        ]

    def __str__(self):
        return f"{self.error_type} - Row {self.row_number} (import from file {self.batch.source_file})"

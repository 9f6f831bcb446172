import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="IngestionBatch",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "source_file",
                    models.CharField(
                        help_text="Path of the roll file that was read",
                        max_length=1024,
                    ),
                ),
                (
                    "sheet_name",
                    models.CharField(
                        blank=True,
                        help_text="Worksheet requested for spreadsheet sources",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "mode",
                    models.CharField(
                        choices=[
                            ("INSERT", "Insert (full reload)"),
                            ("UPSERT", "Upsert (mastersheet reconciliation)"),
                        ],
                        default="INSERT",
                        max_length=10,
                    ),
                ),
                (
                    "uploaded_at",
                    models.DateTimeField(
                        auto_now_add=True, help_text="When the batch was created"
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending Processing"),
                            ("PROCESSING", "Processing Rows"),
                            ("COMPLETED", "Completed Successfully"),
                            ("FAILED", "Failed with Errors"),
                            ("PARTIAL", "Partially Completed"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "started_at",
                    models.DateTimeField(
                        blank=True, help_text="When processing started", null=True
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(
                        blank=True, help_text="When processing finished", null=True
                    ),
                ),
                (
                    "total_rows",
                    models.IntegerField(
                        default=0, help_text="Non-blank data rows in the source file"
                    ),
                ),
                (
                    "items_created",
                    models.IntegerField(default=0, help_text="Voters inserted"),
                ),
                (
                    "items_updated",
                    models.IntegerField(default=0, help_text="Voters updated in place"),
                ),
                (
                    "items_skipped",
                    models.IntegerField(
                        default=0,
                        help_text="Rows skipped by validation or zone resolution",
                    ),
                ),
                (
                    "items_duplicate",
                    models.IntegerField(
                        default=0, help_text="Rows rejected as duplicate voter IDs"
                    ),
                ),
                (
                    "items_failed",
                    models.IntegerField(
                        default=0,
                        help_text="Rows that failed with an unexpected error",
                    ),
                ),
                (
                    "skip_reasons",
                    models.JSONField(
                        blank=True, default=dict, help_text="Skipped row count per reason"
                    ),
                ),
                (
                    "region_fallbacks",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Unmapped region labels that fell back to the default region",
                    ),
                ),
                (
                    "missing_zone_codes",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="'CODE:ELECTION_TYPE' keys absent from the zone table",
                    ),
                ),
                (
                    "final_voter_count",
                    models.IntegerField(
                        blank=True, help_text="Voters stored after the run", null=True
                    ),
                ),
                (
                    "error_message",
                    models.TextField(
                        blank=True, help_text="Top-level error if batch failed", null=True
                    ),
                ),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who started this run, if any",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ingestion_batches",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Ingestion Batch",
                "verbose_name_plural": "Ingestion Batches",
                "db_table": "ingest_batches",
                "ordering": ["-uploaded_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "mode"], name="ingest_batc_status_3f1c2a_idx"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="ProcessingFailure",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "voter_id",
                    models.CharField(
                        blank=True, help_text="Voter ID if known", max_length=50, null=True
                    ),
                ),
                ("row_number", models.IntegerField(help_text="Row number in source file")),
                (
                    "error_type",
                    models.CharField(
                        help_text="Type of error (e.g., 'DUPLICATE', 'IntegrityError')",
                        max_length=100,
                    ),
                ),
                ("error_message", models.TextField(help_text="Detailed error message")),
                (
                    "row_data",
                    models.JSONField(help_text="Raw row data that caused the failure"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "batch",
                    models.ForeignKey(
                        help_text="Which batch this failure occurred in",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="failures",
                        to="ingest.ingestionbatch",
                    ),
                ),
            ],
            options={
                "verbose_name": "Processing Failure",
                "verbose_name_plural": "Processing Failures",
                "db_table": "ingest_failures",
                "ordering": ["batch", "row_number"],
                "indexes": [
                    models.Index(
                        fields=["batch", "created_at"],
                        name="ingest_fail_batch_i_7d2e90_idx",
                    ),
                    models.Index(
                        fields=["error_type"], name="ingest_fail_error_t_41b8c6_idx"
                    ),
                ],
            },
        ),
    ]

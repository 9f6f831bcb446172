"""
Management command to ingest a voter roll.

Usage:
    python manage.py ingest_voters
    python manage.py ingest_voters "Final Date for Input 2.0.csv"
    python manage.py ingest_voters roll.xlsx --sheet "MASTER DATA to Import"
    python manage.py ingest_voters mastersheet.xlsx --mode upsert
    python manage.py ingest_voters roll.csv --wipe --json
"""

import json
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.ingest.models import IngestionBatch
from apps.ingest.services import wipe_voter_data
from apps.ingest.tasks import ingest_batch


class Command(BaseCommand):
    help = "Ingest a voter roll (.xlsx or .csv) into voters and voter accounts"

    def add_arguments(self, parser):
        parser.add_argument(
            "file_path",
            nargs="?",
            default=None,
            help=f"Roll to ingest (default: {settings.VOTER_DEFAULT_FILE})",
        )
        parser.add_argument(
            "--mode",
            choices=["insert", "upsert"],
            default="insert",
            help="insert: new voters only, existing IDs count as duplicates; "
            "upsert: update existing voters in place",
        )
        parser.add_argument(
            "--sheet", default=None, help="Worksheet to read from a spreadsheet"
        )
        parser.add_argument(
            "--wipe",
            action="store_true",
            help="Delete all votes, voters and voter accounts before ingesting",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the batch summary as JSON",
        )

    def handle(self, *args, **options):
        file_path = Path(options["file_path"] or settings.VOTER_DEFAULT_FILE)
        file_path = file_path.expanduser().resolve()

        # Never wipe when there is nothing to load afterwards
        if not file_path.is_file():
            raise CommandError(f"File not found: {file_path}")

        if options["wipe"]:
            self.stdout.write("Wiping existing voter data...")
            wiped = wipe_voter_data()
            self.stdout.write(
                self.style.SUCCESS(
                    f"✓ Deleted {wiped.votes_deleted} votes, "
                    f"{wiped.voters_deleted} voters, "
                    f"{wiped.users_deleted} voter accounts"
                )
            )
            if not wiped.is_clean:
                raise CommandError(
                    f"Wipe incomplete: {wiped.remaining_voters} voters remain"
                )

        batch = IngestionBatch.objects.create(
            source_file=str(file_path),
            sheet_name=options["sheet"],
            mode=options["mode"].upper(),
        )
        self.stdout.write(
            self.style.SUCCESS(
                f"Ingesting {file_path.name} as batch {batch.id} "
                f"({batch.get_mode_display()})"
            )
        )

        result = ingest_batch.call(batch.id)

        if options["json"]:
            self.stdout.write(json.dumps(result, indent=2, default=str))

        if not result["success"]:
            self.stdout.write(self.style.ERROR(f"✗ Ingestion failed: {result['error']}"))
            raise CommandError(result["error"])

        if not options["json"]:
            self._write_summary(result)

    def _write_summary(self, result):
        self.stdout.write(
            self.style.SUCCESS(
                f"✓ Upload summary (batch {result['batch_id']}, {result['status']}):\n"
                f"  - Inserted: {result['inserted']}\n"
                f"  - Updated: {result['updated']}\n"
                f"  - Skipped: {result['skipped']}\n"
                f"  - Duplicates: {result['duplicates']}\n"
                f"  - Errors: {result['errors']}\n"
                f"  - Expected rows: {result['expected_rows']}\n"
                f"  - Success rate: {result['success_rate']}%\n"
                f"  - Final voter count: {result['final_voter_count']}"
            )
        )
        for reason, count in sorted(result["skip_reasons"].items()):
            self.stdout.write(f"    skipped {reason}: {count}")
        if result["region_fallbacks"]:
            self.stdout.write(
                self.style.WARNING(
                    "  Regions not in the region table (default region used): "
                    + ", ".join(
                        f"{label} ({count})"
                        for label, count in sorted(result["region_fallbacks"].items())
                    )
                )
            )
        if result["missing_zone_codes"]:
            self.stdout.write(
                self.style.WARNING(
                    "  Zone codes missing from the zone table: "
                    + ", ".join(sorted(result["missing_zone_codes"]))
                )
            )

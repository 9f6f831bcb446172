"""
Management command to delete all voter data before a full reload.

Usage:
    python manage.py wipe_voters --yes
"""

from django.core.management.base import BaseCommand, CommandError

from apps.ingest.services import wipe_voter_data


class Command(BaseCommand):
    help = "Delete all votes, voter profiles and voter accounts"

    def add_arguments(self, parser):
        parser.add_argument(
            "--yes",
            action="store_true",
            help="Confirm the wipe (required)",
        )

    def handle(self, *args, **options):
        if not options["yes"]:
            raise CommandError("Refusing to wipe voter data without --yes")

        result = wipe_voter_data()

        self.stdout.write(
            self.style.SUCCESS(
                f"✓ Wipe complete:\n"
                f"  - Votes deleted: {result.votes_deleted}\n"
                f"  - Voters deleted: {result.voters_deleted}\n"
                f"  - Voter accounts deleted: {result.users_deleted}"
            )
        )
        if result.is_clean:
            self.stdout.write(self.style.SUCCESS("✓ Database is ready for a new upload"))
        else:
            raise CommandError(
                f"Some data remains: {result.remaining_voters} voters, "
                f"{result.remaining_voter_users} voter accounts"
            )

"""
Management command to check stored voter zone assignments.

Usage:
    python manage.py audit_zones
    python manage.py audit_zones --fix
    python manage.py audit_zones --limit 50
"""

from django.core.management.base import BaseCommand, CommandError

from apps.ingest.services import ZoneLookup, audit_zone_assignments


class Command(BaseCommand):
    help = "Recompute voter zones from region, city and age and report mismatches"

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Rewrite mismatched zone assignments in place",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=20,
            help="Number of individual mismatches to list (default: 20)",
        )

    def handle(self, *args, **options):
        lookup = ZoneLookup.load()
        if not len(lookup):
            raise CommandError("Zone table is empty; run `manage.py seed_zones` first")

        report = audit_zone_assignments(lookup=lookup, fix=options["fix"])

        self.stdout.write(f"Checked {report.checked} voters")
        for issue in report.issues[: options["limit"]]:
            self.stdout.write(
                f"  {issue.voter_id} ({issue.region}, age {issue.age}): "
                f"{issue.field} is {issue.stored}, expected {issue.expected}"
            )
        for field_name, count in sorted(report.issues_by_field().items()):
            self.stdout.write(f"  - {field_name}: {count} mismatches")

        if report.unmapped:
            self.stdout.write(
                self.style.WARNING(
                    f"{len(report.unmapped)} voters have a region outside the region table"
                )
            )

        if not report.issues:
            self.stdout.write(self.style.SUCCESS("✓ All zone assignments are correct"))
        elif options["fix"]:
            self.stdout.write(self.style.SUCCESS(f"✓ Fixed {report.fixed} voters"))
        else:
            self.stdout.write(
                self.style.WARNING(
                    f"{report.voters_with_issues} voters need fixing; rerun with --fix"
                )
            )

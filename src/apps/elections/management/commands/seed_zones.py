"""
Management command to seed the reference zone table.

Usage:
    python manage.py seed_zones
"""

from django.core.management.base import BaseCommand

from apps.elections.models import ElectionType, Zone
from apps.elections.services import seed_zones


class Command(BaseCommand):
    help = "Create or refresh the Yuva Pankh, Karobari and Trustee zones"

    def handle(self, *args, **options):
        stats = seed_zones()

        self.stdout.write(
            self.style.SUCCESS(
                f"✓ Zones seeded: {stats['created']} created, {stats['updated']} updated"
            )
        )
        for election_type in ElectionType:
            zones = Zone.objects.filter(election_type=election_type)
            seats = sum(zone.seats for zone in zones)
            self.stdout.write(
                f"  - {election_type.label}: {zones.count()} zones, {seats} seats"
            )

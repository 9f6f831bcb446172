"""
Reference zone table seeding.

Creates or refreshes the zones every election type is contested in, from
`config.regions.ZONE_DEFINITIONS`. Safe to run repeatedly.
"""

from django.db import transaction
from loguru import logger

from apps.elections.models import Zone
from config.regions import ZONE_DEFINITIONS


def seed_zones(definitions=None) -> dict[str, int]:
    """
    Upsert the reference zones.

    Zones are matched on (code, election_type); name, seats and description
    are refreshed on every run.

    Returns:
        Dictionary with created/updated counts
    """
    definitions = ZONE_DEFINITIONS if definitions is None else definitions
    stats = {"created": 0, "updated": 0}

    with transaction.atomic():
        for code, name, seats, election_type, description in definitions:
            _, created = Zone.objects.update_or_create(
                code=code,
                election_type=election_type,
                defaults={
                    "name": name,
                    "seats": seats,
                    "description": description,
                    "is_active": True,
                },
            )
            stats["created" if created else "updated"] += 1

    logger.info(
        f"Zone table seeded: {stats['created']} created, {stats['updated']} updated"
    )
    return stats

"""
Tests for reference zone seeding.
"""

from io import StringIO

import pytest
from django.core.management import call_command
from django.db.models import Sum

from apps.elections.models import ElectionType, Zone
from apps.elections.services import seed_zones
from config.regions import ZONE_DEFINITIONS

pytestmark = pytest.mark.django_db


class TestSeedZones:
    def test_first_run_creates_all(self):
        stats = seed_zones()

        assert stats == {"created": len(ZONE_DEFINITIONS), "updated": 0}
        assert Zone.objects.count() == 16

    def test_seat_totals(self):
        seed_zones()

        def seats(election_type):
            return Zone.objects.filter(election_type=election_type).aggregate(
                total=Sum("seats")
            )["total"]

        assert seats(ElectionType.KAROBARI_MEMBERS) == 21
        assert seats(ElectionType.TRUSTEES) == 7
        assert seats(ElectionType.YUVA_PANK) == 4

    def test_rerun_updates_in_place(self):
        seed_zones()
        Zone.objects.filter(code="MUMBAI").update(name="Old Name", is_active=False)

        stats = seed_zones()

        assert stats == {"created": 0, "updated": len(ZONE_DEFINITIONS)}
        assert Zone.objects.count() == 16
        assert set(Zone.objects.filter(code="MUMBAI").values_list("name", flat=True)) == {
            "Mumbai"
        }
        assert Zone.objects.filter(is_active=False).count() == 0

    def test_custom_definitions(self):
        stats = seed_zones([("BHUJ", "Bhuj", 2, "YUVA_PANK", "")])

        assert stats["created"] == 1
        assert Zone.objects.get().election_type == ElectionType.YUVA_PANK

    def test_command_output(self):
        out = StringIO()
        call_command("seed_zones", stdout=out)

        out = out.getvalue()
        assert "16 created" in out
        assert "Karobari Samiti: 8 zones, 21 seats" in out
        assert "Trustee Mandal: 6 zones, 7 seats" in out
        assert "Yuva Pankh: 2 zones, 4 seats" in out

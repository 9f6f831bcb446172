"""
Tests for the voter upsert sink and placeholder contact details.
"""

import pytest
from django.contrib.auth import get_user_model

from apps.elections.models import Voter
from apps.ingest.services.context import OutcomeKind
from apps.ingest.services.normalizer import NormalizedVoter
from apps.ingest.services.sink import (
    VoterSink,
    placeholder_email,
    placeholder_phone,
    prepare_voter,
)
from apps.ingest.services.zones import ResolverConfig, resolve_zones

User = get_user_model()


def make_voter(**overrides) -> NormalizedVoter:
    values = {
        "row_number": 2,
        "voter_id": "V1",
        "name": "Asha Shah",
        "dob": "15/06/1980",
        "age": 45,
        "phone": "9876543210",
        "email": None,
        "address": "12 Station Road",
        "city": "Mumbai",
        "state": "Maharashtra",
        "region_label": "Mumbai",
    }
    values.update(overrides)
    return NormalizedVoter(**values)


class TestPlaceholders:
    def test_format(self):
        phone = placeholder_phone("KMS-123456", 7)

        assert phone == "9999123407"
        assert len(phone) == 10
        assert phone.startswith("9999")

    def test_deterministic(self):
        assert placeholder_phone("V00042", 15) == placeholder_phone("V00042", 15)

    def test_short_voter_id_padded(self):
        # "V1" -> "000001" -> first four "0000"
        assert placeholder_phone("V1", 3) == "9999000003"

    def test_long_voter_id_uses_trailing_digits(self):
        # trailing six "345678" -> "3456"
        assert placeholder_phone("12345678", 123) == "9999345623"

    def test_voter_id_without_digits(self):
        assert placeholder_phone("ABC", 5) == "9999000005"

    def test_email(self):
        assert placeholder_email("9999000003", "kms-election.com") == (
            "9999000003@voter.kms-election.com"
        )


class TestPrepareVoter:
    def test_real_phone_kept(self, zone_lookup):
        voter = make_voter()
        zones = resolve_zones("Mumbai", 45, "Mumbai", zone_lookup, ResolverConfig())

        prepared = prepare_voter(voter, zones, "kms-election.com")

        assert prepared.phone == "9876543210"
        assert not prepared.phone_is_placeholder
        assert prepared.account_email == "9876543210@voter.kms-election.com"

    def test_missing_phone(self, zone_lookup):
        voter = make_voter(phone=None, voter_id="V123456", row_number=14)
        zones = resolve_zones("Mumbai", 45, "Mumbai", zone_lookup, ResolverConfig())

        prepared = prepare_voter(voter, zones, "kms-election.com")

        assert prepared.phone == "9999123414"
        assert prepared.phone_is_placeholder
        assert prepared.account_email == "9999123414@voter.kms-election.com"

    def test_supplied_email_kept(self, zone_lookup):
        voter = make_voter(phone=None, email="asha@example.com")
        zones = resolve_zones("Mumbai", 45, "Mumbai", zone_lookup, ResolverConfig())

        prepared = prepare_voter(voter, zones, "kms-election.com")

        assert prepared.account_email == "asha@example.com"


@pytest.mark.django_db
class TestVoterSink:
    """Test insert and upsert writes."""

    def _prepare(self, zone_lookup, **overrides):
        voter = make_voter(**overrides)
        zones = resolve_zones(
            voter.region_label, voter.age, voter.city, zone_lookup, ResolverConfig()
        )
        return prepare_voter(voter, zones, "kms-election.com")

    def test_insert_creates_user_and_voter(self, zone_lookup):
        outcome = VoterSink("INSERT").write(self._prepare(zone_lookup))

        assert outcome.kind is OutcomeKind.INSERTED
        voter = Voter.objects.select_related("user", "zone", "karobari_zone").get(
            voter_id="V1"
        )
        assert voter.user.username == "V1"
        assert voter.user.role == User.Role.VOTER
        assert not voter.user.has_usable_password()
        assert voter.user.age == 45
        assert voter.user.date_of_birth.isoformat() == "1980-06-15"
        assert voter.zone.code == "MUMBAI"
        assert voter.zone == voter.karobari_zone
        assert voter.trustee_zone.code == "MUMBAI"
        assert voter.yuva_pank_zone is None
        assert voter.region == "Mumbai"
        assert voter.region_label == "Mumbai"
        assert voter.mulgam == "Mumbai"
        assert voter.dob == "15/06/1980"

    def test_duplicate_in_insert_mode(self, zone_lookup):
        sink = VoterSink("INSERT")
        sink.write(self._prepare(zone_lookup))

        outcome = sink.write(self._prepare(zone_lookup, name="Someone Else", row_number=3))

        assert outcome.kind is OutcomeKind.DUPLICATE
        assert outcome.voter_id == "V1"
        assert Voter.objects.count() == 1
        assert User.objects.filter(username="V1").count() == 1
        assert Voter.objects.get().name == "Asha Shah"

    def test_orphan_account_counts_as_duplicate(self, zone_lookup):
        User.objects.create_user(username="V1", role=User.Role.VOTER)

        outcome = VoterSink("INSERT").write(self._prepare(zone_lookup))

        assert outcome.kind is OutcomeKind.DUPLICATE
        assert Voter.objects.count() == 0

    def test_upsert_updates_in_place(self, zone_lookup):
        VoterSink("INSERT").write(self._prepare(zone_lookup))
        original = Voter.objects.get(voter_id="V1")

        outcome = VoterSink("UPSERT").write(
            self._prepare(
                zone_lookup,
                name="Asha R. Shah",
                phone="9123456780",
                region_label="Raigad",
                city="Pune",
            )
        )

        assert outcome.kind is OutcomeKind.UPDATED
        voter = Voter.objects.select_related("user", "zone").get(voter_id="V1")
        assert voter.pk == original.pk
        assert voter.user_id == original.user_id
        assert voter.name == "Asha R. Shah"
        assert voter.user.name == "Asha R. Shah"
        assert voter.user.phone == "9123456780"
        assert voter.zone.code == "RAIGAD"
        assert voter.region == "Raigad"
        assert Voter.objects.count() == 1

    def test_upsert_inserts_new(self, zone_lookup):
        outcome = VoterSink("UPSERT").write(self._prepare(zone_lookup, voter_id="V2"))

        assert outcome.kind is OutcomeKind.INSERTED
        assert Voter.objects.filter(voter_id="V2").exists()

    def test_unexpected_error_reported(self, zone_lookup):
        # A value the age column cannot store
        prepared = self._prepare(zone_lookup)
        prepared.voter.age = "not-a-number"

        outcome = VoterSink("INSERT").write(prepared)

        assert outcome.kind is OutcomeKind.ERROR
        assert outcome.exception is not None
        assert outcome.detail
        assert Voter.objects.count() == 0
        assert User.objects.count() == 0

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            VoterSink("MERGE")

"""
Voter upsert sink.

Writes one resolved voter (a `users.User` account plus its
`elections.Voter` profile) per call and reports the result as a
`RowOutcome`. Each write runs in its own savepoint, so a failing row never
affects rows written before or after it.
"""

import re
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from apps.elections.models import Voter

from .context import RowOutcome
from .normalizer import NormalizedVoter, parse_dob
from .zones import ZoneAssignment

User = get_user_model()


def placeholder_phone(voter_id: str, row_number: int) -> str:
    """
    Deterministic stand-in for a missing mobile number.

    "9999" + 4 digits from the voter ID's trailing digits + the last two
    digits of the row number. The same (voter_id, row_number) always gives
    the same number.

    Example:
        >>> placeholder_phone("KMS-123456", 7)
        '9999123407'
    """
    voter_digits = re.sub(r"\D", "", voter_id or "")[-6:].rjust(6, "0")
    row_digits = str(row_number)[-2:].rjust(2, "0")
    return f"9999{voter_digits[:4]}{row_digits}"


def placeholder_email(phone: str, domain: str) -> str:
    return f"{phone}@voter.{domain}"


@dataclass
class PreparedVoter:
    """A voter ready to be written: normalized fields plus zone assignment."""

    voter: NormalizedVoter
    zones: ZoneAssignment
    phone: str
    account_email: str
    phone_is_placeholder: bool = False

    @property
    def voter_id(self) -> str:
        return self.voter.voter_id

    @property
    def row_number(self) -> int:
        return self.voter.row_number

    def user_fields(self) -> dict:
        return {
            "name": self.voter.name,
            "phone": self.phone,
            "email": self.account_email,
            "date_of_birth": parse_dob(self.voter.dob),
            "age": self.voter.age,
            "role": User.Role.VOTER,
        }

    def voter_fields(self) -> dict:
        primary = self.zones.primary
        return {
            "name": self.voter.name,
            "email": self.voter.email,
            "phone": self.phone,
            "age": self.voter.age,
            "dob": self.voter.dob,
            "family_number": self.voter.family_number,
            "address": self.voter.address,
            "city": self.voter.city,
            "state": self.voter.state,
            "mulgam": self.voter.mulgam,
            "region": primary.name if primary else (self.zones.region_key or ""),
            "region_label": self.voter.region_label,
            "zone_id": self.zones.primary_id,
            "yuva_pank_zone_id": self.zones.yuva_pank_id,
            "karobari_zone_id": self.zones.karobari_id,
            "trustee_zone_id": self.zones.trustee_id,
        }


def prepare_voter(voter: NormalizedVoter, zones: ZoneAssignment, email_domain: str) -> PreparedVoter:
    """Fill in placeholder contact details where the roll has none."""
    phone = voter.phone
    is_placeholder = phone is None
    if is_placeholder:
        phone = placeholder_phone(voter.voter_id, voter.row_number)

    return PreparedVoter(
        voter=voter,
        zones=zones,
        phone=phone,
        account_email=voter.email or placeholder_email(phone, email_domain),
        phone_is_placeholder=is_placeholder,
    )


class VoterSink:
    """
    Persists prepared voters.

    In INSERT mode every row creates a new account and profile; a voter ID
    that already exists is reported as a duplicate. In UPSERT mode an
    existing voter is updated in place and only unknown IDs are inserted.
    """

    INSERT = "INSERT"
    UPSERT = "UPSERT"

    def __init__(self, mode: str = INSERT):
        mode = str(mode).upper()
        if mode not in (self.INSERT, self.UPSERT):
            raise ValueError(f"Unknown sink mode: {mode}")
        self.mode = mode

    def write(self, prepared: PreparedVoter) -> RowOutcome:
        try:
            with transaction.atomic():
                if self.mode == self.UPSERT:
                    existing = (
                        Voter.objects.select_related("user")
                        .filter(voter_id=prepared.voter_id)
                        .first()
                    )
                    if existing is not None:
                        self._update(existing, prepared)
                        return RowOutcome.updated(prepared.row_number, prepared.voter_id)

                self._insert(prepared)
                return RowOutcome.inserted(prepared.row_number, prepared.voter_id)

        except IntegrityError as e:
            if self._voter_exists(prepared.voter_id):
                return RowOutcome.duplicate(
                    prepared.row_number,
                    prepared.voter_id,
                    detail=f"Voter ID {prepared.voter_id} already exists",
                )
            return RowOutcome.error(
                prepared.row_number, prepared.voter_id, f"IntegrityError: {e}", e
            )
        except Exception as e:
            return RowOutcome.error(
                prepared.row_number, prepared.voter_id, f"{type(e).__name__}: {e}", e
            )

    def _insert(self, prepared: PreparedVoter) -> Voter:
        user = User(username=prepared.voter_id, **prepared.user_fields())
        user.set_unusable_password()
        user.save()
        return Voter.objects.create(
            user=user, voter_id=prepared.voter_id, **prepared.voter_fields()
        )

    def _update(self, voter: Voter, prepared: PreparedVoter) -> Voter:
        user = voter.user
        for name, value in prepared.user_fields().items():
            setattr(user, name, value)
        user.save()

        for name, value in prepared.voter_fields().items():
            setattr(voter, name, value)
        voter.save()
        return voter

    @staticmethod
    def _voter_exists(voter_id: str) -> bool:
        return (
            Voter.objects.filter(voter_id=voter_id).exists()
            or User.objects.filter(username=voter_id).exists()
        )

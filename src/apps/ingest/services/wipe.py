"""
Voter data wipe.

Deletes every vote, voter profile and voter-role account, in that order so
foreign keys are never violated. Run it before a full reload, never while
an ingest is running.
"""

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.db import transaction
from loguru import logger

from apps.elections.models import Vote, Voter


@dataclass
class WipeResult:
    votes_deleted: int
    voters_deleted: int
    users_deleted: int
    remaining_voters: int
    remaining_voter_users: int

    @property
    def is_clean(self) -> bool:
        return self.remaining_voters == 0 and self.remaining_voter_users == 0

    def as_dict(self) -> dict:
        return {
            "votes_deleted": self.votes_deleted,
            "voters_deleted": self.voters_deleted,
            "users_deleted": self.users_deleted,
            "remaining_voters": self.remaining_voters,
            "remaining_voter_users": self.remaining_voter_users,
        }


def wipe_voter_data() -> WipeResult:
    """Delete all votes, voters and voter accounts in one transaction."""
    User = get_user_model()
    logger.warning("Wiping all voter data")

    with transaction.atomic():
        _, per_model = Vote.objects.all().delete()
        votes_deleted = per_model.get(Vote._meta.label, 0)
        logger.info(f"Deleted {votes_deleted} votes")

        _, per_model = Voter.objects.all().delete()
        voters_deleted = per_model.get(Voter._meta.label, 0)
        logger.info(f"Deleted {voters_deleted} voters")

        # Accounts without a profile (e.g. from an interrupted run) go too
        _, per_model = User.objects.filter(role=User.Role.VOTER).delete()
        users_deleted = per_model.get(User._meta.label, 0)
        logger.info(f"Deleted {users_deleted} voter accounts")

    result = WipeResult(
        votes_deleted=votes_deleted,
        voters_deleted=voters_deleted,
        users_deleted=users_deleted,
        remaining_voters=Voter.objects.count(),
        remaining_voter_users=User.objects.filter(role=User.Role.VOTER).count(),
    )
    if result.is_clean:
        logger.info("Voter data wiped, database ready for a new upload")
    else:
        logger.warning(
            f"Wipe left {result.remaining_voters} voters and "
            f"{result.remaining_voter_users} voter accounts behind"
        )
    return result

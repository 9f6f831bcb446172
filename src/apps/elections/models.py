from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class ElectionType(models.TextChoices):
    YUVA_PANK = "YUVA_PANK", _("Yuva Pankh")
    KAROBARI_MEMBERS = "KAROBARI_MEMBERS", _("Karobari Samiti")
    TRUSTEES = "TRUSTEES", _("Trustee Mandal")


class Zone(models.Model):
    """
    Voting district scoped to one election type.

    The same code (e.g. RAIGAD) exists once per election type; `seats` is
    the number of seats contested in the zone.
    """

    code = models.CharField(max_length=50, db_index=True)
    name = models.CharField(max_length=255)
    election_type = models.CharField(
        max_length=20, choices=ElectionType.choices, db_index=True
    )
    seats = models.PositiveSmallIntegerField(default=1)
    description = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "zones"
        verbose_name = "Zone"
        verbose_name_plural = "Zones"
        ordering = ["election_type", "code"]
        constraints = [
            models.UniqueConstraint(
                fields=["code", "election_type"], name="unique_zone_code_per_election"
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.get_election_type_display()})"


class Voter(models.Model):
    """
    Voter profile, one per roll entry, linked 1:1 to a `users.User` account.

    `voter_id` is the natural key used to match rows on re-ingestion.
    `region` keeps the primary zone name for older screens; the per-election
    assignments live in the three zone foreign keys.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="voter_profile",
    )
    voter_id = models.CharField(max_length=50, unique=True)

    # Personal details
    name = models.CharField(max_length=255)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=20)
    age = models.PositiveSmallIntegerField()
    dob = models.CharField(max_length=10, null=True, blank=True, help_text="DD/MM/YYYY")
    family_number = models.CharField(max_length=50, null=True, blank=True)

    # Location
    address = models.TextField(null=True, blank=True)
    city = models.CharField(max_length=255, null=True, blank=True)
    state = models.CharField(max_length=255, null=True, blank=True)
    mulgam = models.CharField(max_length=255, null=True, blank=True)
    region = models.CharField(max_length=255, help_text="Name of the primary zone")
    region_label = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Voting region as written in the source roll",
    )

    # Zone assignments
    zone = models.ForeignKey(
        Zone,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="primary_voters",
    )
    yuva_pank_zone = models.ForeignKey(
        Zone,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="yuva_pank_voters",
    )
    karobari_zone = models.ForeignKey(
        Zone,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="karobari_voters",
    )
    trustee_zone = models.ForeignKey(
        Zone,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="trustee_voters",
    )

    has_voted = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "voters"
        verbose_name = "Voter"
        verbose_name_plural = "Voters"
        ordering = ["voter_id"]
        indexes = [
            models.Index(fields=["region"], name="voters_region_5c1a2e_idx"),
            models.Index(fields=["phone"], name="voters_phone_8b3d41_idx"),
        ]

    def __str__(self):
        return f"{self.voter_id} - {self.name}"


class Vote(models.Model):
    """A single ballot entry cast by a voter in one election."""

    voter = models.ForeignKey(Voter, on_delete=models.PROTECT, related_name="votes")
    zone = models.ForeignKey(
        Zone, on_delete=models.PROTECT, null=True, blank=True, related_name="votes"
    )
    election_type = models.CharField(max_length=20, choices=ElectionType.choices)
    is_nota = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "votes"
        verbose_name = "Vote"
        verbose_name_plural = "Votes"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Vote by {self.voter.voter_id} ({self.election_type})"

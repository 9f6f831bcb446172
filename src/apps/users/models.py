from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    """
    Account record for everyone who signs in to the election platform.

    Voter accounts are created by the roll ingestion pipeline together with
    their `elections.Voter` profile; `username` holds the voter ID so the
    account is unique per voter. Voter accounts have no usable password
    (sign-in happens through OTP in the web app).
    """

    class Role(models.TextChoices):
        ADMIN = "ADMIN", _("Election Administrator")
        KAROBARI_ADMIN = "KAROBARI_ADMIN", _("Karobari Admin")
        CANDIDATE = "CANDIDATE", _("Candidate")
        VOTER = "VOTER", _("Voter")

    role = models.CharField(
        max_length=20, choices=Role.choices, default=Role.VOTER, db_index=True
    )
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, null=True, blank=True, db_index=True)
    date_of_birth = models.DateField(null=True, blank=True)
    age = models.PositiveSmallIntegerField(null=True, blank=True)

    class Meta:
        db_table = "users"
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return self.name or self.username

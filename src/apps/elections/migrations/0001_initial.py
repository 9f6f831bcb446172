import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

ELECTION_TYPE_CHOICES = [
    ("YUVA_PANK", "Yuva Pankh"),
    ("KAROBARI_MEMBERS", "Karobari Samiti"),
    ("TRUSTEES", "Trustee Mandal"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Zone",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.CharField(db_index=True, max_length=50)),
                ("name", models.CharField(max_length=255)),
                (
                    "election_type",
                    models.CharField(
                        choices=ELECTION_TYPE_CHOICES, db_index=True, max_length=20
                    ),
                ),
                ("seats", models.PositiveSmallIntegerField(default=1)),
                ("description", models.TextField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Zone",
                "verbose_name_plural": "Zones",
                "db_table": "zones",
                "ordering": ["election_type", "code"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("code", "election_type"),
                        name="unique_zone_code_per_election",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Voter",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("voter_id", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(max_length=20)),
                ("age", models.PositiveSmallIntegerField()),
                (
                    "dob",
                    models.CharField(
                        blank=True, help_text="DD/MM/YYYY", max_length=10, null=True
                    ),
                ),
                (
                    "family_number",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                ("address", models.TextField(blank=True, null=True)),
                ("city", models.CharField(blank=True, max_length=255, null=True)),
                ("state", models.CharField(blank=True, max_length=255, null=True)),
                ("mulgam", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "region",
                    models.CharField(
                        help_text="Name of the primary zone", max_length=255
                    ),
                ),
                (
                    "region_label",
                    models.CharField(
                        blank=True,
                        help_text="Voting region as written in the source roll",
                        max_length=255,
                        null=True,
                    ),
                ),
                ("has_voted", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="voter_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "zone",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="primary_voters",
                        to="elections.zone",
                    ),
                ),
                (
                    "yuva_pank_zone",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="yuva_pank_voters",
                        to="elections.zone",
                    ),
                ),
                (
                    "karobari_zone",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="karobari_voters",
                        to="elections.zone",
                    ),
                ),
                (
                    "trustee_zone",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="trustee_voters",
                        to="elections.zone",
                    ),
                ),
            ],
            options={
                "verbose_name": "Voter",
                "verbose_name_plural": "Voters",
                "db_table": "voters",
                "ordering": ["voter_id"],
                "indexes": [
                    models.Index(fields=["region"], name="voters_region_5c1a2e_idx"),
                    models.Index(fields=["phone"], name="voters_phone_8b3d41_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Vote",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "election_type",
                    models.CharField(choices=ELECTION_TYPE_CHOICES, max_length=20),
                ),
                ("is_nota", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "voter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="votes",
                        to="elections.voter",
                    ),
                ),
                (
                    "zone",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="votes",
                        to="elections.zone",
                    ),
                ),
            ],
            options={
                "verbose_name": "Vote",
                "verbose_name_plural": "Votes",
                "db_table": "votes",
                "ordering": ["-created_at"],
            },
        ),
    ]

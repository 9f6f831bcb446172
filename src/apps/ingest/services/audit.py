"""
Zone assignment audit.

Recomputes every stored voter's zones from the region label, city and age
on the profile and reports where the stored foreign keys disagree. With
`fix=True` the stored assignments are rewritten in place.
"""

from dataclasses import dataclass, field

from django.db import transaction
from loguru import logger

from apps.elections.models import Voter

from .zones import ResolverConfig, ZoneLookup, resolve_zones

# Voter field -> ZoneAssignment attribute
ZONE_FIELDS = {
    "zone_id": "primary_id",
    "yuva_pank_zone_id": "yuva_pank_id",
    "karobari_zone_id": "karobari_id",
    "trustee_zone_id": "trustee_id",
}


@dataclass
class ZoneIssue:
    voter_id: str
    field: str
    stored: int | None
    expected: int | None
    region: str | None
    age: int | None


@dataclass
class AuditReport:
    checked: int = 0
    issues: list[ZoneIssue] = field(default_factory=list)
    unmapped: list[str] = field(default_factory=list)
    fixed: int = 0

    @property
    def voters_with_issues(self) -> int:
        return len({issue.voter_id for issue in self.issues})

    def issues_by_field(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for issue in self.issues:
            counts[issue.field] = counts.get(issue.field, 0) + 1
        return counts


def audit_zone_assignments(
    lookup: ZoneLookup | None = None,
    config: ResolverConfig | None = None,
    fix: bool = False,
) -> AuditReport:
    """
    Compare stored zone assignments against freshly resolved ones.

    Voters whose region label is not in the region table are listed in
    `unmapped` and never rewritten.
    """
    lookup = lookup if lookup is not None else ZoneLookup.load()
    config = config or ResolverConfig.from_settings()
    report = AuditReport()

    for voter in Voter.objects.order_by("voter_id"):
        report.checked += 1
        zones = resolve_zones(
            voter.region_label or voter.region, voter.age, voter.city, lookup, config
        )
        if zones.used_default or zones.unknown_region:
            report.unmapped.append(voter.voter_id)
            continue

        mismatched = []
        for voter_field, attr in ZONE_FIELDS.items():
            stored = getattr(voter, voter_field)
            expected = getattr(zones, attr)
            if stored != expected:
                mismatched.append(voter_field)
                report.issues.append(
                    ZoneIssue(
                        voter_id=voter.voter_id,
                        field=voter_field,
                        stored=stored,
                        expected=expected,
                        region=voter.region_label or voter.region,
                        age=voter.age,
                    )
                )

        if fix and mismatched and zones.is_resolved:
            with transaction.atomic():
                for voter_field in mismatched:
                    setattr(voter, voter_field, getattr(zones, ZONE_FIELDS[voter_field]))
                voter.region = zones.primary.name
                voter.save(
                    update_fields=[
                        *(name.removesuffix("_id") for name in mismatched),
                        "region",
                        "updated_at",
                    ]
                )
            report.fixed += 1

    logger.info(
        f"Zone audit: {report.checked} voters checked, "
        f"{report.voters_with_issues} with mismatches, "
        f"{len(report.unmapped)} with unmapped regions, {report.fixed} fixed"
    )
    return report

"""
Zone resolution for voters.

Maps a voter's region label, city and age to their Yuva Pankh, Karobari
and Trustee zones, and picks the primary zone stored on `Voter.region`.

Precedence for the primary zone is Karobari > Trustees > Yuva Pankh.
"""

from dataclasses import dataclass, field

from django.conf import settings
from loguru import logger

from apps.elections.models import ElectionType, Zone
from config import regions

from .normalizer import resolve_region_alias, split_composite_region

PRIMARY_PRECEDENCE = (
    ElectionType.KAROBARI_MEMBERS,
    ElectionType.TRUSTEES,
    ElectionType.YUVA_PANK,
)


@dataclass(frozen=True)
class ZoneRef:
    id: int
    name: str
    code: str


@dataclass
class ResolverConfig:
    """
    Static tables and policy used by `resolve_zones`.

    `yuva_pank_allowed_codes` of None means every Yuva Pankh code in the
    region table is open. With `strict_regions`, unmapped labels are not
    sent to the default region.
    """

    region_codes: dict[str, dict[str, str | None]] = field(
        default_factory=lambda: dict(regions.REGION_ZONE_CODES)
    )
    aliases: dict[str, str] = field(default_factory=lambda: dict(regions.REGION_ALIASES))
    city_splits: list = field(default_factory=lambda: list(regions.CITY_SPLIT_REGIONS))
    default_region: str = regions.DEFAULT_REGION
    yuva_pank_allowed_codes: frozenset[str] | None = frozenset(
        regions.YUVA_PANK_ALLOWED_CODES
    )
    yuva_pank_min_age: int = regions.YUVA_PANK_MIN_AGE
    yuva_pank_max_age: int = regions.YUVA_PANK_MAX_AGE
    min_voting_age: int = regions.MIN_VOTING_AGE
    strict_regions: bool = False

    @classmethod
    def from_settings(cls) -> "ResolverConfig":
        allowlist = getattr(
            settings, "VOTER_YUVA_PANK_ALLOWLIST", regions.YUVA_PANK_ALLOWED_CODES
        )
        if allowlist is None or "*" in allowlist:
            allowed = None
        else:
            allowed = frozenset(code.strip() for code in allowlist if code.strip())
        return cls(
            yuva_pank_allowed_codes=allowed,
            strict_regions=getattr(settings, "VOTER_STRICT_REGIONS", False),
        )


class ZoneLookup:
    """In-memory `(code, election_type) -> ZoneRef` map, read-only during a batch."""

    def __init__(self, entries: dict[tuple[str, str], ZoneRef] | None = None):
        self._entries = dict(entries or {})

    @classmethod
    def from_zones(cls, zones) -> "ZoneLookup":
        return cls(
            {
                (zone.code, str(zone.election_type)): ZoneRef(
                    id=zone.id, name=zone.name, code=zone.code
                )
                for zone in zones
            }
        )

    @classmethod
    def load(cls) -> "ZoneLookup":
        """Build the lookup from the active zones in the database."""
        lookup = cls.from_zones(Zone.objects.filter(is_active=True))
        logger.info(f"Loaded {len(lookup)} zones into lookup")
        return lookup

    def get(self, code: str | None, election_type: str) -> ZoneRef | None:
        if code is None:
            return None
        return self._entries.get((code, str(election_type)))

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return key in self._entries


@dataclass
class ZoneAssignment:
    region_key: str | None
    used_default: bool = False
    unknown_region: bool = False
    yuva_pank: ZoneRef | None = None
    karobari: ZoneRef | None = None
    trustee: ZoneRef | None = None
    # "CODE:ELECTION_TYPE" for eligible codes missing from the zone table
    missing_codes: list[str] = field(default_factory=list)

    def zone_for(self, election_type: str) -> ZoneRef | None:
        return {
            ElectionType.YUVA_PANK: self.yuva_pank,
            ElectionType.KAROBARI_MEMBERS: self.karobari,
            ElectionType.TRUSTEES: self.trustee,
        }[election_type]

    @property
    def primary(self) -> ZoneRef | None:
        for election_type in PRIMARY_PRECEDENCE:
            zone = self.zone_for(election_type)
            if zone is not None:
                return zone
        return None

    @property
    def is_resolved(self) -> bool:
        return self.primary is not None

    @property
    def primary_id(self):
        return self.primary.id if self.primary else None

    @property
    def yuva_pank_id(self):
        return self.yuva_pank.id if self.yuva_pank else None

    @property
    def karobari_id(self):
        return self.karobari.id if self.karobari else None

    @property
    def trustee_id(self):
        return self.trustee.id if self.trustee else None


def canonical_region(
    region_label: str | None, city: str | None, config: ResolverConfig
) -> str | None:
    """Apply the alias table, then the city-based split."""
    label = resolve_region_alias(region_label, config.aliases)
    return split_composite_region(label, city, config.city_splits)


def _is_eligible(election_type: str, code: str | None, age: int, config: ResolverConfig) -> bool:
    if code is None or age < config.min_voting_age:
        return False
    if election_type == ElectionType.YUVA_PANK:
        if not (config.yuva_pank_min_age <= age <= config.yuva_pank_max_age):
            return False
        if (
            config.yuva_pank_allowed_codes is not None
            and code not in config.yuva_pank_allowed_codes
        ):
            return False
    return True


def resolve_zones(
    region_label: str | None,
    age: int,
    city: str | None,
    lookup: ZoneLookup,
    config: ResolverConfig | None = None,
) -> ZoneAssignment:
    """
    Compute a voter's zone assignments.

    Unmapped region labels use the default region's codes and are flagged
    with `used_default`; in strict mode they are flagged `unknown_region`
    and get no zones at all. Eligible codes absent from the lookup are
    listed in `missing_codes` rather than failing.
    """
    config = config or ResolverConfig()
    region_key = canonical_region(region_label, city, config)
    assignment = ZoneAssignment(region_key=region_key)

    codes = config.region_codes.get(region_key) if region_key else None
    if codes is None:
        if config.strict_regions:
            assignment.unknown_region = True
            return assignment
        assignment.used_default = True
        codes = config.region_codes[config.default_region]

    for election_type in ElectionType:
        code = codes.get(election_type.value)
        if not _is_eligible(election_type, code, age, config):
            continue
        zone = lookup.get(code, election_type)
        if zone is None:
            assignment.missing_codes.append(f"{code}:{election_type.value}")
            continue
        if election_type == ElectionType.YUVA_PANK:
            assignment.yuva_pank = zone
        elif election_type == ElectionType.KAROBARI_MEMBERS:
            assignment.karobari = zone
        else:
            assignment.trustee = zone

    return assignment

"""Election services."""

from .seeding import seed_zones

__all__ = ["seed_zones"]

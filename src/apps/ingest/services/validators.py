"""
Validation functions for voter roll sources.

Checks that the header row carries every column the pipeline needs
before any row is touched.
"""

# Canonical fields whose column must be present in every roll
REQUIRED_COLUMNS = ["voter_id", "name", "dob", "phone", "region"]

COLUMN_LABELS = {
    "voter_id": "VID No.",
    "name": "Name",
    "dob": "DOB",
    "phone": "Mobile",
    "region": "Voting Region",
}


def missing_columns(column_map: dict[str, str | None]) -> list[str]:
    """Required canonical fields that were not matched to any header."""
    return [name for name in REQUIRED_COLUMNS if not column_map.get(name)]


def validate_columns(column_map: dict[str, str | None]) -> tuple[bool, list[str]]:
    """
    Validate a header mapping from `map_columns`.

    Args:
        column_map: canonical field -> source header (None if not found)

    Returns:
        (is_valid, error_messages)
    """
    errors = [
        f"Missing required column: {name} (e.g. '{COLUMN_LABELS[name]}')"
        for name in missing_columns(column_map)
    ]

    is_valid = len(errors) == 0
    return is_valid, errors

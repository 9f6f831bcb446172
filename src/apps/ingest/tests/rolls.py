"""Roll file layout and row builders shared by the ingestion tests."""

from datetime import date

# Header row of the "Final Date for Input" roll
ROLL_HEADERS = [
    "Sr No.",
    "VID No.",
    "Name",
    "DOB",
    "Age",
    "Mobile",
    "Address",
    "City",
    "State",
    "Voting Region",
    "E-mail",
]

FIELD_TO_HEADER = {
    "sr": "Sr No.",
    "voter_id": "VID No.",
    "name": "Name",
    "dob": "DOB",
    "age": "Age",
    "phone": "Mobile",
    "address": "Address",
    "city": "City",
    "state": "State",
    "region": "Voting Region",
    "email": "E-mail",
}

# Reference date for all age calculations in tests
FIXED_TODAY = date(2025, 10, 1)


def make_row(**overrides) -> dict:
    """A clean Mumbai voter row; keyword arguments override fields."""
    row = {
        "voter_id": "V1",
        "name": "Asha Shah",
        "dob": "15/06/1980",
        "age": "",
        "phone": "9876543210",
        "address": "12 Station Road",
        "city": "Mumbai",
        "state": "Maharashtra",
        "region": "Mumbai",
        "email": "",
    }
    row.update(overrides)
    return row


def csv_cell(value) -> str:
    text = "" if value is None else str(value)
    if "," in text or '"' in text:
        return '"' + text.replace('"', '""') + '"'
    return text

"""
Field normalization for voter roll rows.

Pure functions, no Django dependencies. Each transform is total: bad input
yields None (or a best-effort value), never an exception.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from config.regions import CITY_SPLIT_REGIONS, MIN_VOTING_AGE, REGION_ALIASES

DEFAULT_AGE = MIN_VOTING_AGE

# Excel serial for 1970-01-01
EXCEL_UNIX_EPOCH = 25569

NULL_MARKERS = {"", "-", "na", "n/a", "nan", "none", "null"}
PHONE_NULL_MARKERS = {"na", "n/a"}

_FLOAT_SUFFIX = re.compile(r"^(\d+)\.0+$")
_NON_DIGITS = re.compile(r"\D")


def safe_int(value: Any) -> int | None:
    """Safely convert value to int, return None on failure."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        try:
            return int(float(value))
        except (ValueError, TypeError, OverflowError):
            return None


def cell_to_text(value: Any) -> str | None:
    """
    Convert a raw cell to trimmed text, or None for empty/placeholder cells.

    Integral floats lose their ".0" (spreadsheets store IDs as numbers).
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if value != value:  # NaN
            return None
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    if text.lower() in NULL_MARKERS:
        return None
    match = _FLOAT_SUFFIX.match(text)
    if match:
        return match.group(1)
    return text


def normalize_phone(value: Any) -> str | None:
    """
    Normalize a mobile number to exactly 10 digits.

    - "NA"/"N/A"/empty -> None
    - 12 digits starting with "91" -> last 10 digits
    - 10 digits -> unchanged
    - anything else -> None

    Examples:
        >>> normalize_phone("+91 98765-43210")
        '9876543210'
        >>> normalize_phone("12345")
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if value != value or not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int):
        value = str(value)

    text = str(value).strip()
    if not text or text.lower() in PHONE_NULL_MARKERS:
        return None

    match = _FLOAT_SUFFIX.match(text)
    if match:
        text = match.group(1)

    digits = _NON_DIGITS.sub("", text)
    if len(digits) == 12 and digits.startswith("91"):
        return digits[-10:]
    if len(digits) == 10:
        return digits
    return None


def _format_dob(day: int, month: int, year: int) -> str | None:
    try:
        date(year, month, day)
    except ValueError:
        return None
    return f"{day:02d}/{month:02d}/{year:04d}"


def _from_excel_serial(serial: float) -> str | None:
    try:
        converted = datetime(1970, 1, 1) + timedelta(
            seconds=(serial - EXCEL_UNIX_EPOCH) * 86400
        )
    except OverflowError:
        return None
    return _format_dob(converted.day, converted.month, converted.year)


def normalize_dob(value: Any) -> str | None:
    """
    Normalize a date of birth to zero-padded DD/MM/YYYY.

    Accepts date/datetime objects, Excel serial numbers after 1970-01-01,
    DD-MM-YYYY / DD/MM/YYYY text (two-digit years: >= 50 -> 19xx,
    < 50 -> 20xx) and ISO YYYY-MM-DD text. Returns None when the value
    cannot be parsed or is not a real calendar date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _format_dob(value.day, value.month, value.year)
    if isinstance(value, date):
        return _format_dob(value.day, value.month, value.year)
    if isinstance(value, (int, float)):
        if value != value or value <= EXCEL_UNIX_EPOCH:
            return None
        return _from_excel_serial(float(value))

    text = str(value).strip()
    if not text:
        return None

    # "1980-06-15 00:00:00" -> "1980-06-15"
    text = text.split(" ")[0].split("T")[0]

    if re.fullmatch(r"\d+(\.\d+)?", text):
        serial = float(text)
        if serial <= EXCEL_UNIX_EPOCH:
            return None
        return _from_excel_serial(serial)

    parts = re.split(r"[-/]", text)
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return None

    if len(parts[0]) == 4:
        year, month, day = (int(part) for part in parts)
    else:
        day, month = int(parts[0]), int(parts[1])
        year_text = parts[2]
        if len(year_text) == 2:
            short = int(year_text)
            year = 1900 + short if short >= 50 else 2000 + short
        elif len(year_text) == 4:
            year = int(year_text)
        else:
            return None

    return _format_dob(day, month, year)


def parse_dob(dob: str | None) -> date | None:
    """Turn a normalized DD/MM/YYYY string back into a date."""
    if not dob:
        return None
    try:
        day, month, year = (int(part) for part in dob.split("/"))
        return date(year, month, day)
    except ValueError:
        return None


def calculate_age(birth: date, today: date) -> int:
    """Whole years between birth and today, exact at the birthday boundary."""
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def derive_age(dob: str | None, sheet_age: Any, today: date) -> int:
    """Age from the DOB, else the sheet's age column, else the default."""
    birth = parse_dob(dob)
    if birth is not None:
        return calculate_age(birth, today)

    age = safe_int(cell_to_text(sheet_age))
    if age is not None:
        return age
    return DEFAULT_AGE


def resolve_region_alias(label: str | None, aliases: dict[str, str] | None = None) -> str | None:
    if label is None:
        return None
    aliases = REGION_ALIASES if aliases is None else aliases
    label = label.strip()
    return aliases.get(label, label)


def split_composite_region(
    label: str | None, city: str | None, rules=None
) -> str | None:
    """
    Resolve a composite region label into one of its concrete regions.

    The city is compared case-insensitively after trimming against the town
    list of the matched region; anything else goes to the fallback region.
    """
    if label is None:
        return None
    rules = CITY_SPLIT_REGIONS if rules is None else rules
    city_key = (city or "").strip().lower()

    for composite, towns, matched, fallback in rules:
        if label == composite:
            if city_key in {town.lower() for town in towns}:
                return matched
            return fallback
    return label


@dataclass
class NormalizedVoter:
    row_number: int
    voter_id: str | None
    name: str | None
    dob: str | None
    age: int
    phone: str | None
    email: str | None
    address: str | None
    city: str | None
    state: str | None
    region_label: str | None
    family_number: str | None = None

    @property
    def mulgam(self) -> str | None:
        """Native place shown to voters: city, else state, else address."""
        return self.city or self.state or self.address


def normalize_row(raw, columns: dict[str, str | None], today: date) -> NormalizedVoter:
    """
    Normalize one RawRow using the header mapping from `map_columns`.

    Args:
        raw: RawRow from a reader
        columns: canonical field -> source header
        today: reference date for age calculation
    """

    def text(field_name: str) -> str | None:
        return cell_to_text(raw.get(columns.get(field_name)))

    dob = normalize_dob(raw.get(columns.get("dob")))
    email = text("email")

    return NormalizedVoter(
        row_number=raw.row_number,
        voter_id=text("voter_id"),
        name=text("name"),
        dob=dob,
        age=derive_age(dob, raw.get(columns.get("age")), today),
        phone=normalize_phone(raw.get(columns.get("phone"))),
        email=email.lower() if email else None,
        address=text("address"),
        city=text("city"),
        state=text("state"),
        region_label=text("region"),
        family_number=text("family_number"),
    )

"""
Source readers for voter roll files.

A reader turns a spreadsheet or delimited text file into a `SourceTable`:
the header row plus the data rows as ordered `{header: cell}` mappings.
The strategy is picked from the file extension. Rows whose cells are all
empty are dropped here and never reach the pipeline.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import polars as pl
from loguru import logger

from .errors import SourceFileError

PREFERRED_SHEET = "MASTER DATA to Import"

SPREADSHEET_EXTENSIONS = {".xlsx", ".xlsm", ".xls"}
DELIMITED_EXTENSIONS = {".csv", ".txt"}

# Canonical field -> header aliases (lower-case). Order matters: a field
# claims its header before later fields are matched.
COLUMN_ALIASES = {
    "voter_id": ["vid no.", "vid no", "vid", "voter id", "voter no"],
    "family_number": ["family no.", "family"],
    "email": ["email", "mail"],
    "name": ["name"],
    "dob": ["dob", "date of birth", "birth"],
    "age": ["age"],
    "phone": ["mobile", "phone"],
    "address": ["address"],
    "city": ["city"],
    "state": ["state"],
    "region": ["voting region", "region", "zone"],
}


@dataclass
class RawRow:
    """One data row as read from the source, before any normalization."""

    row_number: int
    values: dict[str, Any]

    def get(self, header: str | None) -> Any:
        if header is None:
            return None
        return self.values.get(header)


@dataclass
class SourceTable:
    path: Path
    headers: list[str]
    rows: list[RawRow] = field(default_factory=list)
    sheet_name: str | None = None

    def __len__(self):
        return len(self.rows)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def split_csv_line(line: str) -> list[str]:
    """
    Split one delimited line into fields.

    Commas inside double quotes are kept, and a doubled quote inside a
    quoted field yields a literal quote. Fields are returned untrimmed.

    Example:
        >>> split_csv_line('V1,"Shah, Asha",Mumbai')
        ['V1', 'Shah, Asha', 'Mumbai']
    """
    fields = []
    current = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields


def read_csv_source(path: Path) -> SourceTable:
    """
    Read a delimited text roll.

    The first non-blank line is the header. Row numbers are physical line
    numbers (1-based) so they can be matched against the file.
    """
    headers: list[str] | None = None
    rows = []

    with open(path, encoding="utf-8-sig", newline="") as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue

            cells = split_csv_line(line)
            if headers is None:
                headers = [cell.strip() for cell in cells]
                continue

            if all(_is_blank(cell) for cell in cells):
                continue

            # Short rows are padded; extra trailing cells are ignored
            cells = cells + [None] * (len(headers) - len(cells))
            values = {
                header: (cell.strip() if isinstance(cell, str) else cell)
                for header, cell in zip(headers, cells)
            }
            rows.append(RawRow(row_number=line_number, values=values))

    if headers is None:
        raise SourceFileError(f"No header row found in {path}")

    logger.info(f"Read {len(rows)} rows from {path.name}")
    return SourceTable(path=path, headers=headers, rows=rows)


def _pick_sheet(sheets: dict[str, pl.DataFrame], requested: str | None) -> str:
    if not sheets:
        raise SourceFileError("Workbook contains no worksheets")

    if requested:
        if requested in sheets:
            return requested
        logger.warning(
            f"Sheet '{requested}' not found (available: {', '.join(sheets)}), "
            "falling back"
        )

    if PREFERRED_SHEET in sheets:
        return PREFERRED_SHEET
    return next(iter(sheets))


def read_excel_source(path: Path, sheet_name: str | None = None) -> SourceTable:
    """
    Read a spreadsheet roll.

    Header row is row 1. All cells are read as text so mixed columns
    (numbers next to "NA", dates next to free text) survive intact; the
    normalizer handles the conversions.
    """
    try:
        sheets = pl.read_excel(
            path, sheet_id=0, infer_schema_length=0, raise_if_empty=False
        )
    except Exception as e:
        raise SourceFileError(f"Could not read workbook {path}: {e}") from e

    if isinstance(sheets, pl.DataFrame):
        sheets = {sheet_name or "Sheet1": sheets}

    chosen = _pick_sheet(sheets, sheet_name)
    df = sheets[chosen]
    logger.info(f"Reading sheet '{chosen}' from {path.name} ({df.height} rows)")

    rows = []
    for idx, values in enumerate(df.iter_rows(named=True)):
        if all(_is_blank(value) for value in values.values()):
            continue
        values = {
            header: (value.strip() if isinstance(value, str) else value)
            for header, value in values.items()
        }
        # Row 1 is the header
        rows.append(RawRow(row_number=idx + 2, values=values))

    return SourceTable(path=path, headers=list(df.columns), rows=rows, sheet_name=chosen)


def open_source(path: str | Path, sheet_name: str | None = None) -> SourceTable:
    """
    Open a voter roll, choosing the reader by file extension.

    Raises:
        SourceFileError: if the file does not exist or the extension is unknown
    """
    path = Path(path)
    if not path.is_file():
        raise SourceFileError(f"Source file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in SPREADSHEET_EXTENSIONS:
        return read_excel_source(path, sheet_name)
    if suffix in DELIMITED_EXTENSIONS:
        return read_csv_source(path)

    raise SourceFileError(
        f"Unsupported file type '{suffix}' for {path.name}. "
        f"Expected one of: {', '.join(sorted(SPREADSHEET_EXTENSIONS | DELIMITED_EXTENSIONS))}"
    )


def map_columns(headers: list[str]) -> dict[str, str | None]:
    """
    Match source headers to canonical field names.

    Matching is case-insensitive. For each field an exact alias match wins,
    otherwise the first header containing an alias is used. A header is
    claimed by at most one field.

    Returns:
        Dictionary of canonical field -> source header (None if not found)
    """
    normalized = {header: str(header).strip().lower() for header in headers}
    claimed: set[str] = set()
    column_map: dict[str, str | None] = {}

    for field_name, aliases in COLUMN_ALIASES.items():
        match = None
        for alias in aliases:
            match = next(
                (h for h, low in normalized.items() if h not in claimed and low == alias),
                None,
            )
            if match is not None:
                break
        if match is None:
            for alias in aliases:
                match = next(
                    (
                        h
                        for h, low in normalized.items()
                        if h not in claimed and alias in low
                    ),
                    None,
                )
                if match is not None:
                    break

        column_map[field_name] = match
        if match is not None:
            claimed.add(match)

    return column_map

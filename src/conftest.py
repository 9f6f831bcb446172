"""
Central pytest configuration and shared fixtures.

This file provides common fixtures for all tests in the project.
Fixtures are available to all test files automatically.
"""
from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest

from apps.elections.services import seed_zones
from apps.ingest.models import IngestionBatch
from apps.ingest.services import ResolverConfig, VoterBatchProcessor, ZoneLookup
from apps.ingest.tests.rolls import FIELD_TO_HEADER, FIXED_TODAY, ROLL_HEADERS, csv_cell

# ============================================================================
# Date Fixtures
# ============================================================================

@pytest.fixture
def fixed_today() -> date:
    """Return the fixed 'today' used for age calculations."""
    return FIXED_TODAY


# ============================================================================
# Zone Fixtures
# ============================================================================

@pytest.fixture
def zones(db) -> dict:
    """Seed the reference zone table and return the seeding stats."""
    return seed_zones()


@pytest.fixture
def zone_lookup(zones) -> ZoneLookup:
    """Return a lookup built from the seeded zone table."""
    return ZoneLookup.load()


@pytest.fixture
def resolver_config() -> ResolverConfig:
    """Return the default resolver config (Yuva Pankh allow-list active)."""
    return ResolverConfig()


# ============================================================================
# Roll File Fixtures
# ============================================================================

@pytest.fixture
def write_roll_csv(tmp_path: Path) -> Callable[..., Path]:
    """
    Return a factory that writes roll rows to a CSV file.

    Rows are dicts keyed by field name (see make_row); missing fields are
    written empty. A row of None writes a blank separator line.
    """

    def _write(rows, name="roll.csv", headers=None) -> Path:
        headers = headers or ROLL_HEADERS
        header_to_field = {v: k for k, v in FIELD_TO_HEADER.items()}
        lines = [",".join(csv_cell(h) for h in headers)]
        for index, row in enumerate(rows, start=1):
            if row is None:
                lines.append("")
                continue
            row = {"sr": index, **row}
            lines.append(
                ",".join(
                    csv_cell(row.get(header_to_field.get(header, header)))
                    for header in headers
                )
            )
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_roll_xlsx(tmp_path: Path) -> Callable[..., Path]:
    """
    Return a factory that writes roll rows to an .xlsx workbook.

    `sheets` maps sheet name -> list of row dicts; sheets are written in order.
    """
    from openpyxl import Workbook

    def _write(sheets: dict, name="roll.xlsx") -> Path:
        workbook = Workbook()
        workbook.remove(workbook.active)
        for sheet_name, rows in sheets.items():
            worksheet = workbook.create_sheet(sheet_name)
            worksheet.append(ROLL_HEADERS)
            for index, row in enumerate(rows, start=1):
                row = {"sr": index, **row}
                worksheet.append(
                    [
                        row.get(field) if row.get(field) != "" else None
                        for field in FIELD_TO_HEADER
                    ]
                )
        path = tmp_path / name
        workbook.save(path)
        return path

    return _write


# ============================================================================
# Batch Fixtures
# ============================================================================

@pytest.fixture
def make_batch(db) -> Callable[..., IngestionBatch]:
    """Return a factory creating an IngestionBatch for a roll file."""

    def _make(path, mode=IngestionBatch.Mode.INSERT, sheet_name=None):
        return IngestionBatch.objects.create(
            source_file=str(path), mode=mode, sheet_name=sheet_name
        )

    return _make


@pytest.fixture
def run_roll(write_roll_csv, make_batch, zone_lookup, fixed_today):
    """
    Return a helper that writes rows to a CSV roll and ingests it.

    Returns (batch, summary).
    """

    def _run(rows, mode=IngestionBatch.Mode.INSERT, config=None, name="roll.csv"):
        path = write_roll_csv(rows, name=name)
        batch = make_batch(path, mode=mode)
        processor = VoterBatchProcessor(
            batch,
            today=fixed_today,
            resolver_config=config or ResolverConfig(),
            zone_lookup=zone_lookup,
        )
        summary = processor.process()
        batch.refresh_from_db()
        return batch, summary

    return _run


# ============================================================================
# Test Markers Documentation
# ============================================================================

def pytest_configure(config):
    """
    Configure custom pytest markers.

    This makes the markers available to all tests and allows
    pytest to validate marker usage with --strict-markers.
    """
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers",
        "pipeline: marks end-to-end pipeline tests"
    )
    config.addinivalue_line(
        "markers",
        "unit: marks fast unit tests"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks integration tests"
    )

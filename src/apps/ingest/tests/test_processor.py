"""
End-to-end tests for the voter batch processor.

Each test writes a small roll, runs it through Reader -> Normalizer ->
Zone Resolver -> Sink and checks the stored voters and batch summary.
"""

import pytest
from django.contrib.auth import get_user_model
from loguru import logger

from apps.elections.models import Voter
from apps.ingest.models import IngestionBatch, ProcessingFailure
from apps.ingest.services import (
    MissingColumnsError,
    ResolverConfig,
    SourceFileError,
    VoterBatchProcessor,
    VoterSink,
    ZoneLookup,
    ZoneTableError,
)
from apps.ingest.services.readers import PREFERRED_SHEET
from apps.ingest.tests.rolls import make_row
from config.logging import console_filter
from config.regions import REGION_ZONE_CODES

User = get_user_model()

pytestmark = [pytest.mark.django_db, pytest.mark.pipeline]


@pytest.fixture
def log_records():
    """Collect every loguru record emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


class TestScenarios:
    """The reference roll scenarios."""

    def test_clean_row(self, run_roll):
        batch, summary = run_roll([make_row()])

        assert summary.inserted == 1
        assert summary.skipped == 0
        voter = Voter.objects.select_related("zone", "karobari_zone").get(voter_id="V1")
        assert voter.age == 45
        assert voter.phone == "9876543210"
        assert voter.zone.code == "MUMBAI"
        assert voter.zone.election_type == "KAROBARI_MEMBERS"
        assert voter.zone == voter.karobari_zone
        assert batch.status == IngestionBatch.Status.COMPLETED

    def test_missing_phone(self, run_roll):
        run_roll([make_row(phone="NA")])

        voter = Voter.objects.select_related("user").get(voter_id="V1")
        # "V1" -> "0000", CSV line 2 -> "02"
        assert voter.phone == "9999000002"
        assert voter.user.phone == "9999000002"
        assert voter.user.email == "9999000002@voter.kms-election.com"
        assert voter.email is None

    def test_placeholder_is_stable_across_runs(self, run_roll):
        run_roll([make_row(phone="NA")], name="first.csv")
        first = Voter.objects.get(voter_id="V1").phone

        run_roll(
            [make_row(phone="N/A", name="Asha Shah")],
            mode=IngestionBatch.Mode.UPSERT,
            name="second.csv",
        )

        assert Voter.objects.get(voter_id="V1").phone == first

    def test_under_age(self, run_roll):
        batch, summary = run_roll([make_row(dob="01/01/2009")])

        assert summary.skipped == 1
        assert summary.skip_reasons == {"under_18": 1}
        assert batch.skip_reasons == {"under_18": 1}
        assert not Voter.objects.exists()
        assert not User.objects.filter(username="V1").exists()

    def test_unknown_region_uses_default(self, run_roll):
        batch, summary = run_roll([make_row(region="Atlantis", city="Atlantis")])

        assert summary.inserted == 1
        assert summary.region_fallbacks == {"Atlantis": 1}
        assert batch.region_fallbacks == {"Atlantis": 1}
        voter = Voter.objects.select_related("zone").get(voter_id="V1")
        assert voter.zone.code == "MUMBAI"
        assert voter.region == "Mumbai"
        assert voter.region_label == "Atlantis"

    def test_duplicate_on_reload(self, run_roll):
        run_roll([make_row()], name="first.csv")

        batch, summary = run_roll([make_row(name="Other Name")], name="second.csv")

        assert summary.duplicates == 1
        assert summary.inserted == 0
        assert summary.errors == 0
        assert Voter.objects.count() == 1
        assert Voter.objects.get().name == "Asha Shah"
        failure = ProcessingFailure.objects.get(batch=batch)
        assert failure.error_type == "DUPLICATE"
        assert failure.voter_id == "V1"
        assert failure.row_data["Name"] == "Other Name"
        # Duplicates are not errors
        assert batch.status == IngestionBatch.Status.COMPLETED

    def test_duplicate_within_file(self, run_roll):
        _, summary = run_roll([make_row(), make_row(name="Second Copy")])

        assert summary.inserted == 1
        assert summary.duplicates == 1
        assert Voter.objects.count() == 1


class TestRowValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"voter_id": ""},
            {"name": ""},
            {"dob": ""},
            {"dob": "31/02/1980"},
            {"dob": "not a date"},
        ],
    )
    def test_missing_required(self, run_roll, overrides):
        _, summary = run_roll([make_row(**overrides)])

        assert summary.skip_reasons == {"missing_required": 1}
        assert not Voter.objects.exists()

    def test_no_zone_for_region(self, run_roll):
        config = ResolverConfig(
            region_codes={
                **REGION_ZONE_CODES,
                "Nowhere": {"YUVA_PANK": None, "KAROBARI_MEMBERS": None, "TRUSTEES": None},
            }
        )

        _, summary = run_roll([make_row(region="Nowhere")], config=config)

        assert summary.skip_reasons == {"no_zone_Nowhere": 1}
        assert not Voter.objects.exists()

    def test_strict_regions_skip_unknown(self, run_roll):
        config = ResolverConfig(strict_regions=True)

        _, summary = run_roll([make_row(region="Atlantis")], config=config)

        assert summary.skip_reasons == {"unknown_region_Atlantis": 1}
        assert summary.region_fallbacks == {}
        assert not Voter.objects.exists()

    def test_missing_zone_codes_counted(self, run_roll):
        _, summary = run_roll([make_row(region="Kutch", city="Naliya")])

        assert summary.inserted == 1
        assert summary.missing_zone_codes == {"KUTCH:KAROBARI_MEMBERS": 1}
        voter = Voter.objects.select_related("zone").get()
        assert voter.karobari_zone_id is None
        assert voter.zone.code == "ABDASA_GARDA"
        assert voter.zone.election_type == "TRUSTEES"


class TestZoneAssignments:
    def test_youth_voter_gets_three_zones(self, run_roll):
        run_roll([make_row(region="Raigad", city="Pune", dob="01/01/1995")])

        voter = Voter.objects.select_related(
            "yuva_pank_zone", "karobari_zone", "trustee_zone"
        ).get()
        assert voter.age == 30
        assert voter.yuva_pank_zone.code == "RAIGAD"
        assert voter.karobari_zone.code == "RAIGAD"
        assert voter.trustee_zone.code == "RAIGAD"
        assert voter.zone_id == voter.karobari_zone_id

    def test_forty_year_old_has_no_youth_zone(self, run_roll):
        run_roll([make_row(region="Raigad", dob="01/10/1985")])

        voter = Voter.objects.get()
        assert voter.age == 40
        assert voter.yuva_pank_zone_id is None

    def test_alias_and_city_split(self, run_roll):
        run_roll(
            [
                make_row(voter_id="K1", region="Karnataka-Goa", city="Belgaum"),
                make_row(voter_id="A1", region="Anjar-Anya Gujarat", city="Gandhidham"),
                make_row(voter_id="G1", region="Anjar-Anya Gujarat", city="Surat"),
            ]
        )

        zones = {
            v.voter_id: v.karobari_zone.code
            for v in Voter.objects.select_related("karobari_zone")
        }
        assert zones == {"K1": "KARNATAKA_GOA", "A1": "ANJAR", "G1": "ANYA_GUJARAT"}


class TestBatchSummary:
    def test_counts_and_status(self, run_roll):
        batch, summary = run_roll(
            [
                make_row(voter_id="V1"),
                make_row(voter_id="V2", phone="NA"),
                make_row(voter_id="V3", dob="01/01/2012"),
                make_row(voter_id="V4", name=""),
                None,
                make_row(voter_id="V1"),
            ]
        )

        assert summary.expected_rows == 5
        assert summary.inserted == 2
        assert summary.skipped == 2
        assert summary.duplicates == 1
        assert summary.errors == 0
        assert summary.skip_reasons == {"under_18": 1, "missing_required": 1}
        assert summary.final_voter_count == 2

        assert batch.total_rows == 5
        assert batch.items_created == 2
        assert batch.items_skipped == 2
        assert batch.items_duplicate == 1
        assert batch.items_failed == 0
        assert batch.final_voter_count == 2
        assert batch.status == IngestionBatch.Status.COMPLETED
        assert batch.started_at is not None
        assert batch.duration is not None

    def test_summary_as_dict(self, run_roll):
        _, summary = run_roll([make_row()])

        data = summary.as_dict()

        assert data["inserted"] == 1
        assert data["expected_rows"] == 1
        assert data["final_voter_count"] == 1
        assert data["success_rate"] == 100.0
        assert data["skip_reasons"] == {}

    def test_small_chunks(self, run_roll, settings):
        settings.VOTER_INGEST_CHUNK_SIZE = 2
        settings.VOTER_PROGRESS_EVERY = 2

        _, summary = run_roll([make_row(voter_id=f"V{i}") for i in range(1, 6)])

        assert summary.inserted == 5
        assert Voter.objects.count() == 5

    def test_upsert_mode(self, run_roll):
        run_roll([make_row(), make_row(voter_id="V2")], name="first.csv")

        batch, summary = run_roll(
            [make_row(name="Asha R. Shah"), make_row(voter_id="V3")],
            mode=IngestionBatch.Mode.UPSERT,
            name="second.csv",
        )

        assert summary.updated == 1
        assert summary.inserted == 1
        assert batch.items_updated == 1
        assert Voter.objects.get(voter_id="V1").name == "Asha R. Shah"
        assert Voter.objects.count() == 3


class TestErrorIsolation:
    def test_row_error_does_not_stop_batch(self, run_roll, monkeypatch):
        original_insert = VoterSink._insert

        def flaky_insert(self, prepared):
            if prepared.voter_id == "BAD":
                raise RuntimeError("connection reset")
            return original_insert(self, prepared)

        monkeypatch.setattr(VoterSink, "_insert", flaky_insert)

        batch, summary = run_roll(
            [make_row(voter_id="V1"), make_row(voter_id="BAD"), make_row(voter_id="V2")]
        )

        assert summary.inserted == 2
        assert summary.errors == 1
        assert batch.items_failed == 1
        assert batch.status == IngestionBatch.Status.PARTIAL
        failure = ProcessingFailure.objects.get(batch=batch)
        assert failure.error_type == "RuntimeError"
        assert "connection reset" in failure.error_message
        assert failure.row_number == 3
        assert set(Voter.objects.values_list("voter_id", flat=True)) == {"V1", "V2"}

    def test_many_errors_logged_tersely(self, run_roll, monkeypatch, settings):
        settings.VOTER_VERBOSE_ERROR_LIMIT = 1

        def always_fail(self, prepared):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(VoterSink, "_insert", always_fail)

        batch, summary = run_roll([make_row(voter_id=f"V{i}") for i in range(1, 4)])

        assert summary.errors == 3
        assert ProcessingFailure.objects.filter(batch=batch).count() == 3


class TestSetupFailures:
    def test_missing_columns(self, write_roll_csv, make_batch, zone_lookup):
        path = write_roll_csv([make_row()], headers=["VID No.", "Name", "City"])
        batch = make_batch(path)

        with pytest.raises(MissingColumnsError) as exc_info:
            VoterBatchProcessor(batch, zone_lookup=zone_lookup).process()

        assert set(exc_info.value.missing) == {"dob", "phone", "region"}
        batch.refresh_from_db()
        assert batch.status == IngestionBatch.Status.FAILED
        assert "dob" in batch.error_message
        assert not Voter.objects.exists()

    def test_missing_file(self, make_batch, tmp_path):
        batch = make_batch(tmp_path / "missing.csv")

        with pytest.raises(SourceFileError):
            VoterBatchProcessor(batch).process()

        batch.refresh_from_db()
        assert batch.status == IngestionBatch.Status.FAILED

    def test_empty_zone_table(self, write_roll_csv, make_batch):
        batch = make_batch(write_roll_csv([make_row()]))

        with pytest.raises(ZoneTableError):
            VoterBatchProcessor(batch, zone_lookup=ZoneLookup()).process()

        batch.refresh_from_db()
        assert batch.status == IngestionBatch.Status.FAILED


class TestExcelRoll:
    def test_ingest_preferred_sheet(self, write_roll_xlsx, make_batch, zone_lookup, fixed_today):
        path = write_roll_xlsx(
            {
                "Summary": [make_row(voter_id="S1")],
                PREFERRED_SHEET: [
                    make_row(voter_id="M1"),
                    make_row(voter_id="M2", phone="NA"),
                ],
            }
        )
        batch = make_batch(path)

        summary = VoterBatchProcessor(
            batch, today=fixed_today, zone_lookup=zone_lookup
        ).process()

        assert summary.inserted == 2
        assert set(Voter.objects.values_list("voter_id", flat=True)) == {"M1", "M2"}
        voter = Voter.objects.get(voter_id="M2")
        assert voter.age == 45
        # Sheet row 3
        assert voter.phone == "9999000003"


class TestChunking:
    """Rows are committed and tallied one chunk at a time."""

    def test_chunk_tallies(self, run_roll, settings, log_records):
        settings.VOTER_INGEST_CHUNK_SIZE = 2
        rows = [make_row(voter_id=f"V{i}") for i in range(1, 6)]
        rows[2] = make_row(voter_id="V3", dob="01/01/2012")

        batch, summary = run_roll(rows)

        assert summary.chunks == 3
        assert summary.as_dict()["chunks"] == 3
        assert summary.inserted == 4
        assert summary.skip_reasons == {"under_18": 1}
        chunk_lines = [
            r["message"] for r in log_records if r["message"].startswith("Chunk ")
        ]
        assert len(chunk_lines) == 3
        assert chunk_lines[0].startswith("Chunk 1/3 committed: 2 rows (2 inserted")
        assert chunk_lines[1].startswith("Chunk 2/3 committed: 2 rows (1 inserted")
        assert "1 skipped" in chunk_lines[1]
        assert chunk_lines[2].startswith("Chunk 3/3 committed: 1 rows (1 inserted")
        assert batch.items_created == 4

    def test_counters_merged_across_chunks(self, run_roll, settings):
        settings.VOTER_INGEST_CHUNK_SIZE = 1

        batch, summary = run_roll(
            [
                make_row(voter_id="V1", region="Atlantis"),
                make_row(voter_id="V2", region="Atlantis"),
                make_row(voter_id="V3", region="Kutch", city="Naliya"),
                make_row(voter_id="V1"),
            ]
        )

        assert summary.chunks == 4
        assert summary.region_fallbacks == {"Atlantis": 2}
        assert summary.missing_zone_codes == {"KUTCH:KAROBARI_MEMBERS": 1}
        assert summary.duplicates == 1
        assert batch.region_fallbacks == {"Atlantis": 2}

    def test_failed_row_keeps_rest_of_chunk(self, run_roll, settings, monkeypatch):
        settings.VOTER_INGEST_CHUNK_SIZE = 3
        original_insert = VoterSink._insert

        def flaky_insert(self, prepared):
            if prepared.voter_id == "V2":
                raise RuntimeError("connection reset")
            return original_insert(self, prepared)

        monkeypatch.setattr(VoterSink, "_insert", flaky_insert)

        _, summary = run_roll([make_row(voter_id=f"V{i}") for i in range(1, 4)])

        assert summary.chunks == 1
        assert summary.errors == 1
        assert set(Voter.objects.values_list("voter_id", flat=True)) == {"V1", "V3"}

    def test_progress_interval(self, run_roll, settings, log_records):
        settings.VOTER_INGEST_CHUNK_SIZE = 1
        settings.VOTER_PROGRESS_EVERY = 2

        run_roll([make_row(voter_id=f"V{i}") for i in range(1, 6)])

        progress = [
            r["message"] for r in log_records if r["message"].startswith("Progress:")
        ]
        assert [line.split(" rows")[0] for line in progress] == [
            "Progress: 2/5",
            "Progress: 4/5",
        ]

    @pytest.mark.parametrize("setting", ["VOTER_PROGRESS_EVERY", "VOTER_INGEST_CHUNK_SIZE"])
    def test_zero_interval_clamped(self, run_roll, settings, setting):
        setattr(settings, setting, 0)

        batch, summary = run_roll([make_row(voter_id="V1"), make_row(voter_id="V2")])

        assert summary.inserted == 2
        assert batch.status == IngestionBatch.Status.COMPLETED


class TestRowDiagnostics:
    def test_row_messages_bound_to_batch_and_row(self, run_roll, log_records):
        batch, _ = run_roll([make_row(voter_id="V1"), make_row(voter_id="V2", phone="NA")])

        row_records = [r for r in log_records if "row" in r["extra"]]
        placeholder = next(r for r in row_records if "placeholder" in r["message"])
        assert placeholder["extra"] == {"batch": batch.id, "row": 3}
        # Batch-level lines are not row diagnostics
        summary_line = next(r for r in log_records if "complete:" in r["message"])
        assert "row" not in summary_line["extra"]

    def test_console_hides_row_info(self):
        def record(level, **extra):
            return {"extra": extra, "level": logger.level(level)}

        assert not console_filter(record("INFO", batch=1, row=2))
        assert console_filter(record("WARNING", batch=1, row=2))
        assert console_filter(record("INFO"))

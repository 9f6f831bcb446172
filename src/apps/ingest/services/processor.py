"""
Voter batch processor.

Drives one IngestionBatch through Reader -> Normalizer -> Zone Resolver ->
Sink. Rows are committed one chunk at a time (`VOTER_INGEST_CHUNK_SIZE`),
each row in its own savepoint inside the chunk transaction. Setup problems
(file, columns, zone table) fail the batch; every row-level problem is
turned into a RowOutcome and counted, so a single bad row never stops the
run.
"""

from datetime import date

from django.db import transaction
from django.utils import timezone
from loguru import logger

from apps.elections.models import Voter
from apps.ingest.models import IngestionBatch, ProcessingFailure

from .context import BatchContext, BatchSummary, OutcomeKind, RowOutcome
from .errors import MissingColumnsError, ZoneTableError
from .normalizer import normalize_row
from .readers import RawRow, map_columns, open_source
from .sink import VoterSink, prepare_voter
from .validators import missing_columns, validate_columns
from .zones import ResolverConfig, ZoneLookup, resolve_zones

BLANK_REGION = "(blank)"


def _chunks(rows: list, size: int):
    size = max(size, 1)
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


class VoterBatchProcessor:
    """
    Processes a voter roll batch and writes voters.

    Handles both INSERT (full reload) and UPSERT (reconciliation) batches.
    `today`, `resolver_config` and `zone_lookup` can be injected; otherwise
    they come from the clock, settings and the zone table.
    """

    def __init__(
        self,
        batch: IngestionBatch,
        *,
        today: date | None = None,
        resolver_config: ResolverConfig | None = None,
        zone_lookup: ZoneLookup | None = None,
    ):
        self.batch = batch
        self.today = today or timezone.localdate()
        self.resolver_config = resolver_config or ResolverConfig.from_settings()
        self.zone_lookup = zone_lookup
        self.context: BatchContext | None = None

    def process(self) -> BatchSummary:
        """
        Main processing entry point.

        Returns the batch summary; setup failures mark the batch FAILED and
        re-raise.
        """
        try:
            self.batch.status = IngestionBatch.Status.PROCESSING
            self.batch.started_at = timezone.now()
            self.batch.save(update_fields=["status", "started_at"])

            table = open_source(self.batch.source_file, self.batch.sheet_name)
            columns = map_columns(table.headers)
            is_valid, errors = validate_columns(columns)
            if not is_valid:
                for error in errors:
                    logger.error(error)
                raise MissingColumnsError(missing_columns(columns), table.headers)

            lookup = self.zone_lookup
            if lookup is None:
                lookup = ZoneLookup.load()
            if not len(lookup):
                raise ZoneTableError(
                    "Zone table is empty; run `manage.py seed_zones` first"
                )

            self.context = BatchContext(
                lookup=lookup,
                config=self.resolver_config,
                mode=self.batch.mode,
                today=self.today,
            )
            summary = self.context.summary
            summary.expected_rows = len(table)

            self.batch.total_rows = len(table)
            self.batch.save(update_fields=["total_rows"])

            mapped = {field: header for field, header in columns.items() if header}
            logger.info(
                f"Processing {len(table)} rows from {table.path.name} "
                f"({self.batch.get_mode_display()}, column map: {mapped})"
            )

            sink = VoterSink(self.batch.mode)
            chunk_size = max(self.context.chunk_size, 1)
            progress_every = max(self.context.progress_every, 1)
            total_chunks = -(-len(table) // chunk_size)
            done = 0
            for index, chunk in enumerate(_chunks(table.rows, chunk_size), start=1):
                tally = self._process_chunk(chunk, columns, sink)
                summary.merge(tally)
                previous, done = done, done + len(chunk)
                logger.debug(
                    f"Chunk {index}/{total_chunks} committed: {len(chunk)} rows "
                    f"({tally.inserted} inserted, {tally.updated} updated, "
                    f"{tally.skipped} skipped, {tally.duplicates} duplicates, "
                    f"{tally.errors} errors)"
                )
                if done // progress_every > previous // progress_every:
                    logger.info(
                        f"Progress: {done}/{len(table)} rows "
                        f"({summary.inserted} inserted, {summary.updated} updated, "
                        f"{summary.skipped} skipped, {summary.duplicates} duplicates, "
                        f"{summary.errors} errors)"
                    )

            summary.final_voter_count = Voter.objects.count()
            self._finalize(summary)
            return summary

        except Exception as e:
            logger.error(
                f"ingesting batch from file {self.batch.source_file} failed: {e}"
            )
            self.batch.status = IngestionBatch.Status.FAILED
            self.batch.error_message = str(e)
            self.batch.completed_at = timezone.now()
            self.batch.save(update_fields=["status", "error_message", "completed_at"])
            raise

    def _process_chunk(self, chunk: list[RawRow], columns: dict, sink: VoterSink) -> BatchSummary:
        """
        Process one chunk of rows as a single commit.

        Each row still runs in its own savepoint inside the chunk transaction,
        so a failing row never takes its neighbours with it. Returns the
        chunk's own tally; the caller merges it into the batch summary.
        """
        tally = BatchSummary(chunks=1)
        with transaction.atomic():
            for raw in chunk:
                outcome = self._process_row(raw, columns, sink, tally)
                self._handle_outcome(outcome, raw, tally)
        return tally

    def _process_row(
        self, raw: RawRow, columns: dict, sink: VoterSink, tally: BatchSummary
    ) -> RowOutcome:
        """Normalize, validate and resolve one row, then hand it to the sink."""
        ctx = self.context
        config = ctx.config
        log = self._row_logger(raw.row_number)
        try:
            voter = normalize_row(raw, columns, ctx.today)

            if not voter.voter_id or not voter.name or not voter.dob:
                log.warning(
                    f"Row {raw.row_number}: skipped (missing required data - "
                    f"voter_id: {voter.voter_id}, name: {voter.name}, dob: {voter.dob})"
                )
                return RowOutcome.skipped(raw.row_number, voter.voter_id, "missing_required")

            if voter.age < config.min_voting_age:
                log.info(f"Row {raw.row_number}: skipped (under 18, age {voter.age})")
                return RowOutcome.skipped(raw.row_number, voter.voter_id, "under_18")

            zones = resolve_zones(
                voter.region_label, voter.age, voter.city, ctx.lookup, config
            )
            label = voter.region_label or BLANK_REGION

            for key in zones.missing_codes:
                tally.missing_zone_codes[key] += 1
                log.debug(f"Row {raw.row_number}: zone {key} not in zone table")

            if zones.unknown_region:
                log.warning(f"Row {raw.row_number}: unknown region '{label}'")
                return RowOutcome.skipped(
                    raw.row_number, voter.voter_id, f"unknown_region_{label}"
                )

            if zones.used_default:
                tally.region_fallbacks[label] += 1
                log.warning(
                    f"Row {raw.row_number}: region '{label}' not mapped, "
                    f"using {config.default_region}"
                )

            if not zones.is_resolved:
                log.warning(
                    f"Row {raw.row_number}: no zone definition for region {label}"
                )
                return RowOutcome.skipped(raw.row_number, voter.voter_id, f"no_zone_{label}")

            prepared = prepare_voter(voter, zones, ctx.email_domain)
            if prepared.phone_is_placeholder:
                log.info(
                    f"Row {raw.row_number}: no phone number, using placeholder "
                    f"{prepared.phone} for {voter.name} ({voter.voter_id})"
                )

        except Exception as e:
            return RowOutcome.error(
                raw.row_number, None, f"{type(e).__name__}: {e}", e
            )

        return sink.write(prepared)

    def _handle_outcome(self, outcome: RowOutcome, raw: RawRow, tally: BatchSummary):
        ctx = self.context
        ctx.record(outcome, tally)
        log = self._row_logger(outcome.row_number)

        if outcome.kind is OutcomeKind.DUPLICATE:
            log.warning(f"Row {outcome.row_number}: {outcome.detail}")
            self._record_failure(outcome, raw, "DUPLICATE")

        elif outcome.kind is OutcomeKind.ERROR:
            if ctx.summary.errors + tally.errors <= ctx.verbose_error_limit:
                log.opt(exception=outcome.exception).error(
                    f"Row {outcome.row_number} ({outcome.voter_id}): {outcome.detail}"
                )
            else:
                log.warning(f"Row {outcome.row_number}: error ({outcome.detail})")
            error_type = (
                type(outcome.exception).__name__ if outcome.exception else "ERROR"
            )
            self._record_failure(outcome, raw, error_type)

    def _row_logger(self, row_number: int):
        """Logger for row diagnostics; routed to the rows log by `config.logging`."""
        return logger.bind(batch=self.batch.id, row=row_number)

    def _record_failure(self, outcome: RowOutcome, raw: RawRow, error_type: str):
        """Record a row failure in the database."""
        try:
            with transaction.atomic():
                ProcessingFailure.objects.create(
                    batch=self.batch,
                    voter_id=outcome.voter_id,
                    row_number=outcome.row_number,
                    error_type=error_type,
                    error_message=outcome.detail or "",
                    row_data={key: _json_safe(value) for key, value in raw.values.items()},
                )
        except Exception as e:
            logger.error(f"Failed to record failure for row {outcome.row_number}: {e}")

    def _finalize(self, summary: BatchSummary):
        self.batch.items_created = summary.inserted
        self.batch.items_updated = summary.updated
        self.batch.items_skipped = summary.skipped
        self.batch.items_duplicate = summary.duplicates
        self.batch.items_failed = summary.errors
        self.batch.skip_reasons = dict(summary.skip_reasons)
        self.batch.region_fallbacks = dict(summary.region_fallbacks)
        self.batch.missing_zone_codes = dict(summary.missing_zone_codes)
        self.batch.final_voter_count = summary.final_voter_count
        self.batch.completed_at = timezone.now()

        if summary.errors == 0:
            self.batch.status = IngestionBatch.Status.COMPLETED
        else:
            self.batch.status = IngestionBatch.Status.PARTIAL

        self.batch.save(
            update_fields=[
                "items_created",
                "items_updated",
                "items_skipped",
                "items_duplicate",
                "items_failed",
                "skip_reasons",
                "region_fallbacks",
                "missing_zone_codes",
                "final_voter_count",
                "completed_at",
                "status",
            ]
        )

        if summary.region_fallbacks:
            logger.warning(
                f"{sum(summary.region_fallbacks.values())} rows used the default "
                f"region: {dict(summary.region_fallbacks)}"
            )
        if summary.missing_zone_codes:
            logger.warning(f"Zone codes missing from zone table: {dict(summary.missing_zone_codes)}")

        logger.info(
            f"Batch from file {self.batch.source_file} complete: "
            f"{summary.inserted} inserted, "
            f"{summary.updated} updated, "
            f"{summary.skipped} skipped, "
            f"{summary.duplicates} duplicates, "
            f"{summary.errors} errors "
            f"(expected {summary.expected_rows}, success rate {summary.success_rate:.1f}%, "
            f"{summary.final_voter_count} voters stored)"
        )


def _json_safe(value):
    if isinstance(value, float) and value != value:
        return None
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)

"""
Tasks for the voter ingestion pipeline.

Tasks can be triggered by management commands or, later, from the admin
upload screen.
"""

from typing import Any

from django.tasks import task
from loguru import logger

from .models import IngestionBatch
from .services import IngestError, VoterBatchProcessor


@task
def ingest_batch(batch_id: int) -> dict[str, Any]:
    """
    Ingest a voter roll batch: read, normalize, resolve zones and write voters.

    Args:
        batch_id: ID of the IngestionBatch to process

    Returns:
        Dictionary with the batch summary, or the setup error on failure
    """
    batch = IngestionBatch.objects.get(id=batch_id)
    logger.info(f"Ingesting batch {batch_id} ({batch.source_file}, {batch.mode})")

    try:
        summary = VoterBatchProcessor(batch).process()
    except IngestError as e:
        logger.error(f"Ingestion failed for batch {batch_id}: {e}")
        return {"success": False, "batch_id": batch_id, "error": str(e)}

    return {
        "success": True,
        "batch_id": batch_id,
        "status": batch.status,
        **summary.as_dict(),
    }

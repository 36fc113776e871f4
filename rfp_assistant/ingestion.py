"""
Ingestion Pipeline Module

Extracts records from an RFP workbook, skips the ones whose stable id is
already in the index, embeds the rest and upserts them in fixed-size batches.
"""

import concurrent.futures
import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from rfp_assistant.extractor import extract_records
from rfp_assistant.identifiers import generate_stable_id
from rfp_assistant.llm_gateway import LLMGateway
from rfp_assistant.models import (
    ExtractedRecord,
    IngestionResult,
    IngestionStats,
    VectorRecord,
)
from rfp_assistant.retry import with_retry
from rfp_assistant.vector_store import StoreAvailability, VectorStoreGateway

logger = logging.getLogger(__name__)

BATCH_SIZE = 10


class IngestionState(enum.Enum):
    EXTRACTING = "extracting"
    DEDUPING_AND_EMBEDDING = "deduping_and_embedding"
    UPLOADING = "uploading"
    DONE = "done"
    DEGRADED = "degraded"


class OutcomeStatus(enum.Enum):
    STAGED = "staged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class RecordOutcome:
    """What happened to one record while its batch was prepared."""

    status: OutcomeStatus
    record: ExtractedRecord
    vector: Optional[VectorRecord] = None
    error: Optional[str] = None


def chunk(items: List[Any], size: int) -> List[List[Any]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class IngestionPipeline:
    """Turns a workbook into deduplicated vectors in the index."""

    def __init__(self, store: VectorStoreGateway, llm: LLMGateway,
                 availability: StoreAvailability = StoreAvailability.CONNECTED,
                 batch_size: int = BATCH_SIZE, max_attempts: int = 3,
                 initial_delay: float = 1.0, workers: int = 1,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the pipeline.

        Args:
            store: Vector store gateway
            llm: Gateway used for embeddings
            availability: Outcome of the startup connectivity probe
            batch_size: Records per upsert call
            max_attempts: Attempts per remote call
            initial_delay: First retry delay in seconds
            workers: Records of one batch prepared concurrently (1 = sequential)
            sleep: Sleep function used between retries
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.store = store
        self.llm = llm
        self.availability = availability
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.workers = max(1, workers)
        self.sleep = sleep
        self.state: Optional[IngestionState] = None

    def _set_state(self, state: IngestionState):
        self.state = state
        logger.debug("Ingestion state: %s", state.value)

    def _retry(self, operation):
        return with_retry(operation, self.max_attempts, self.initial_delay, self.sleep)

    def _exists(self, vector_id: str) -> bool:
        # A failed check counts as "not stored" so the record is re-embedded
        try:
            existing = self._retry(lambda: self.store.fetch_by_ids([vector_id]))
        except Exception as e:
            logger.warning("Fetch check failed for %s, proceeding with upsert (%s)", vector_id, e)
            return False
        return bool(existing.get(vector_id))

    def _prepare(self, record: ExtractedRecord, metadata: Dict[str, Any]) -> RecordOutcome:
        try:
            vector_id = generate_stable_id(metadata, record)
            if self._exists(vector_id):
                return RecordOutcome(OutcomeStatus.SKIPPED, record)

            embedding = self._retry(lambda: self.llm.embed(record.text))
            vector = VectorRecord.from_record(vector_id, embedding, record, metadata)
            return RecordOutcome(OutcomeStatus.STAGED, record, vector=vector)
        except Exception as e:
            return RecordOutcome(OutcomeStatus.FAILED, record, error=str(e))

    def _prepare_batch(self, batch: List[ExtractedRecord],
                       metadata: Dict[str, Any]) -> List[RecordOutcome]:
        if self.workers == 1 or len(batch) == 1:
            return [self._prepare(record, metadata) for record in batch]

        max_workers = min(self.workers, len(batch))
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(lambda r: self._prepare(r, metadata), batch))

    def _upload(self, vectors: List[VectorRecord]) -> bool:
        try:
            self._retry(lambda: self.store.upsert(vectors))
        except Exception as e:
            logger.error("Error uploading batch of %d items: %s", len(vectors), e)
            return False
        logger.info("Successfully uploaded batch of %d items", len(vectors))
        return True

    def ingest_records(self, records: List[ExtractedRecord],
                       metadata: Dict[str, Any]) -> IngestionStats:
        """
        Deduplicate, embed and upload already-extracted records.

        A failing record is counted and never stops its batch; a batch whose
        upload fails charges every staged record to errors.
        """
        stats = IngestionStats(total_items=len(records))
        logger.info("Total items to process: %d", len(records))

        for batch_number, batch in enumerate(chunk(records, self.batch_size), 1):
            self._set_state(IngestionState.DEDUPING_AND_EMBEDDING)
            outcomes = self._prepare_batch(batch, metadata)

            staged = []
            for outcome in outcomes:
                if outcome.status is OutcomeStatus.STAGED:
                    staged.append(outcome.vector)
                elif outcome.status is OutcomeStatus.SKIPPED:
                    stats.skipped += 1
                    logger.info("Skipping duplicate entry (%d skipped so far)", stats.skipped)
                else:
                    stats.errors += 1
                    logger.error("Error preparing item from %s (%d errors so far): %s",
                                 outcome.record.sheet_name, stats.errors, outcome.error)

            if not staged:
                continue

            self._set_state(IngestionState.UPLOADING)
            if self._upload(staged):
                stats.processed += len(staged)
            else:
                stats.errors += len(staged)
            logger.info("Batch %d done: %d/%d processed", batch_number, stats.processed, stats.total_items)

        return stats

    def process_excel_rfp(self, buffer: bytes, metadata: Dict[str, Any]) -> IngestionResult:
        """
        Ingest an .xlsx workbook.

        Args:
            buffer: Raw workbook bytes
            metadata: Ingestion metadata; must contain "rfp_id"

        Returns:
            IngestionResult with stats and the workbook's sheet names
        """
        if not metadata or not metadata.get("rfp_id"):
            raise ValueError("metadata must contain a non-empty 'rfp_id'")

        self._set_state(IngestionState.EXTRACTING)
        records, sheets = extract_records(buffer)

        if self.availability is StoreAvailability.DEGRADED:
            self._set_state(IngestionState.DEGRADED)
            logger.warning("MOCK MODE: Simulating successful processing of %d items", len(records))
            stats = IngestionStats(total_items=len(records), processed=len(records))
            return IngestionResult(success=True, stats=stats, sheets=sheets, mock_mode=True)

        stats = self.ingest_records(records, metadata)
        self._set_state(IngestionState.DONE)
        return IngestionResult(success=True, stats=stats, sheets=sheets)

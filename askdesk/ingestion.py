"""
CSV ingestion into the FAQ vector store.

One-time job run before serving: every CSV row becomes one point whose
text is the row's non-empty FAQ fields joined by blank lines.
"""

import asyncio
import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .common.embedding_service import EmbeddingService
from .common.vector_store import VectorStore

logger = logging.getLogger("askdesk.ingestion")

FAQ_FIELDS = (
    "business_description",
    "faq_ordering",
    "faq_delivery",
    "faq_dietary",
    "faq_payment",
    "faq_returns",
    "reward_rules",
    "order_delivery_policy",
)


@dataclass
class IngestionReport:
    total: int = 0
    added: int = 0
    skipped: int = 0
    failed: int = 0


def build_row_text(row: Dict[str, str]) -> str:
    parts = [(row.get(name) or "").strip() for name in FAQ_FIELDS]
    return "\n\n".join(p for p in parts if p)


def read_csv(path: Path) -> List[Dict[str, str]]:
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


async def ingest_rows(
    rows: Sequence[Dict[str, str]],
    embedding_service: EmbeddingService,
    store: VectorStore,
    batch_size: int = 10,
) -> IngestionReport:
    """
    Embed and upsert rows, ``batch_size`` rows concurrently at a time.

    Row failures are logged and counted; the job keeps going.
    """
    report = IngestionReport(total=len(rows))

    async def _ingest(row_index: int, row: Dict[str, str]) -> str:
        location = row.get("location_name", "")
        text = build_row_text(row)
        if not text:
            logger.warning("Skipping row %d: No valid text content", row_index)
            return "skipped"
        try:
            vector = await embedding_service.embed(text)
            await store.upsert(row_index, vector, {"location_name": location, "text": text})
        except Exception as e:
            logger.error("Error processing row %d (%s): %s", row_index, location, e)
            return "failed"
        logger.info("Added document %d: %s - %s...", row_index, location, text[:50])
        return "added"

    batches = [rows[i:i + batch_size] for i in range(0, len(rows), batch_size)]
    for batch_index, batch in enumerate(batches):
        logger.info(
            "Processing batch %d/%d with %d rows",
            batch_index + 1, len(batches), len(batch),
        )
        outcomes: Iterable[str] = await asyncio.gather(*(
            _ingest(batch_index * batch_size + offset, row)
            for offset, row in enumerate(batch)
        ))
        for outcome in outcomes:
            setattr(report, outcome, getattr(report, outcome) + 1)

    return report

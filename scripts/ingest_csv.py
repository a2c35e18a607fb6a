#!/usr/bin/env python3
"""
FAQ CSV Ingestion Script

Embeds every row of the FAQ CSV and upserts it into the vector store.
Run once before starting the assistant, or again after the CSV changes.

Usage:
    python scripts/ingest_csv.py [--csv yam-resource.csv] [--batch-size 10] [--reset]
"""

import sys
import asyncio
import argparse
import logging
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def main():
    from dotenv import load_dotenv

    from askdesk.common.config import load_config
    from askdesk.ingestion import ingest_rows, read_csv
    from askdesk.service import create_embedding_service, create_vector_store

    load_dotenv()
    config = load_config()

    parser = argparse.ArgumentParser(description="Load FAQ rows from CSV into the vector store")
    parser.add_argument("--csv", type=str, default=config.ingestion.csv_file, help="CSV file to ingest")
    parser.add_argument("--batch-size", type=int, default=config.ingestion.batch_size, help="Rows embedded concurrently")
    parser.add_argument("--reset", action="store_true", help="Recreate the collection before ingesting")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    logger = logging.getLogger("askdesk.scripts.ingest_csv")

    csv_path = Path(args.csv)
    if not csv_path.is_file():
        logger.error("CSV file not found: %s", csv_path)
        sys.exit(1)

    try:
        rows = read_csv(csv_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to load CSV: %s", e)
        sys.exit(1)
    logger.info("Loaded %d rows from %s", len(rows), csv_path)

    store = create_vector_store(config)
    embedding_service = create_embedding_service(config)

    async def _run():
        if args.reset:
            await store.reset(config.embedding.dimension)
        return await ingest_rows(rows, embedding_service, store, batch_size=args.batch_size)

    report = asyncio.run(_run())
    logger.info(
        "Complete: %d added, %d skipped, %d failed, %d total",
        report.added, report.skipped, report.failed, report.total,
    )
    if report.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
CLI helper to load the demo fixtures into Firestore.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alphaspark.config import get_settings
from alphaspark.db import FirestoreDocumentStore, StoreError
from alphaspark.seed import seed_store

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Upload AlphaSpark test data")
    parser.add_argument(
        "-d",
        "--data-dir",
        type=Path,
        default=ROOT / "test_data",
        help="Directory holding the fixture JSON files",
    )
    parser.add_argument(
        "--auto-ids",
        action="store_true",
        help="Let Firestore generate document ids instead of using each item's id",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    settings = get_settings()
    try:
        store = FirestoreDocumentStore.from_service_account(
            settings.firebase_service_account_path
        )
    except StoreError:
        return 1

    report = seed_store(store, args.data_dir, use_id_as_doc_id=not args.auto_ids)
    for collection, count in report.uploaded.items():
        logger.info("%s: %d documents", collection, count)
    if not report.ok:
        logger.error("Upload finished with errors: %s", report.failed)
        return 1

    logger.info("All data uploaded. Start the server with: python -m alphaspark")
    return 0


if __name__ == "__main__":
    sys.exit(main())

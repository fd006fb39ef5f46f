"""
Load JSON fixture files into the document store.

Used by ``scripts/upload_test_data.py`` to reset a Firestore project to the
demo data set.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from alphaspark.db import DocumentStore
from alphaspark.firebase_constants import (
    COMMENTS_COLLECTION,
    GROUPS_COLLECTION,
    MESSAGE_REQUESTS_COLLECTION,
    PRIVATE_CONVERSATIONS_COLLECTION,
    PRIVATE_MESSAGES_COLLECTION,
    QUESTIONS_COLLECTION,
    RESPONSES_COLLECTION,
    USERS_COLLECTION,
)

logger = logging.getLogger(__name__)

# (collection, fixture file), uploaded in this order.
CORE_FIXTURES = [
    (USERS_COLLECTION, "users.json"),
    (GROUPS_COLLECTION, "groups.json"),
    (QUESTIONS_COLLECTION, "broadcast_questions.json"),
    (RESPONSES_COLLECTION, "question_responses.json"),
    (COMMENTS_COLLECTION, "response_comments.json"),
]

# Cleared before upload so the demo starts from an empty inbox.
MESSAGING_FIXTURES = [
    (MESSAGE_REQUESTS_COLLECTION, "message_requests.json"),
    (PRIVATE_CONVERSATIONS_COLLECTION, "private_conversations.json"),
    (PRIVATE_MESSAGES_COLLECTION, "private_messages.json"),
]


@dataclass
class SeedReport:
    uploaded: dict[str, int] = field(default_factory=dict)
    cleared: dict[str, int] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def load_fixture_items(path: Path) -> list[dict]:
    """
    Read a fixture file as a flat list of documents.

    Accepts a JSON array, or an object whose values are documents or arrays of
    documents (flattened one level).
    """
    data: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        items: list[dict] = []
        for value in data.values():
            if isinstance(value, list):
                items.extend(value)
            else:
                items.append(value)
        return items
    raise ValueError(f"{path} must contain a JSON array or object")


def upload_collection(
    store: DocumentStore,
    collection: str,
    path: Path,
    use_id_as_doc_id: bool = True,
) -> Optional[int]:
    """Upload one fixture file. Returns the count, or None when there is no file."""
    if not path.exists():
        logger.warning("Fixture %s not found, skipping %s", path, collection)
        return None

    items = load_fixture_items(path)
    if not items:
        logger.warning("No data found in %s", path)
        return 0

    entries = [
        (str(item["id"]) if use_id_as_doc_id and item.get("id") else None, item)
        for item in items
    ]
    count = store.write_documents(collection, entries)
    logger.info("Uploaded %d documents to %s", count, collection)
    return count


def seed_store(
    store: DocumentStore, data_dir: Path, use_id_as_doc_id: bool = True
) -> SeedReport:
    """Upload every fixture under ``data_dir``, resetting the messaging collections."""
    report = SeedReport()

    def _upload(collection: str, filename: str) -> None:
        try:
            count = upload_collection(
                store, collection, data_dir / filename, use_id_as_doc_id
            )
        except Exception as exc:
            logger.error("Error uploading %s: %s", collection, exc)
            report.failed[collection] = str(exc)
            return
        if count is None:
            report.skipped.append(collection)
        else:
            report.uploaded[collection] = count

    for collection, filename in CORE_FIXTURES:
        _upload(collection, filename)

    logger.info("Resetting private messaging data")
    for collection, _ in MESSAGING_FIXTURES:
        try:
            report.cleared[collection] = store.clear_collection(collection)
            logger.info(
                "Cleared %d documents from %s", report.cleared[collection], collection
            )
        except Exception as exc:
            logger.error("Error clearing %s: %s", collection, exc)
            report.failed[collection] = str(exc)

    for collection, filename in MESSAGING_FIXTURES:
        _upload(collection, filename)

    return report

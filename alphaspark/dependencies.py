"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading

from alphaspark.config import get_settings
from alphaspark.db import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore

logger = logging.getLogger(__name__)

_document_store: DocumentStore | None = None
_document_store_lock = threading.Lock()


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store shared across requests.

    The Firestore store connects on first use, so a missing or invalid service
    account surfaces as a StoreError inside the endpoint that touched it.
    """
    global _document_store
    if _document_store is not None:
        return _document_store

    with _document_store_lock:
        if _document_store is None:
            settings = get_settings()
            if settings.use_in_memory_backends:
                logger.info("Using in-memory document store")
                _document_store = InMemoryDocumentStore()
            else:
                _document_store = FirestoreDocumentStore(
                    service_account_path=settings.firebase_service_account_path
                )
            logger.info("Environment: %s", settings.environment)
    return _document_store

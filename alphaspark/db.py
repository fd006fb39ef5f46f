"""
Document store abstraction for Cloud Firestore and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Protocol

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1 import SERVER_TIMESTAMP
from google.cloud.firestore_v1.base_query import FieldFilter

from alphaspark.firebase_constants import (
    COMMENTS_COLLECTION,
    GROUP_ID_FIELD,
    LAST_LOGIN_FIELD,
    MAX_BATCH_WRITES,
    QUESTION_ID_FIELD,
    QUESTIONS_COLLECTION,
    RESPONSES_COLLECTION,
    USERS_COLLECTION,
)
from alphaspark.records import (
    CommentRecord,
    QuestionRecord,
    RecordError,
    ResponseRecord,
    StoreError,
    UserRecord,
)

logger = logging.getLogger(__name__)

_firebase_init_lock = threading.Lock()

__all__ = [
    "DocumentStore",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "RecordError",
    "StoreError",
    "connect_firestore",
]


class DocumentStore(Protocol):
    """Interface for the document reads and writes the service needs."""

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    def mark_user_login(self, user_id: str) -> None:
        ...

    def list_questions(self) -> list[QuestionRecord]:
        ...

    def list_responses(self, question_id: str, group_id: str) -> list[ResponseRecord]:
        ...

    def list_comments(self, question_id: str, group_id: str) -> list[CommentRecord]:
        ...

    def list_documents(self, collection: str) -> list[tuple[str, dict]]:
        ...

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def set_document(self, collection: str, doc_id: str, data: dict) -> None:
        ...

    def write_documents(
        self, collection: str, items: Iterable[tuple[Optional[str], dict]]
    ) -> int:
        ...

    def clear_collection(self, collection: str) -> int:
        ...

    def server_timestamp(self) -> Any:
        ...


def connect_firestore(service_account_path: Optional[str]):
    """
    Initialise the default Firebase app at most once and return a Firestore client.

    Credential or initialisation failures are raised as StoreError so callers
    report them like any other store failure.
    """
    with _firebase_init_lock:
        try:
            try:
                firebase_admin.get_app()
            except ValueError:
                firebase_admin.initialize_app(credentials.Certificate(service_account_path))
                logger.info("Firebase Admin initialized from %s", service_account_path)
            client = firestore.client()
        except Exception as exc:
            logger.error("Firebase initialization error: %s", exc)
            raise StoreError(f"Firebase initialization failed: {exc}") from exc
    logger.info("Firestore database connected")
    return client


def _matches(data: dict, question_id: str, group_id: str) -> bool:
    return (
        data.get(QUESTION_ID_FIELD) == question_id
        and data.get(GROUP_ID_FIELD) == group_id
    )


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}

    def _collection(self, name: str) -> dict[str, dict]:
        return self.collections.setdefault(name, {})

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        data = self.get_document(USERS_COLLECTION, user_id)
        if data is None:
            return None
        return UserRecord.from_document(user_id, data)

    def mark_user_login(self, user_id: str) -> None:
        users = self._collection(USERS_COLLECTION)
        if user_id not in users:
            raise StoreError(f"No document to update: {USERS_COLLECTION}/{user_id}")
        users[user_id][LAST_LOGIN_FIELD] = self.server_timestamp()

    def list_questions(self) -> list[QuestionRecord]:
        return [
            QuestionRecord.from_document(doc_id, data)
            for doc_id, data in self.list_documents(QUESTIONS_COLLECTION)
        ]

    def list_responses(self, question_id: str, group_id: str) -> list[ResponseRecord]:
        return [
            ResponseRecord.from_document(doc_id, data)
            for doc_id, data in self.list_documents(RESPONSES_COLLECTION)
            if _matches(data, question_id, group_id)
        ]

    def list_comments(self, question_id: str, group_id: str) -> list[CommentRecord]:
        return [
            CommentRecord.from_document(doc_id, data)
            for doc_id, data in self.list_documents(COMMENTS_COLLECTION)
            if _matches(data, question_id, group_id)
        ]

    def list_documents(self, collection: str) -> list[tuple[str, dict]]:
        return [
            (doc_id, copy.deepcopy(data))
            for doc_id, data in self.collections.get(collection, {}).items()
        ]

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        data = self.collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def set_document(self, collection: str, doc_id: str, data: dict) -> None:
        self._collection(collection)[doc_id] = copy.deepcopy(data)

    def write_documents(
        self, collection: str, items: Iterable[tuple[Optional[str], dict]]
    ) -> int:
        count = 0
        for doc_id, data in items:
            self.set_document(collection, doc_id or uuid.uuid4().hex, data)
            count += 1
        return count

    def clear_collection(self, collection: str) -> int:
        removed = len(self.collections.get(collection, {}))
        self.collections.pop(collection, None)
        return removed

    def server_timestamp(self) -> Any:
        return datetime.now(timezone.utc)


class FirestoreDocumentStore:
    """
    Firestore-backed implementation using the firebase-admin client.
    """

    def __init__(self, client=None, service_account_path: Optional[str] = None):
        self._client = client
        self.service_account_path = service_account_path

    @property
    def client(self):
        """Firestore client, connecting on first use. Raises StoreError on failure."""
        if self._client is None:
            self._client = connect_firestore(self.service_account_path)
        return self._client

    @classmethod
    def from_service_account(cls, service_account_path: str) -> "FirestoreDocumentStore":
        """Initialise the default Firebase app (once) and return a store for it."""
        return cls(connect_firestore(service_account_path))

    def _scoped_stream(self, collection: str, question_id: str, group_id: str):
        # Filtering only, ordering happens in Python to avoid a composite index.
        return (
            self.client.collection(collection)
            .where(filter=FieldFilter(QUESTION_ID_FIELD, "==", question_id))
            .where(filter=FieldFilter(GROUP_ID_FIELD, "==", group_id))
            .stream()
        )

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        snapshot = self.client.collection(USERS_COLLECTION).document(user_id).get()
        if not snapshot.exists:
            return None
        return UserRecord.from_document(snapshot.id, snapshot.to_dict())

    def mark_user_login(self, user_id: str) -> None:
        self.client.collection(USERS_COLLECTION).document(user_id).update(
            {LAST_LOGIN_FIELD: SERVER_TIMESTAMP}
        )

    def list_questions(self) -> list[QuestionRecord]:
        return [
            QuestionRecord.from_document(doc.id, doc.to_dict())
            for doc in self.client.collection(QUESTIONS_COLLECTION).stream()
        ]

    def list_responses(self, question_id: str, group_id: str) -> list[ResponseRecord]:
        return [
            ResponseRecord.from_document(doc.id, doc.to_dict())
            for doc in self._scoped_stream(RESPONSES_COLLECTION, question_id, group_id)
        ]

    def list_comments(self, question_id: str, group_id: str) -> list[CommentRecord]:
        return [
            CommentRecord.from_document(doc.id, doc.to_dict())
            for doc in self._scoped_stream(COMMENTS_COLLECTION, question_id, group_id)
        ]

    def list_documents(self, collection: str) -> list[tuple[str, dict]]:
        return [
            (doc.id, doc.to_dict() or {})
            for doc in self.client.collection(collection).stream()
        ]

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        snapshot = self.client.collection(collection).document(doc_id).get()
        return snapshot.to_dict() if snapshot.exists else None

    def set_document(self, collection: str, doc_id: str, data: dict) -> None:
        self.client.collection(collection).document(doc_id).set(data)

    def write_documents(
        self, collection: str, items: Iterable[tuple[Optional[str], dict]]
    ) -> int:
        ref = self.client.collection(collection)
        batch = self.client.batch()
        pending = 0
        count = 0
        for doc_id, data in items:
            doc_ref = ref.document(doc_id) if doc_id else ref.document()
            batch.set(doc_ref, data)
            pending += 1
            count += 1
            if pending == MAX_BATCH_WRITES:
                batch.commit()
                batch = self.client.batch()
                pending = 0
        if pending:
            batch.commit()
        return count

    def clear_collection(self, collection: str) -> int:
        batch = self.client.batch()
        pending = 0
        count = 0
        for doc in self.client.collection(collection).stream():
            batch.delete(doc.reference)
            pending += 1
            count += 1
            if pending == MAX_BATCH_WRITES:
                batch.commit()
                batch = self.client.batch()
                pending = 0
        if pending:
            batch.commit()
        return count

    def server_timestamp(self) -> Any:
        return SERVER_TIMESTAMP

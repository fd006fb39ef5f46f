"""
Typed records for the documents the service reads from the store.

Documents come back from Firestore as loose camelCase dicts. They are mapped
into these dataclasses at the store boundary so the rest of the service works
with explicit fields. Keys the dataclass does not declare are kept in
``extra`` and echoed back by ``to_dict`` so API payloads match the stored
document. Fields the document never set are left out of ``to_dict`` as well.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Optional, Type, TypeVar

from dacite import DaciteError, from_dict

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

T = TypeVar("T", bound="DocumentRecord")


class StoreError(Exception):
    """Base error for document store failures."""


class RecordError(StoreError):
    """A stored document is missing a required field or has the wrong shape."""


def camel_to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def snake_to_camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass(kw_only=True)
class DocumentRecord:
    id: str
    extra: dict = field(default_factory=dict)
    provided_fields: Optional[frozenset] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_document(cls: Type[T], doc_id: str, data: Optional[dict]) -> T:
        """Build a record from a document id and its raw field mapping."""
        data = data or {}
        known = {f.name for f in fields(cls)} - {"extra", "provided_fields"}
        payload: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            snake = camel_to_snake(key)
            if snake in known:
                payload[snake] = value
            else:
                extra[key] = value
        payload["id"] = doc_id
        payload["extra"] = extra
        try:
            record = from_dict(data_class=cls, data=payload)
        except DaciteError as exc:
            raise RecordError(
                f"Malformed {cls.__name__} document {doc_id!r}: {exc}"
            ) from exc
        record.provided_fields = frozenset(payload)
        return record

    def to_dict(self) -> dict:
        """Render the record as a camelCase JSON-ready mapping, id first."""
        result: dict[str, Any] = {"id": self.id}
        result.update(self.extra)
        for f in fields(self):
            if f.name in ("id", "extra", "provided_fields"):
                continue
            if self.provided_fields is not None and f.name not in self.provided_fields:
                continue
            result[snake_to_camel(f.name)] = getattr(self, f.name)
        return result


@dataclass(kw_only=True)
class UserRecord(DocumentRecord):
    display_name: Any = None
    email: Any = None
    group_id: Any = None
    # Stored as-is; only the boolean true counts as active.
    is_active: Any = False
    last_login_at: Any = None

    def session_payload(self) -> dict:
        """The subset of the user stored in the session cookie."""
        return {
            "id": self.id,
            "displayName": self.display_name,
            "email": self.email,
            "groupId": self.group_id,
        }


@dataclass(kw_only=True)
class QuestionRecord(DocumentRecord):
    question: Any = None
    is_active: Any = False


@dataclass(kw_only=True)
class ResponseRecord(DocumentRecord):
    question_id: str
    group_id: str
    created_at: Any = None
    content: Any = None


@dataclass(kw_only=True)
class CommentRecord(DocumentRecord):
    response_id: str
    question_id: str
    group_id: str
    created_at: Any = None
    content: Any = None

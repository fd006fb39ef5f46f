"""
Pure selection, ordering and grouping passes applied to fetched records.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from alphaspark.records import CommentRecord, QuestionRecord, ResponseRecord

EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Normalise a stored ``createdAt`` value to an aware UTC datetime.

    Accepts datetimes (including Firestore's DatetimeWithNanoseconds), ISO-8601
    strings and epoch milliseconds. Anything else sorts as the earliest instant.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        return EARLIEST
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return EARLIEST
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return EARLIEST
    else:
        return EARLIEST

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def select_question(
    questions: Sequence[QuestionRecord], rng: Optional[random.Random] = None
) -> Optional[QuestionRecord]:
    """
    Pick a random active question, or any random question if none are active.

    Returns None only when ``questions`` is empty.
    """
    if not questions:
        return None
    chooser = rng or random
    active = [q for q in questions if q.is_active is True]
    return chooser.choice(active or list(questions))


def sort_responses(responses: Iterable[ResponseRecord]) -> list[ResponseRecord]:
    """Newest first; equal timestamps keep their input order."""
    return sorted(
        responses, key=lambda r: parse_timestamp(r.created_at), reverse=True
    )


def group_comments(
    comments: Iterable[CommentRecord],
) -> dict[str, list[CommentRecord]]:
    """Oldest first, bucketed by parent response id."""
    ordered = sorted(comments, key=lambda c: parse_timestamp(c.created_at))
    grouped: dict[str, list[CommentRecord]] = {}
    for comment in ordered:
        grouped.setdefault(comment.response_id, []).append(comment)
    return grouped

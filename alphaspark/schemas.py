"""
Pydantic schemas for request bodies and session state.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    userId: Optional[str] = Field(default=None, max_length=256)


class SessionUser(BaseModel):
    # Profile fields are copied from the user document without coercion.
    id: str
    displayName: Any = None
    email: Any = None
    groupId: Any = None

"""
Session gate: per-request session context and the dependency that enforces login.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from alphaspark.schemas import SessionUser

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"
LOGIN_PATH = "/login"


class NotAuthenticated(Exception):
    """Raised when a gated route is hit without a logged-in session."""


@dataclass
class SessionContext:
    user: Optional[SessionUser] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def get_session_context(request: Request) -> SessionContext:
    raw = request.session.get(SESSION_USER_KEY)
    if not raw:
        return SessionContext()
    try:
        return SessionContext(user=SessionUser.model_validate(raw))
    except ValidationError:
        logger.warning("Discarding malformed session user payload")
        request.session.pop(SESSION_USER_KEY, None)
        return SessionContext()


def require_user(
    context: SessionContext = Depends(get_session_context),
) -> SessionUser:
    if context.user is None:
        raise NotAuthenticated()
    return context.user


def start_session(request: Request, user: SessionUser) -> None:
    request.session[SESSION_USER_KEY] = user.model_dump(mode="json")


def end_session(request: Request) -> None:
    # An empty session makes SessionMiddleware expire the cookie.
    request.session.clear()


async def not_authenticated_handler(
    request: Request, exc: NotAuthenticated
) -> RedirectResponse:
    return RedirectResponse(LOGIN_PATH, status_code=302)

"""
HTML page routes: the root redirect, the login page and the gated dashboard.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, RedirectResponse

from alphaspark.auth import LOGIN_PATH, SessionContext, get_session_context, require_user
from alphaspark.config import get_settings

router = APIRouter()

DASHBOARD_PATH = "/dashboard"
PROJECT_ROOT = Path(__file__).resolve().parents[1]


def public_dir() -> Path:
    path = Path(get_settings().public_dir)
    return path if path.is_absolute() else PROJECT_ROOT / path


@router.get("/", include_in_schema=False)
def index(context: SessionContext = Depends(get_session_context)):
    target = DASHBOARD_PATH if context.is_authenticated else LOGIN_PATH
    return RedirectResponse(target, status_code=302)


@router.get(LOGIN_PATH, include_in_schema=False)
def login_page(context: SessionContext = Depends(get_session_context)):
    if context.is_authenticated:
        return RedirectResponse(DASHBOARD_PATH, status_code=302)
    return FileResponse(public_dir() / "login.html")


@router.get(
    DASHBOARD_PATH, include_in_schema=False, dependencies=[Depends(require_user)]
)
def dashboard_page():
    return FileResponse(public_dir() / "dashboard.html")

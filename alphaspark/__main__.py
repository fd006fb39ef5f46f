"""
Run the backend with uvicorn: ``python -m alphaspark``.
"""

from __future__ import annotations

import logging

import uvicorn

from alphaspark.config import get_settings


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    uvicorn.run("alphaspark.app:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()

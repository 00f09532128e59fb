"""
Run the API with uvicorn.

Usage:
    python -m task_tracker

Host and port come from APP_HOST / APP_PORT (see settings.py).
"""
from __future__ import annotations

import uvicorn

from .settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "task_tracker.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

CATEGORY_DELETE_POLICIES = {"keep", "clear"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - APP_HOST: interface for the uvicorn server (default: 127.0.0.1)
    - APP_PORT: port for the uvicorn server (default: 8080)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level name (default: INFO)
    - CATEGORY_DELETE_POLICY: what happens to tasks referencing a deleted category.
      'keep' (default) leaves the reference dangling, 'clear' removes it from every task.
    """

    host: str
    port: int
    cors_allow_origins: List[str]
    log_level: int
    category_delete_policy: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_log_level(value: str, default: int = logging.INFO) -> int:
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    policy = _get_env("CATEGORY_DELETE_POLICY", "keep").strip().lower()
    if policy not in CATEGORY_DELETE_POLICIES:
        # Fallback to the dangling-reference behaviour if unsupported
        policy = "keep"

    return Settings(
        host=_get_env("APP_HOST", "127.0.0.1").strip(),
        port=_parse_int(_get_env("APP_PORT", "8080"), 8080),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
        category_delete_policy=policy,
    )

"""Article Comments: threaded article comments with live update fan-out."""

from __future__ import annotations

import os
from pathlib import Path

#: Environment variable that points at an alternative ``.env`` file.
ENV_FILE_VARIABLE = "ARTICLECOMMENTS_ENV_FILE"


def _load_local_env() -> None:
    """Populate ``os.environ`` from the project ``.env`` file without overriding set values."""

    override = os.environ.get(ENV_FILE_VARIABLE)
    env_path = Path(override) if override else Path(__file__).resolve().parents[2] / ".env"
    if not env_path.is_file():
        return

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export ") :].strip()
        if not key or key in os.environ:
            continue

        os.environ[key] = value.strip().strip("\"'")


_load_local_env()

from .config import AppConfig  # noqa: E402,F401
from .errors import CommentError, NotFoundError, PersistenceError, ValidationError  # noqa: E402,F401

__all__ = [
    "AppConfig",
    "CommentError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]

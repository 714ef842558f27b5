"""API package for the Article Comments project."""

from __future__ import annotations

from .app import app, create_app  # noqa: F401
from .routes import router, ws_router  # noqa: F401

__all__ = ["app", "create_app", "router", "ws_router"]

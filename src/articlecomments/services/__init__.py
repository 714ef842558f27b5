"""Service layer entry points for Article Comments."""

from __future__ import annotations

from .broadcaster import EventBroadcaster, Subscription  # noqa: F401
from .comments import CommentService  # noqa: F401
from .repository import CommentRepository, IdGenerator  # noqa: F401

__all__ = ["CommentRepository", "CommentService", "EventBroadcaster", "IdGenerator", "Subscription"]

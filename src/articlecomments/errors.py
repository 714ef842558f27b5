"""Exceptions raised by the comment repository and surfaced by the API."""

from __future__ import annotations

__all__ = ["CommentError", "NotFoundError", "PersistenceError", "ValidationError"]


class CommentError(Exception):
    """Base class for failures of a comment operation."""


class ValidationError(CommentError):
    """A required field of a comment or reply is missing or empty."""


class NotFoundError(CommentError):
    """The article or parent comment referenced by a reply does not exist."""


class PersistenceError(CommentError):
    """The comments document could not be written."""

"""Read-modify-write access to the comments corpus."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Callable, List

from articlecomments.datastore import DocumentStore
from articlecomments.errors import NotFoundError, PersistenceError, ValidationError
from articlecomments.models import Comment, Corpus, Reply

__all__ = ["CommentRepository", "IdGenerator", "format_timestamp"]

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Author and content are required"


class IdGenerator:
    """Issue millisecond timestamp ids that never repeat within the process.

    When the clock has not moved past the last issued value (two writes in the
    same millisecond, or the clock stepping backwards) the previous id plus one
    is issued instead.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            candidate = int(self._clock() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)


def format_timestamp(moment: datetime | None = None) -> str:
    """Render ``moment`` the way an en-US locale does, e.g. ``10/19/2026, 3:04:05 PM``."""

    moment = moment or datetime.now()
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment:%M:%S} {meridiem}"


def _require(author: str | None, content: str | None) -> None:
    if not author or not author.strip() or not content or not content.strip():
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)


class CommentRepository:
    """Sole owner of the comments corpus.

    Every write loads the full corpus, mutates it and saves it back while
    holding a process-wide lock, so concurrent writers never overwrite one
    another.  Reads load a fresh copy without taking the lock.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self._new_id = id_factory or IdGenerator()
        self._now = clock or datetime.now
        self._write_lock = threading.Lock()

    def list_comments(self, article_id: str) -> List[Comment]:
        """Return the comments stored for ``article_id`` in insertion order."""

        return list(self.store.load().comments_for(article_id))

    def add_comment(
        self,
        article_id: str,
        author: str | None,
        content: str | None,
        email: str | None = None,
        website: str | None = None,
    ) -> Comment:
        """Append a new top-level comment to ``article_id`` and persist it."""

        _require(author, content)

        with self._write_lock:
            corpus = self.store.load_for_update()
            comment = Comment(
                id=self._new_id(),
                author=author,
                email=email or "",
                website=website or "",
                content=content,
                date=format_timestamp(self._now()),
            )
            corpus.root.setdefault(article_id, []).append(comment)
            self._save(corpus)

        logger.info("Stored comment %s on article %s", comment.id, article_id)
        return comment

    def add_reply(
        self,
        article_id: str,
        comment_id: str,
        author: str | None,
        content: str | None,
        email: str | None = None,
        website: str | None = None,
    ) -> Reply:
        """Append a reply to comment ``comment_id`` of ``article_id`` and persist it."""

        _require(author, content)

        with self._write_lock:
            corpus = self.store.load_for_update()
            if not corpus.comments_for(article_id):
                raise NotFoundError("Article not found")

            parent = corpus.find_comment(article_id, comment_id)
            if parent is None:
                raise NotFoundError("Comment not found")

            reply = Reply(
                id=self._new_id(),
                author=author,
                email=email or "",
                website=website or "",
                content=content,
                date=format_timestamp(self._now()),
            )
            parent.replies.append(reply)
            self._save(corpus)

        logger.info("Stored reply %s to comment %s on article %s", reply.id, comment_id, article_id)
        return reply

    def _save(self, corpus: Corpus) -> None:
        if not self.store.save(corpus):
            raise PersistenceError(f"Failed to persist comments to {self.store.path}")

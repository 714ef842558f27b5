"""Use-cases combining the comment repository with the live update channel."""

from __future__ import annotations

import logging
from typing import List

from fastapi.concurrency import run_in_threadpool

from articlecomments.models import Comment, CommentPayload, Reply
from articlecomments.services.broadcaster import EventBroadcaster
from articlecomments.services.repository import CommentRepository

__all__ = ["CommentService"]

logger = logging.getLogger(__name__)


class CommentService:
    """Store comments and replies, then tell live viewers about them.

    Errors raised by the repository reach the caller unchanged.  Notification
    happens only after the write succeeded and its failure never turns that
    write into an error.
    """

    def __init__(self, repository: CommentRepository, broadcaster: EventBroadcaster) -> None:
        self.repository = repository
        self.broadcaster = broadcaster

    async def get_comments(self, article_id: str) -> List[Comment]:
        return await run_in_threadpool(self.repository.list_comments, article_id)

    async def post_comment(self, article_id: str, payload: CommentPayload) -> Comment:
        comment = await run_in_threadpool(
            self.repository.add_comment,
            article_id,
            payload.author,
            payload.content,
            email=payload.email,
            website=payload.website,
        )

        try:
            self.broadcaster.publish_new_comment(article_id, comment)
        except Exception:
            logger.exception("Failed to broadcast comment %s on article %s", comment.id, article_id)

        return comment

    async def post_reply(self, article_id: str, comment_id: str, payload: CommentPayload) -> Reply:
        reply = await run_in_threadpool(
            self.repository.add_reply,
            article_id,
            comment_id,
            payload.author,
            payload.content,
            email=payload.email,
            website=payload.website,
        )

        try:
            self.broadcaster.publish_new_reply(article_id, comment_id, reply)
        except Exception:
            logger.exception("Failed to broadcast reply %s on article %s", reply.id, article_id)

        return reply

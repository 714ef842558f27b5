"""API routes exposing article comments and their live update feed."""

from __future__ import annotations

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect

from articlecomments.errors import NotFoundError, PersistenceError, ValidationError
from articlecomments.models import Comment, CommentPayload, Reply
from articlecomments.services.broadcaster import EventBroadcaster, Subscription
from articlecomments.services.comments import CommentService

logger = logging.getLogger(__name__)

router = APIRouter()

ws_router = APIRouter()


def get_comment_service(request: Request) -> CommentService:
    """Return the service instance attached to the running application."""

    return request.app.state.comment_service


@router.get("/comments/{article_id}", response_model=List[Comment])
async def list_comments(
    article_id: str, service: CommentService = Depends(get_comment_service)
) -> List[Comment]:
    """Return every comment stored for ``article_id``, oldest first."""

    return await service.get_comments(article_id)


@router.post("/comments/{article_id}", response_model=Comment)
async def create_comment(
    article_id: str,
    payload: CommentPayload | None = Body(default=None),
    service: CommentService = Depends(get_comment_service),
) -> Comment:
    """Store a new top-level comment and notify live viewers."""

    try:
        return await service.post_comment(article_id, payload or CommentPayload())
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.exception("Could not store comment on %s", article_id)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/comments/{article_id}/reply/{comment_id}", response_model=Reply)
async def create_reply(
    article_id: str,
    comment_id: str,
    payload: CommentPayload | None = Body(default=None),
    service: CommentService = Depends(get_comment_service),
) -> Reply:
    """Store a reply to ``comment_id`` and notify live viewers."""

    try:
        return await service.post_reply(article_id, comment_id, payload or CommentPayload())
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.exception("Could not store reply to %s on %s", comment_id, article_id)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


async def _forward_events(
    websocket: WebSocket, broadcaster: EventBroadcaster, subscription: Subscription
) -> None:
    try:
        async for event in subscription:
            await websocket.send_json(event)
    except (WebSocketDisconnect, RuntimeError) as exc:
        # The peer went away between two events.
        logger.debug("Stopped forwarding to subscriber %s: %s", subscription.id, exc)
    except Exception:
        logger.exception("Forwarding to subscriber %s failed", subscription.id)
    finally:
        broadcaster.unsubscribe(subscription)


@ws_router.websocket("/ws/comments")
async def comments_feed(websocket: WebSocket) -> None:
    """Push ``newComment`` and ``newReply`` events to the connected client.

    The client may send ``ping`` to receive ``pong``; other messages are ignored.
    """

    broadcaster: EventBroadcaster = websocket.app.state.broadcaster
    subscription = broadcaster.subscribe()
    await websocket.accept()
    logger.info("Client connected: subscriber %s (total: %d)", subscription.id, broadcaster.subscriber_count)

    forwarder = asyncio.create_task(_forward_events(websocket, broadcaster, subscription))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            text = message.get("text")
            if text is not None and text.strip().lower() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.unsubscribe(subscription)
        forwarder.cancel()
        await asyncio.gather(forwarder, return_exceptions=True)
        logger.info("Client disconnected: subscriber %s (total: %d)", subscription.id, broadcaster.subscriber_count)

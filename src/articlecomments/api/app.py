"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from articlecomments.api.routes import router, ws_router
from articlecomments.config import AppConfig
from articlecomments.datastore import DocumentStore
from articlecomments.services import CommentRepository, CommentService, EventBroadcaster

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None) -> FastAPI:
    settings = config or AppConfig.from_env()

    store = DocumentStore(settings.comments_file)
    repository = CommentRepository(store)
    broadcaster = EventBroadcaster(queue_size=settings.subscriber_queue_size)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        corpus = store.load()
        logger.info("Loaded comments for %d article(s) from %s", len(corpus.root), store.path)
        yield

    app = FastAPI(title="Article Comments", description="Threaded article comments API", lifespan=lifespan)
    app.state.broadcaster = broadcaster
    app.state.comment_service = CommentService(repository, broadcaster)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix="/api")
    app.include_router(ws_router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    return app


app = create_app()

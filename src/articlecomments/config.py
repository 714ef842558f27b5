"""Runtime configuration for the Article Comments service."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from articlecomments.datastore import DEFAULT_COMMENTS_FILE

__all__ = ["AppConfig", "DEFAULT_PORT"]

DEFAULT_PORT = 8088


class AppConfig(BaseModel):
    """Settings shared by the API, the store and the broadcaster."""

    comments_file: Path = Field(
        default=DEFAULT_COMMENTS_FILE,
        description="YAML document holding every article's comments",
    )
    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Port the HTTP server listens on")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser",
    )
    subscriber_queue_size: int = Field(
        default=100,
        ge=1,
        description=(
            "Number of undelivered events buffered per live subscriber. "
            "Events beyond this are dropped for that subscriber."
        ),
    )
    log_level: str = Field(default="INFO", description="Root logging level for the server")

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build a configuration from environment variables, falling back to defaults."""

        env = os.environ if environ is None else environ
        data: dict[str, object] = {}

        if env.get("COMMENTS_FILE"):
            data["comments_file"] = env["COMMENTS_FILE"]
        if env.get("HOST"):
            data["host"] = env["HOST"]
        if env.get("PORT"):
            data["port"] = env["PORT"]
        if env.get("CORS_ORIGINS"):
            data["cors_origins"] = [
                origin.strip() for origin in env["CORS_ORIGINS"].split(",") if origin.strip()
            ]
        if env.get("SUBSCRIBER_QUEUE_SIZE"):
            data["subscriber_queue_size"] = env["SUBSCRIBER_QUEUE_SIZE"]
        if env.get("LOG_LEVEL"):
            data["log_level"] = env["LOG_LEVEL"]

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid environment configuration\n{exc}") from exc

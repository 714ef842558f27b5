"""Convenience script for serving the Article Comments API locally."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import uvicorn

# Ensure the src directory is on the Python path so the articlecomments package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from articlecomments.api.app import create_app  # noqa: E402  (import after path setup)
from articlecomments.config import AppConfig  # noqa: E402


def main() -> None:
    """Read the configuration from the environment and serve the API until interrupted."""

    try:
        config = AppConfig.from_env()
    except ValueError as exc:
        logging.basicConfig(level=logging.ERROR, format="%(levelname)s: %(message)s")
        logging.error("Could not load configuration: %s", exc)
        sys.exit(1)

    logging.basicConfig(level=config.log_level, format="%(levelname)s: %(message)s")
    logging.info("Serving comments from %s on %s:%d", config.comments_file, config.host, config.port)

    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()

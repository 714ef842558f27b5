"""Whole-document YAML persistence for the comments corpus."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from articlecomments.datastore import ensure_parent_dir, resolve_comments_file
from articlecomments.errors import PersistenceError
from articlecomments.models import Corpus

__all__ = ["DocumentStore"]

logger = logging.getLogger(__name__)


class DocumentStore:
    """Read and write the entire corpus as a single YAML document.

    The document maps article identifiers to their ordered list of comments.
    :meth:`load` never raises: a missing document is created empty and an
    unreadable one degrades to an empty corpus.  Writers use
    :meth:`load_for_update`, which refuses to hand out an empty corpus when the
    document exists but cannot be read.  Saving replaces the file atomically and
    reports failure through its return value.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = resolve_comments_file(path)

    def load(self) -> Corpus:
        """Return the persisted corpus, creating an empty document when none exists."""

        if not self.path.exists() and self._create_empty():
            return Corpus()

        try:
            raw_text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to read comments document %s: %s", self.path, exc)
            return Corpus()

        return self._parse(raw_text)

    def load_for_update(self) -> Corpus:
        """Return the persisted corpus for a read-modify-write cycle.

        Raises :class:`PersistenceError` when the document exists but cannot be
        read, so a write never replaces stored comments with a near-empty corpus.
        """

        try:
            raw_text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Corpus()
        except OSError as exc:
            logger.error("Failed to read comments document %s before writing: %s", self.path, exc)
            raise PersistenceError(f"Failed to read comments from {self.path}") from exc

        return self._parse(raw_text)

    def _create_empty(self) -> bool:
        """Create an empty document unless one appeared meanwhile. Returns ``True`` when none existed."""

        try:
            ensure_parent_dir(self.path)
            with self.path.open("x", encoding="utf-8") as handle:
                handle.write(yaml.safe_dump({}))
        except FileExistsError:
            return False
        except OSError as exc:
            logger.error("Failed to create comments document %s: %s", self.path, exc)
            return True

        logger.info("Comments document %s not found; created an empty one", self.path)
        return True

    def _parse(self, raw_text: str) -> Corpus:
        try:
            raw_data = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            logger.error("Comments document %s is not valid YAML: %s", self.path, exc)
            return Corpus()

        if raw_data is None:
            return Corpus()

        try:
            return Corpus.model_validate(raw_data)
        except ValidationError as exc:
            logger.error("Comments document %s has an unexpected shape: %s", self.path, exc)
            return Corpus()

    def save(self, corpus: Corpus) -> bool:
        """Persist ``corpus``, replacing the document in one step. Returns ``True`` on success."""

        payload = corpus.model_dump(mode="json")
        try:
            text = yaml.safe_dump(
                payload,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                indent=2,
            )
        except yaml.YAMLError as exc:
            logger.error("Failed to serialise comments corpus: %s", exc)
            return False

        temp_name: str | None = None
        try:
            ensure_parent_dir(self.path)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self.path)
        except OSError as exc:
            logger.error("Failed to write comments document %s: %s", self.path, exc)
            if temp_name is not None:
                try:
                    os.unlink(temp_name)
                except OSError:
                    pass
            return False

        return True

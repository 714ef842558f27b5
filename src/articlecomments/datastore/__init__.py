"""Location helpers and the document store backing the comments corpus."""

from __future__ import annotations

from pathlib import Path
from typing import Union

# The data directory lives inside the package so a fresh checkout can run
# without any configuration.
_PACKAGE_DIR = Path(__file__).resolve().parent

#: Name of the directory under :mod:`articlecomments.datastore` that holds the document.
DEFAULT_DATA_SUBDIR = "data"

#: Default directory for persisted state.
DEFAULT_DATA_ROOT = _PACKAGE_DIR / DEFAULT_DATA_SUBDIR

#: File name of the comments document inside the data root.
COMMENTS_FILENAME = "comments.yaml"

#: Default location of the comments document.
DEFAULT_COMMENTS_FILE = DEFAULT_DATA_ROOT / COMMENTS_FILENAME


_Pathish = Union[str, Path]


def resolve_comments_file(path: _Pathish | None = None) -> Path:
    """Return a :class:`Path` pointing at the comments document.

    ``path`` may be either a string or :class:`Path`.  When ``None`` is
    provided, :data:`DEFAULT_COMMENTS_FILE` is returned.  Nothing is created on
    disk; :func:`ensure_parent_dir` does that.
    """

    if path is None:
        return DEFAULT_COMMENTS_FILE
    return Path(path)


def ensure_parent_dir(path: _Pathish | None = None) -> Path:
    """Ensure the directory holding the comments document exists and return the document path."""

    document = resolve_comments_file(path)
    document.parent.mkdir(parents=True, exist_ok=True)
    return document


from .document_store import DocumentStore  # noqa: E402

__all__ = [
    "COMMENTS_FILENAME",
    "DEFAULT_COMMENTS_FILE",
    "DEFAULT_DATA_ROOT",
    "DEFAULT_DATA_SUBDIR",
    "DocumentStore",
    "ensure_parent_dir",
    "resolve_comments_file",
]

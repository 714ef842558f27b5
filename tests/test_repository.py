"""Tests for :mod:`articlecomments.services.repository`."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

import pytest

from articlecomments.datastore import DocumentStore
from articlecomments.errors import NotFoundError, PersistenceError, ValidationError
from articlecomments.services.repository import CommentRepository, IdGenerator, format_timestamp


@pytest.fixture
def repository(tmp_path: Path) -> CommentRepository:
    return CommentRepository(DocumentStore(tmp_path / "comments.yaml"))


def test_list_comments_is_empty_for_unknown_article(repository: CommentRepository) -> None:
    assert repository.list_comments("missing") == []


def test_add_comment_then_list(repository: CommentRepository) -> None:
    """A new comment is returned with generated fields and persisted."""

    comment = repository.add_comment("post-1", author="Alice", content="Nice post!")

    assert comment.id
    assert comment.date
    assert comment.author == "Alice"
    assert comment.content == "Nice post!"
    assert comment.email == ""
    assert comment.website == ""
    assert comment.replies == []

    stored = repository.list_comments("post-1")
    assert len(stored) == 1
    assert stored[0].model_dump() == comment.model_dump()


def test_add_comment_keeps_optional_fields(repository: CommentRepository) -> None:
    repository.add_comment("post-1", "Alice", "First")
    comment = repository.add_comment(
        "post-1", "Carol", "Second", email="carol@example.com", website="https://carol.example.com"
    )

    stored = repository.list_comments("post-1")
    assert [entry.content for entry in stored] == ["First", "Second"]
    assert stored[-1].email == "carol@example.com"
    assert stored[-1].website == "https://carol.example.com"
    assert stored[-1].id == comment.id


def test_add_reply_attaches_to_parent(repository: CommentRepository) -> None:
    """Replies are stored under the comment they answer."""

    parent = repository.add_comment("post-1", author="Alice", content="Nice post!")

    reply = repository.add_reply("post-1", parent.id, author="Bob", content="Thanks!")

    assert reply.id
    assert reply.id != parent.id
    assert reply.author == "Bob"
    assert reply.content == "Thanks!"
    stored = repository.list_comments("post-1")
    assert len(stored) == 1
    assert [entry.model_dump() for entry in stored[0].replies] == [reply.model_dump()]


def test_reads_are_repeatable(repository: CommentRepository) -> None:
    repository.add_comment("post-1", "Alice", "Hello")

    assert repository.list_comments("post-1") == repository.list_comments("post-1")


@pytest.mark.parametrize(
    ("author", "content"),
    [("", "hello"), ("Alice", ""), (None, "hello"), ("Alice", None), ("   ", "hello")],
)
def test_add_comment_requires_author_and_content(repository: CommentRepository, author, content) -> None:
    with pytest.raises(ValidationError, match="Author and content are required"):
        repository.add_comment("post-1", author=author, content=content)

    assert repository.list_comments("post-1") == []


def test_add_reply_requires_author_and_content(repository: CommentRepository) -> None:
    parent = repository.add_comment("post-1", "Alice", "Hello")

    with pytest.raises(ValidationError):
        repository.add_reply("post-1", parent.id, author="Bob", content="")


def test_add_reply_to_unknown_comment(repository: CommentRepository) -> None:
    repository.add_comment("post-1", "Alice", "Hello")

    with pytest.raises(NotFoundError, match="Comment not found"):
        repository.add_reply("post-1", "doesnotexist", author="A", content="hi")


def test_add_reply_to_article_without_comments(repository: CommentRepository) -> None:
    with pytest.raises(NotFoundError, match="Article not found"):
        repository.add_reply("post-1", "C1", author="A", content="hi")


def test_failed_save_raises_persistence_error(repository: CommentRepository, monkeypatch) -> None:
    """The caller learns about a write that did not reach the disk."""

    monkeypatch.setattr(repository.store, "save", lambda corpus: False)

    with pytest.raises(PersistenceError):
        repository.add_comment("post-1", "Alice", "Hello")


def test_ids_are_distinct_within_one_clock_tick(tmp_path: Path) -> None:
    """Two comments created in the same millisecond still get different ids."""

    frozen = IdGenerator(clock=lambda: 1_760_000_000.0)
    repository = CommentRepository(DocumentStore(tmp_path / "comments.yaml"), id_factory=frozen)

    first = repository.add_comment("post-1", "Alice", "One")
    second = repository.add_comment("post-1", "Bob", "Two")

    assert first.id == "1760000000000"
    assert second.id == "1760000000001"


def test_id_generator_never_goes_backwards() -> None:
    ticks = iter([5.0, 4.0, 6.0])
    generate = IdGenerator(clock=lambda: next(ticks))

    assert [generate(), generate(), generate()] == ["5000", "5001", "6000"]


def test_concurrent_writers_do_not_lose_comments(repository: CommentRepository) -> None:
    """Interleaved writers across articles all end up in the document."""

    def write(index: int) -> str:
        return repository.add_comment(f"post-{index % 3}", f"Author {index}", f"Comment {index}").id

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(write, range(24)))

    assert len(set(ids)) == 24
    stored = [comment.id for article in ("post-0", "post-1", "post-2") for comment in repository.list_comments(article)]
    assert sorted(stored) == sorted(ids)


def test_comment_date_uses_injected_clock(tmp_path: Path) -> None:
    repository = CommentRepository(
        DocumentStore(tmp_path / "comments.yaml"), clock=lambda: datetime(2026, 10, 19, 15, 4, 5)
    )

    assert repository.add_comment("post-1", "Alice", "Hello").date == "10/19/2026, 3:04:05 PM"


@pytest.mark.parametrize(
    ("moment", "expected"),
    [
        (datetime(2026, 1, 2, 0, 5, 9), "1/2/2026, 12:05:09 AM"),
        (datetime(2026, 12, 31, 12, 0, 0), "12/31/2026, 12:00:00 PM"),
        (datetime(2026, 7, 4, 9, 30, 0), "7/4/2026, 9:30:00 AM"),
    ],
)
def test_format_timestamp(moment: datetime, expected: str) -> None:
    assert format_timestamp(moment) == expected


def test_unreadable_document_fails_the_write_and_keeps_comments(repository: CommentRepository, monkeypatch) -> None:
    """A read failure inside a write is reported instead of overwriting stored comments."""

    repository.add_comment("post-1", "Alice", "First")
    repository.add_comment("post-2", "Bob", "Second")

    original_read_text = Path.read_text
    calls = {"count": 0}

    def flaky_read_text(self, *args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise OSError("EIO")
        return original_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", flaky_read_text)

    with pytest.raises(PersistenceError):
        repository.add_comment("post-3", "Carol", "Third")

    assert [comment.author for comment in repository.list_comments("post-1")] == ["Alice"]
    assert [comment.author for comment in repository.list_comments("post-2")] == ["Bob"]
    assert repository.list_comments("post-3") == []

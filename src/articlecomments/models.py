"""Domain models used across the application."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator


class Reply(BaseModel):
    """A response attached to a top-level comment."""

    id: str
    author: str
    email: str = ""
    website: str = ""
    content: str
    date: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # Older documents may carry the millisecond id as a bare number.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("email", "website", mode="before")
    @classmethod
    def _blank_when_missing(cls, value: object) -> object:
        return "" if value is None else value


class Comment(Reply):
    """A top-level comment on an article together with its replies."""

    replies: List[Reply] = Field(default_factory=list)

    @field_validator("replies", mode="before")
    @classmethod
    def _empty_when_missing(cls, value: object) -> object:
        return [] if value is None else value


class Corpus(RootModel[Dict[str, List[Comment]]]):
    """Every article's comments, keyed by article identifier."""

    root: Dict[str, List[Comment]] = Field(default_factory=dict)

    def comments_for(self, article_id: str) -> List[Comment]:
        """Return the stored comments for ``article_id`` or an empty list."""

        return self.root.get(article_id, [])

    def find_comment(self, article_id: str, comment_id: str) -> Optional[Comment]:
        """Return the comment with ``comment_id`` inside ``article_id`` if present."""

        return next((comment for comment in self.comments_for(article_id) if comment.id == comment_id), None)


class CommentPayload(BaseModel):
    """Body accepted when posting a comment or a reply."""

    author: Optional[str] = None
    content: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None

    @field_validator("author", "content", "email", "website", mode="before")
    @classmethod
    def _text_or_none(cls, value: object) -> object:
        # Numbers are stored as their text; other non-string values count as
        # missing so the required-field check answers for them.
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None


class NewCommentEvent(BaseModel):
    """Broadcast when a top-level comment was stored."""

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["newComment"] = "newComment"
    article_id: str = Field(alias="articleId")
    comment: Comment


class NewReplyEvent(BaseModel):
    """Broadcast when a reply was stored."""

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["newReply"] = "newReply"
    article_id: str = Field(alias="articleId")
    comment_id: str = Field(alias="commentId")
    reply: Reply

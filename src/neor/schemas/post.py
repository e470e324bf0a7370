"""Post-related view models."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel

from neor.core.visibility import DEFAULT_EDIT_WINDOW, Viewer, post_flags
from neor.models import Post

from .user import UserPreview, format_timestamp


class PostPreview(BaseModel):
    """Summary row used by the index, tag and profile listings."""

    id: int
    title: str
    description: str
    tags: list[str]
    posted_by: UserPreview | None
    posted_at: str

    @classmethod
    def from_post(cls, post: Post) -> PostPreview:
        return cls(
            id=post.id,
            title=post.title,
            description=post.description,
            tags=post.tag_names,
            posted_by=UserPreview.from_user(post.posted_by),
            posted_at=format_timestamp(post.posted_at),
        )


class PostView(BaseModel):
    """A full post with the viewer's permission flags."""

    id: int
    title: str
    description: str
    tags: list[str]
    content: str
    raw_content: str
    posted_by: UserPreview | None
    posted_at: str
    modified_at: str | None

    is_commentable: bool = False
    is_editable: bool = False
    is_anonymisable: bool = False
    is_deletable: bool = False

    @classmethod
    def from_post(
        cls,
        post: Post,
        viewer: Viewer | None,
        now: datetime | None = None,
        window: timedelta = DEFAULT_EDIT_WINDOW,
    ) -> PostView:
        flags = post_flags(post.posted_by_user_id, post.posted_at, viewer, now, window)
        return cls(
            id=post.id,
            title=post.title,
            description=post.description,
            tags=post.tag_names,
            content=post.markdown_content,
            raw_content=post.content,
            posted_by=UserPreview.from_user(post.posted_by),
            posted_at=format_timestamp(post.posted_at),
            modified_at=format_timestamp(post.modified_at) if post.modified_at else None,
            is_commentable=flags.is_commentable,
            is_editable=flags.is_editable,
            is_anonymisable=flags.is_anonymisable,
            is_deletable=flags.is_deletable,
        )

"""Comment-related view models."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel

from neor.core.visibility import DEFAULT_EDIT_WINDOW, Viewer, comment_flags
from neor.models import Comment

from .user import UserPreview, format_timestamp


class Reply(BaseModel):
    """Link from a comment to the comment it answers."""

    comment_id: int
    posted_by: UserPreview | None


class CommentView(BaseModel):
    """A comment with the viewer's permission flags."""

    id: int
    post_id: int
    reply: Reply | None
    content: str
    raw_content: str
    posted_by: UserPreview | None
    posted_at: str
    modified_at: str | None

    is_repliable: bool = False
    is_editable: bool = False
    is_anonymisable: bool = False
    is_deletable: bool = False

    @classmethod
    def from_comment(
        cls,
        comment: Comment,
        viewer: Viewer | None,
        now: datetime | None = None,
        window: timedelta = DEFAULT_EDIT_WINDOW,
    ) -> CommentView:
        flags = comment_flags(comment.posted_by_user_id, comment.posted_at, viewer, now, window)
        reply = None
        if comment.reply_to_comment_id is not None:
            reply = Reply(
                comment_id=comment.reply_to_comment_id,
                posted_by=UserPreview.from_user(
                    comment.reply_to.posted_by if comment.reply_to else None
                ),
            )
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            reply=reply,
            content=comment.markdown_content,
            raw_content=comment.content,
            posted_by=UserPreview.from_user(comment.posted_by),
            posted_at=format_timestamp(comment.posted_at),
            modified_at=format_timestamp(comment.modified_at) if comment.modified_at else None,
            is_repliable=flags.is_repliable,
            is_editable=flags.is_editable,
            is_anonymisable=flags.is_anonymisable,
            is_deletable=flags.is_deletable,
        )

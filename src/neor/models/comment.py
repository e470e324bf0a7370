"""SQLAlchemy model for threaded comments."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neor.db.session import Base, BigId
from neor.db.time import utcnow

if TYPE_CHECKING:
    from .post import Post
    from .user import User


class Comment(Base):
    """A comment on a post, optionally replying to another comment.

    Deleting the post removes its comments; deleting the replied-to comment
    only clears ``reply_to_comment_id``.
    """

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        BigId,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reply_to_comment_id: Mapped[int | None] = mapped_column(
        BigId,
        ForeignKey("comments.id", ondelete="SET NULL"),
        nullable=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    markdown_content: Mapped[str] = mapped_column(Text, nullable=False)
    posted_by_user_id: Mapped[int | None] = mapped_column(
        BigId,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    posted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    modified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    post: Mapped[Post] = relationship("Post")
    posted_by: Mapped[User | None] = relationship("User", lazy="joined")
    reply_to: Mapped[Comment | None] = relationship(
        "Comment", remote_side=[id], lazy="joined", join_depth=1
    )

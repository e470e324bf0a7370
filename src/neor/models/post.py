"""SQLAlchemy models for posts and their tags."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neor.db.session import Base, BigId
from neor.db.time import utcnow

if TYPE_CHECKING:
    from .user import User

post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", BigId, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", BigId, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Post(Base):
    """Top-level content entity.

    ``posted_by_user_id`` is cleared when the author anonymises the post; the
    content itself is kept. ``modified_at`` stays null until the first edit.
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(String(512), nullable=False)
    # Raw markdown as submitted and the sanitised HTML rendered from it.
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

    posted_by: Mapped[User | None] = relationship("User", lazy="joined")
    tags: Mapped[list[Tag]] = relationship(
        "Tag",
        secondary=post_tags,
        order_by="Tag.name",
        lazy="selectin",
    )

    @property
    def tag_names(self) -> list[str]:
        return [tag.name for tag in self.tags]


class Tag(Base):
    """A tag name, created the first time a post uses it."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    created_by_user_id: Mapped[int | None] = mapped_column(
        BigId,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

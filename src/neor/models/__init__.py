"""SQLAlchemy models for the neor forum."""

from .comment import Comment
from .file import File
from .post import Post, Tag, post_tags
from .user import User

__all__ = [
    "Comment",
    "File",
    "Post", "Tag", "post_tags",
    "User",
]

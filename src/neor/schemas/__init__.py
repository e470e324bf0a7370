"""View models handed to the templates."""

from .comment import CommentView, Reply
from .post import PostPreview, PostView
from .user import UserPreview, UserProfile

__all__ = [
    "CommentView", "Reply",
    "PostPreview", "PostView",
    "UserPreview", "UserProfile",
]

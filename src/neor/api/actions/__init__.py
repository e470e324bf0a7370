"""Form actions under ``/api``; each answers with a 303 redirect."""

from .auth import router as auth_actions_router
from .comments import router as comment_actions_router
from .posts import router as post_actions_router
from .users import router as user_actions_router

__all__ = [
    "auth_actions_router",
    "comment_actions_router",
    "post_actions_router",
    "user_actions_router",
]

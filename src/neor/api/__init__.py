"""HTTP surface of the forum: rendered pages and form actions."""

from .actions import (
    auth_actions_router,
    comment_actions_router,
    post_actions_router,
    user_actions_router,
)
from .pages import (
    assets_router,
    auth_pages_router,
    comment_pages_router,
    index_router,
    post_pages_router,
    user_pages_router,
)

__all__ = [
    "assets_router",
    "auth_pages_router",
    "comment_pages_router",
    "index_router",
    "post_pages_router",
    "user_pages_router",
    "auth_actions_router",
    "comment_actions_router",
    "post_actions_router",
    "user_actions_router",
]

"""Server-rendered pages."""

from .assets import router as assets_router
from .auth import router as auth_pages_router
from .comments import router as comment_pages_router
from .index import router as index_router
from .posts import router as post_pages_router
from .users import router as user_pages_router

__all__ = [
    "assets_router",
    "auth_pages_router",
    "comment_pages_router",
    "index_router",
    "post_pages_router",
    "user_pages_router",
]

"""Resolve session cookies to viewers."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from neor.core.visibility import Viewer
from neor.models import User

SESSION_COOKIE_NAME = "session"


def viewer_from_user(user: User) -> Viewer:
    return Viewer(
        id=user.id,
        username=user.username,
        role=user.role,
        mini_pfp=user.mini_pfp_name,
    )


def resolve_viewer(db: Session, token: str | None) -> Viewer | None:
    """Return the viewer whose session token is exactly ``token``.

    Tokens never expire; a token stops working only when its owner signs out.
    """
    if not token:
        return None
    user = db.scalars(select(User).where(User.session == token)).first()
    if user is None:
        return None
    return viewer_from_user(user)

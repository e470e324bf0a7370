"""Per-viewer permission flags for posts, comments and profiles.

Flags are derived at read time from the viewer's role capabilities, row
ownership and, for edits, the age of the row. Nothing here is persisted and
no caller should combine roles and ownership on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from neor.core.roles import Capabilities, Role
from neor.db.time import as_utc, utcnow

DEFAULT_EDIT_WINDOW = timedelta(hours=2)


@dataclass(frozen=True)
class Viewer:
    """The signed-in account a page is rendered for."""

    id: int
    username: str
    role: Role
    mini_pfp: str = "default.jpg"

    @property
    def capabilities(self) -> Capabilities:
        return self.role.capabilities

    def owns(self, owner_id: int | None) -> bool:
        return owner_id is not None and owner_id == self.id


@dataclass(frozen=True)
class PostFlags:
    is_commentable: bool = False
    is_editable: bool = False
    is_anonymisable: bool = False
    is_deletable: bool = False


@dataclass(frozen=True)
class CommentFlags:
    is_repliable: bool = False
    is_editable: bool = False
    is_anonymisable: bool = False
    is_deletable: bool = False


@dataclass(frozen=True)
class ProfileFlags:
    is_editable: bool = False
    is_sign_outable: bool = False
    is_adminable: bool = False


def within_edit_window(
    posted_at: datetime,
    now: datetime | None = None,
    window: timedelta = DEFAULT_EDIT_WINDOW,
) -> bool:
    """Return whether a row posted at ``posted_at`` may still be edited."""
    now = now or utcnow()
    return as_utc(now) - as_utc(posted_at) < window


def post_flags(
    owner_id: int | None,
    posted_at: datetime,
    viewer: Viewer | None,
    now: datetime | None = None,
    window: timedelta = DEFAULT_EDIT_WINDOW,
) -> PostFlags:
    if viewer is None:
        return PostFlags()

    caps = viewer.capabilities
    owns = viewer.owns(owner_id)
    return PostFlags(
        is_commentable=caps.can_comment,
        is_editable=owns and caps.can_edit_posts and within_edit_window(posted_at, now, window),
        is_anonymisable=owns and caps.can_anonymise_posts,
        is_deletable=caps.can_delete_posts,
    )


def comment_flags(
    owner_id: int | None,
    posted_at: datetime,
    viewer: Viewer | None,
    now: datetime | None = None,
    window: timedelta = DEFAULT_EDIT_WINDOW,
) -> CommentFlags:
    if viewer is None:
        return CommentFlags()

    caps = viewer.capabilities
    owns = viewer.owns(owner_id)
    return CommentFlags(
        is_repliable=caps.can_reply,
        is_editable=owns
        and caps.can_edit_comments
        and within_edit_window(posted_at, now, window),
        is_anonymisable=owns and caps.can_anonymise_comments,
        is_deletable=caps.can_delete_comments,
    )


def profile_flags(user_id: int, user_role: Role, viewer: Viewer | None) -> ProfileFlags:
    """Flags for viewing the profile of ``user_id``.

    An admin cannot act on another account whose role already grants admin.
    """
    if viewer is None:
        return ProfileFlags()

    is_self = viewer.id == user_id
    return ProfileFlags(
        is_editable=is_self and viewer.capabilities.can_edit_self,
        is_sign_outable=is_self,
        is_adminable=viewer.capabilities.can_admin and not user_role.capabilities.can_admin,
    )

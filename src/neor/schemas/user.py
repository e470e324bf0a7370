"""User-related view models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from neor.core.roles import Role
from neor.core.visibility import ProfileFlags, Viewer, profile_flags
from neor.models import User


def format_timestamp(value: datetime) -> str:
    """Render a timestamp the way every page shows dates."""
    return value.strftime("%B %d · %Y")


class UserPreview(BaseModel):
    """Author badge shown next to posts and comments."""

    id: int
    username: str
    mini_pfp: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_user(cls, user: User | None) -> UserPreview | None:
        if user is None:
            return None
        return cls(id=user.id, username=user.username, mini_pfp=user.mini_pfp_name)


class UserProfile(BaseModel):
    """Profile page header for one account."""

    id: int
    username: str
    role: Role
    pfp: str
    name: str
    description: str
    joined_at: str

    is_editable: bool = False
    is_sign_outable: bool = False
    is_adminable: bool = False

    @classmethod
    def from_user(cls, user: User, viewer: Viewer | None) -> UserProfile:
        flags: ProfileFlags = profile_flags(user.id, user.role, viewer)
        return cls(
            id=user.id,
            username=user.username,
            role=user.role,
            pfp=user.pfp_name,
            name=user.name,
            description=user.description,
            joined_at=format_timestamp(user.joined_at),
            is_editable=flags.is_editable,
            is_sign_outable=flags.is_sign_outable,
            is_adminable=flags.is_adminable,
        )

"""User roles and the capabilities each role grants.

``ROLE_CAPABILITIES`` is the only place a role is turned into a permission.
Callers ask ``role.capabilities.can_post`` and friends instead of comparing
roles directly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Role(str, enum.Enum):
    """Closed set of account states, stored by name."""

    ADMIN = "Admin"
    MOD = "Mod"
    MEMBER = "Member"
    BANNED = "Banned"
    UNVERIFIED = "Unverified"

    @classmethod
    def default(cls) -> Role:
        """Role assigned to freshly registered accounts."""
        return cls.UNVERIFIED

    @classmethod
    def parse(cls, name: str) -> Role:
        """Return the role called ``name``.

        Raises:
            ValueError: If ``name`` is not one of the role names.
        """
        return cls(name)

    @property
    def capabilities(self) -> Capabilities:
        return capabilities_for(self)


@dataclass(frozen=True)
class Capabilities:
    """Boolean permission vector derived from a role."""

    can_post: bool = False
    can_comment: bool = False
    can_edit_posts: bool = False
    can_edit_comments: bool = False
    can_edit_self: bool = False
    can_anonymise_posts: bool = False
    can_anonymise_comments: bool = False
    can_delete_posts: bool = False
    can_delete_comments: bool = False
    can_reply: bool = False
    can_admin: bool = False


_PARTICIPANT = Capabilities(
    can_post=True,
    can_comment=True,
    can_edit_posts=True,
    can_edit_comments=True,
    can_edit_self=True,
    can_anonymise_posts=True,
    can_anonymise_comments=True,
    can_reply=True,
)

_MODERATOR = Capabilities(
    **{**_PARTICIPANT.__dict__, "can_delete_posts": True, "can_delete_comments": True}
)

_NOTHING = Capabilities()

ROLE_CAPABILITIES: dict[Role, Capabilities] = {
    Role.ADMIN: Capabilities(**{**_MODERATOR.__dict__, "can_admin": True}),
    Role.MOD: _MODERATOR,
    Role.MEMBER: _PARTICIPANT,
    Role.BANNED: _NOTHING,
    Role.UNVERIFIED: _NOTHING,
}


def capabilities_for(role: Role) -> Capabilities:
    """Return the fixed capability vector for ``role``."""
    return ROLE_CAPABILITIES[role]


# Roles an admin may hand out through the admin form.
ASSIGNABLE_ROLES: tuple[Role, ...] = (Role.MOD, Role.MEMBER, Role.BANNED)

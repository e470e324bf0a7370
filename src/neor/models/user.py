"""SQLAlchemy model for forum accounts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neor.core.roles import Role
from neor.db.session import Base, BigId
from neor.db.time import utcnow

from .file import File


class User(Base):
    """A registered account.

    ``session`` is the opaque token stored in the browser cookie; it only
    changes on sign-up and sign-out. ``code`` holds a pending email
    verification or password reset code and is cleared once redeemed.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(
            Role,
            native_enum=False,
            length=16,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=Role.UNVERIFIED,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    session: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    code: Mapped[str | None] = mapped_column(String(6), unique=True, nullable=True)

    mini_pfp_file_id: Mapped[int | None] = mapped_column(
        BigId,
        ForeignKey("files.id", ondelete="SET NULL"),
        nullable=True,
    )
    pfp_file_id: Mapped[int | None] = mapped_column(
        BigId,
        ForeignKey("files.id", ondelete="SET NULL"),
        nullable=True,
    )

    name: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    mini_pfp: Mapped[File | None] = relationship(
        "File", foreign_keys=[mini_pfp_file_id], lazy="joined"
    )
    pfp: Mapped[File | None] = relationship("File", foreign_keys=[pfp_file_id], lazy="joined")

    @property
    def mini_pfp_name(self) -> str:
        """Return the file name of the small profile picture."""
        return self.mini_pfp.filename_on_disk if self.mini_pfp else File.DEFAULT_NAME

    @property
    def pfp_name(self) -> str:
        """Return the file name of the large profile picture."""
        return self.pfp.filename_on_disk if self.pfp else File.DEFAULT_NAME

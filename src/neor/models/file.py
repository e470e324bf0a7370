"""SQLAlchemy model for uploaded files."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from neor.db.session import Base, BigId
from neor.db.time import utcnow


class File(Base):
    """Metadata for an image stored as ``<files_dir>/<id>.<extension>``."""

    __tablename__ = "files"

    DEFAULT_NAME: ClassVar[str] = "default.jpg"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    extension: Mapped[str] = mapped_column(String(8), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # users also points at files; the constraint is added after both tables exist.
    uploaded_by_user_id: Mapped[int | None] = mapped_column(
        BigId,
        ForeignKey(
            "users.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_files_uploaded_by_user_id",
        ),
        nullable=True,
    )
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def filename_on_disk(self) -> str:
        return f"{self.id}.{self.extension}"

"""GitHub App installation model, linking an installation to a user."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.models.base import Base
from shared.models.user import User


class Installation(Base):
    __tablename__ = "installations"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    installation_id: Mapped[int] = mapped_column(BigInteger, unique=True)
    # Unset until the installation is claimed by a user
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), default=None
    )
    account_login: Mapped[str] = mapped_column(String(200))
    account_id: Mapped[int | None] = mapped_column(BigInteger, default=None)
    account_type: Mapped[str | None] = mapped_column(String(32), default=None)  # "User" | "Organization"
    repository_selection: Mapped[str | None] = mapped_column(String(32), default=None)  # "selected" | "all"

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    user: Mapped[User | None] = relationship()

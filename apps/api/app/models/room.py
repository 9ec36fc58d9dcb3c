"""Room model."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .participant import Participant


class Room(Base):
    """Room created at the conferencing provider."""

    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    room_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    # Participants reference rooms by provider id only, there is no FK constraint.
    participants: Mapped[list["Participant"]] = relationship(
        "Participant",
        primaryjoin="Room.room_id == foreign(Participant.room_id)",
        viewonly=True,
        lazy="raise",
    )

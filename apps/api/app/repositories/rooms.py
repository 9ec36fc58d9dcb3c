"""Room and participant persistence helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.participant import Participant
from ..models.room import Room


class PersistenceError(RuntimeError):
    """Raised when a room or participant record cannot be read or written."""

    def __init__(self, message: str, *, duplicate: bool = False) -> None:
        super().__init__(message)
        self.duplicate = duplicate

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": type(self).__name__, "detail": str(self)}
        if self.duplicate:
            payload["duplicate"] = True
        return payload


@dataclass(slots=True)
class RoomCount:
    """Room identifier with the number of linked participants."""

    room_id: str
    participants_count: int


async def insert_room(session: AsyncSession, room_id: str) -> Room:
    """Persist a room with no participants.

    Each insert commits on its own; duplicate provider ids violate the unique
    constraint and surface as a duplicate ``PersistenceError``.
    """

    room = Room(room_id=room_id)
    try:
        async with session.begin():
            session.add(room)
    except IntegrityError as exc:
        raise PersistenceError(f"Room {room_id} already exists", duplicate=True) from exc
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Could not store room {room_id}: {exc}") from exc
    return room


async def insert_participant(
    session: AsyncSession,
    *,
    user_id: str,
    token: str,
    room_id: str,
) -> Participant:
    """Persist a participant token grant. The room is not looked up."""

    participant = Participant(user_id=user_id, token=token, room_id=room_id)
    try:
        async with session.begin():
            session.add(participant)
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Could not store participant {user_id} for room {room_id}: {exc}") from exc
    return participant


async def list_rooms_with_counts(session: AsyncSession) -> list[RoomCount]:
    """Return every room with the size of its populated participants relationship."""

    stmt = select(Room).options(selectinload(Room.participants)).order_by(Room.created_at.asc())
    try:
        result = await session.execute(stmt)
        rooms = list(result.scalars().all())
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Could not list rooms: {exc}") from exc

    return [RoomCount(room_id=room.room_id, participants_count=len(room.participants)) for room in rooms]

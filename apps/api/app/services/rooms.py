"""Room creation, token issuance and participant announcements."""
from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..repositories import rooms as rooms_repo
from ..schemas import rooms as schemas
from .hms import HmsClient
from .notifications import ConnectionRegistry

logger = logging.getLogger(__name__)


async def create_room(provider: HmsClient, session: AsyncSession) -> dict[str, Any]:
    """Create a room at the provider, then record it locally.

    The two steps are not compensated: if the local insert fails the room
    still exists at the provider.
    """

    room = await provider.create_room()
    try:
        await rooms_repo.insert_room(session, room["id"])
    except rooms_repo.PersistenceError:
        logger.warning("Provider room %s was created but not recorded locally", room["id"])
        raise
    return room


async def issue_token(
    provider: HmsClient,
    session: AsyncSession,
    *,
    room_id: str,
    user_id: str,
) -> dict[str, Any]:
    """Mint a provider token for the user and record the grant."""

    token_data = await provider.generate_token(room_id, user_id)
    try:
        await rooms_repo.insert_participant(session, user_id=user_id, token=token_data["token"], room_id=room_id)
    except rooms_repo.PersistenceError:
        logger.warning("Token for user %s in room %s was issued but not recorded locally", user_id, room_id)
        raise
    return token_data


async def list_rooms(session: AsyncSession) -> list[schemas.RoomSummary]:
    rows = await rooms_repo.list_rooms_with_counts(session)
    return [schemas.RoomSummary(room_id=row.room_id, participants_count=row.participants_count) for row in rows]


def encode_participant_event(room_id: str, action: Any, user_id: Any) -> str:
    """Encode the notification as compact JSON with a fixed key order.

    Missing values are left out rather than sent as null.
    """

    fields = {"roomId": room_id, "action": action, "userId": user_id}
    payload = {key: value for key, value in fields.items() if value is not None}
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


async def announce_participant_action(
    registry: ConnectionRegistry,
    *,
    room_id: str,
    action: Any,
    user_id: Any,
) -> schemas.MessageResponse:
    """Broadcast a participant action to every connected client.

    Neither the room nor the user is checked against storage or the provider.
    """

    delivered = await registry.broadcast(encode_participant_event(room_id, action, user_id))
    logger.debug("Participant %s for room %s delivered to %d clients", action, room_id, delivered)
    return schemas.MessageResponse(message=f"Participant {_describe_action(action)} successfully")


def _describe_action(action: Any) -> str:
    if isinstance(action, str):
        return action
    if action is None:
        return "undefined"
    return json.dumps(action, separators=(",", ":"), ensure_ascii=False)

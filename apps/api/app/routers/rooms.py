"""Room, token and participant notification endpoints."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..repositories.rooms import PersistenceError
from ..schemas import rooms as schemas
from ..services import rooms as rooms_service
from ..services.hms import HmsClient, ProviderError, get_provider
from ..services.notifications import ConnectionRegistry, get_registry

router = APIRouter()

_FAILURE_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": schemas.ErrorResponse},
}


def _failure(message: str, exc: ProviderError | PersistenceError) -> JSONResponse:
    payload = schemas.ErrorResponse(message=message, error=exc.as_dict())
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload.model_dump())


@router.post("", status_code=status.HTTP_201_CREATED, responses=_FAILURE_RESPONSES)
async def create_room(
    provider: HmsClient = Depends(get_provider),
    session: AsyncSession = Depends(get_session),
) -> Any:
    """Create a provider room and record it."""

    try:
        return await rooms_service.create_room(provider, session)
    except (ProviderError, PersistenceError) as exc:
        return _failure("Failed to create room", exc)


@router.post("/{room_id}/token", responses=_FAILURE_RESPONSES)
async def create_token(
    room_id: str,
    payload: schemas.TokenRequest,
    provider: HmsClient = Depends(get_provider),
    session: AsyncSession = Depends(get_session),
) -> Any:
    """Issue a provider access token for the user in the room."""

    try:
        return await rooms_service.issue_token(provider, session, room_id=room_id, user_id=payload.user_id)
    except (ProviderError, PersistenceError) as exc:
        return _failure("Failed to generate token", exc)


@router.get("", response_model=list[schemas.RoomSummary], responses=_FAILURE_RESPONSES)
async def list_rooms(session: AsyncSession = Depends(get_session)) -> Any:
    """Return every room with its participant count."""

    try:
        return await rooms_service.list_rooms(session)
    except PersistenceError as exc:
        return _failure("Failed to list rooms", exc)


@router.post("/{room_id}/participants", response_model=schemas.MessageResponse)
async def announce_participant(
    room_id: str,
    payload: schemas.ParticipantActionRequest | None = None,
    registry: ConnectionRegistry = Depends(get_registry),
) -> schemas.MessageResponse:
    """Notify every connected real-time client about a participant action."""

    if payload is None:
        payload = schemas.ParticipantActionRequest()
    return await rooms_service.announce_participant_action(
        registry, room_id=room_id, action=payload.action, user_id=payload.user_id
    )

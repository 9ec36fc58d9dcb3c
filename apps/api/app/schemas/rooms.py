"""Data contracts for room endpoints."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", description="Opaque user identifier")


class ParticipantActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Relayed as received; absent fields are dropped from the broadcast.
    action: Any = Field(default=None, description="Participant action such as join or leave")
    user_id: Any = Field(default=None, alias="userId", description="Opaque user identifier")


class RoomSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(..., alias="roomId")
    participants_count: int = Field(..., ge=0, alias="participantsCount")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    message: str
    error: dict[str, Any]

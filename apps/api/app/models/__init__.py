"""Expose ORM models."""
from .participant import Participant
from .room import Room

__all__ = [
    "Participant",
    "Room",
]

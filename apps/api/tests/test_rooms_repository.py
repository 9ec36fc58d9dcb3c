"""Tests for room and participant persistence."""
from __future__ import annotations

import pytest

from app.repositories import rooms as rooms_repo


@pytest.mark.asyncio
async def test_insert_room_starts_without_participants(session):
    room = await rooms_repo.insert_room(session, "room_abc")

    assert room.room_id == "room_abc"
    assert room.id

    counts = await rooms_repo.list_rooms_with_counts(session)
    assert counts == [rooms_repo.RoomCount(room_id="room_abc", participants_count=0)]


@pytest.mark.asyncio
async def test_insert_room_rejects_duplicate_room_id(session):
    await rooms_repo.insert_room(session, "room_abc")

    with pytest.raises(rooms_repo.PersistenceError) as exc:
        await rooms_repo.insert_room(session, "room_abc")

    assert exc.value.duplicate is True
    assert exc.value.as_dict()["duplicate"] is True
    assert len(await rooms_repo.list_rooms_with_counts(session)) == 1


@pytest.mark.asyncio
async def test_insert_participant_does_not_require_room(session):
    participant = await rooms_repo.insert_participant(session, user_id="u1", token="tok", room_id="missing")

    assert participant.room_id == "missing"
    assert await rooms_repo.list_rooms_with_counts(session) == []


@pytest.mark.asyncio
async def test_list_rooms_with_counts_links_by_room_id(session):
    await rooms_repo.insert_room(session, "room_a")
    await rooms_repo.insert_room(session, "room_b")
    for user_id in ("u1", "u2", "u3"):
        await rooms_repo.insert_participant(session, user_id=user_id, token=f"tok-{user_id}", room_id="room_a")
    await rooms_repo.insert_participant(session, user_id="u4", token="tok-u4", room_id="room_c")

    counts = await rooms_repo.list_rooms_with_counts(session)

    assert sorted(counts, key=lambda row: row.room_id) == [
        rooms_repo.RoomCount(room_id="room_a", participants_count=3),
        rooms_repo.RoomCount(room_id="room_b", participants_count=0),
    ]

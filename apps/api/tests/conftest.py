"""Shared fixtures: an app wired to in-memory SQLite and a stub provider."""
from __future__ import annotations

import os
from typing import Any

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("HMS_API_KEY", "test-key")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings
from app.db.session import create_schema
from app.main import create_app
from app.services.hms import ProviderError, get_provider


class StubProvider:
    """Provider double returning canned descriptors and recording calls."""

    def __init__(self, room: dict[str, Any] | None = None, token: dict[str, Any] | None = None) -> None:
        self.room = room if room is not None else {"id": "room_abc"}
        self.token = token if token is not None else {"token": "tok_xyz"}
        self.error: ProviderError | None = None
        self.calls: list[tuple] = []

    async def create_room(self) -> dict[str, Any]:
        self.calls.append(("create_room",))
        if self.error:
            raise self.error
        return dict(self.room)

    async def generate_token(self, room_id: str, user_id: str) -> dict[str, Any]:
        self.calls.append(("generate_token", room_id, user_id))
        if self.error:
            raise self.error
        return dict(self.token)


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", hms_api_key="test-key", cors_allow_origins=[])


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def relay_app(settings: Settings, provider: StubProvider):
    app = create_app(settings)
    app.dependency_overrides[get_provider] = lambda: provider
    return app


@pytest_asyncio.fixture
async def client(relay_app):
    await create_schema(relay_app.state.engine)
    transport = ASGITransport(app=relay_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
    await relay_app.state.engine.dispose()


@pytest_asyncio.fixture
async def session(relay_app):
    await create_schema(relay_app.state.engine)
    async with relay_app.state.session_factory() as session:
        yield session
    await relay_app.state.engine.dispose()

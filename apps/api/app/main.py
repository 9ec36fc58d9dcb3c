"""FastAPI application relaying rooms and tokens to 100ms."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .core.config import Settings, get_settings
from .db.session import build_engine, build_sessionmaker, create_schema
from .routers import realtime, rooms
from .services.hms import HmsClient
from .services.notifications import ConnectionRegistry

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and the objects it owns for its lifetime."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.database_create_schema:
            await create_schema(app.state.engine)
        if not settings.hms_api_key:
            logger.warning("100ms API key is not configured; provider calls will fail")
        yield
        await app.state.engine.dispose()

    app = FastAPI(title="Room Relay API", version="0.1.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_sessionmaker(app.state.engine)
    app.state.provider = HmsClient.from_settings(settings)
    app.state.registry = ConnectionRegistry(send_timeout=settings.broadcast_send_timeout_seconds)

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
    app.include_router(realtime.router, tags=["realtime"])

    @app.get("/api/health", tags=["meta"])
    async def health() -> dict[str, str]:
        """Simple liveness probe."""

        return {"status": "ok"}

    @app.head("/api/health", tags=["meta"])
    async def health_head() -> Response:
        """Allow HEAD for uptime monitors that only need the status code."""

        return Response(status_code=200)

    return app


def run() -> None:
    """Serve the module-level application with uvicorn on the configured port."""

    settings = app.state.settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


app = create_app()


if __name__ == "__main__":
    run()

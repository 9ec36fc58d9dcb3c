"""Create the room relay schema against the configured database."""
from __future__ import annotations

import asyncio

from app.core.config import get_settings
from app.db.session import build_engine, create_schema


async def main() -> None:
	settings = get_settings()
	engine = build_engine(settings)
	try:
		await create_schema(engine)
	finally:
		await engine.dispose()
	print(f"Database schema ensured at {engine.url.render_as_string(hide_password=True)}.")


if __name__ == "__main__":
	asyncio.run(main())

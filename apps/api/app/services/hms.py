"""100ms REST client for room creation and token issuance.

Each call performs exactly one outbound request. Nothing is retried or cached;
callers receive the provider's JSON object untouched.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx
from starlette.requests import HTTPConnection

from ..core.config import Settings

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """Raised when the provider is unreachable or answers with a failure."""

    def __init__(self, message: str, *, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": type(self).__name__, "detail": str(self)}
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        if self.body is not None:
            payload["body"] = self.body
        return payload


class HmsClient:
    """Thin wrapper over the two provider endpoints the relay needs."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.100ms.live/v2/",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "HmsClient":
        return cls(
            settings.hms_api_key,
            base_url=settings.hms_base_url,
            timeout=settings.hms_timeout_seconds,
            **kwargs,
        )

    async def create_room(self) -> dict[str, Any]:
        """Create a room and return the provider's room descriptor."""

        room = await self._post("rooms", {})
        if not room.get("id"):
            raise ProviderError("Provider room descriptor has no id", body=room)
        return room

    async def generate_token(self, room_id: str, user_id: str) -> dict[str, Any]:
        """Mint an access token for ``user_id`` scoped to ``room_id``."""

        token = await self._post(f"rooms/{room_id}/tokens", {"user_id": user_id})
        if not token.get("token"):
            raise ProviderError("Provider token descriptor has no token", body=token)
        return token

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise ProviderError("100ms API key missing")

        url = f"{self._base_url}{path}"
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error("Provider call POST %s failed with status %s", path, status_code)
            raise ProviderError(
                f"Provider returned {status_code} for POST {path}",
                status_code=status_code,
                body=_response_body(exc.response),
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Provider call POST %s failed: %s", path, exc)
            raise ProviderError(f"Provider request POST {path} failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(
                f"Provider returned a non-JSON body for POST {path}",
                status_code=response.status_code,
                body=response.text,
            ) from exc
        if not isinstance(data, dict):
            raise ProviderError(f"Provider returned a non-object body for POST {path}", body=data)
        return data


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def get_provider(connection: HTTPConnection) -> HmsClient:
    """FastAPI dependency returning the app-owned provider client."""

    return connection.app.state.provider

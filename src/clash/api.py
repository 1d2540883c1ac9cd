"""REST API client.

Only lobby creation goes over HTTP; everything else uses the lobby
WebSocket.
"""

import json
import logging
from typing import Any
from uuid import UUID

import httpx
from pydantic import BaseModel, ValidationError

from clash.errors import ClashError, ErrorKind
from clash.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class CreateLobbyRequest(BaseModel):
    """Request body for creating a lobby."""

    name: str
    id: UUID


class LobbyId(BaseModel):
    """Response for creating a lobby."""

    id: UUID


def _has_no_body(response: httpx.Response) -> bool:
    """Void responses: 204, an explicit zero length, or nothing at all."""
    if response.status_code == 204:
        return True
    if response.headers.get("Content-Length") == "0":
        return True
    return not response.content


def _decode(response: httpx.Response) -> Any:
    if _has_no_body(response):
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ClashError(ErrorKind.JSON, f"Invalid JSON response: {e}") from e


def _error_from(response: httpx.Response) -> ClashError:
    """Build the error for a failed response.

    The body is only trusted when it is an error payload; anything else
    (an HTML error page, an empty body) reports the HTTP status.
    """
    fallback = ClashError(
        ErrorKind.REQWEST, f"HTTP {response.status_code}: {response.reason_phrase}"
    )
    if _has_no_body(response):
        return fallback
    try:
        return ClashError.from_payload(response.json())
    except ValueError:
        # Not JSON, or not an error payload
        return fallback


class ApiClient:
    """Async client for the server's REST endpoints."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Client settings (cached defaults if None)
            transport: Optional httpx transport, e.g. for an in-process app
        """
        self.settings = settings or get_settings()
        self._client = httpx.AsyncClient(
            base_url=self.settings.api_base,
            headers={"Content-Type": "application/json"},
            timeout=self.settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, endpoint: str, body: Any = None) -> Any:
        """Send a request and decode the JSON response.

        Returns:
            Decoded JSON, or None for void responses

        Raises:
            ClashError: Server error payloads, network failures, invalid JSON
        """
        try:
            response = await self._client.request(method, endpoint, json=body)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {endpoint} failed: {e}")
            raise ClashError(ErrorKind.REQWEST, str(e) or type(e).__name__) from e

        if response.is_error:
            logger.info(f"{method} {endpoint} returned {response.status_code}")
            raise _error_from(response)
        return _decode(response)

    async def create_lobby(self, name: str, player_id: UUID) -> LobbyId | None:
        """Create a lobby hosted by the given player.

        Args:
            name: Host display name
            player_id: Client-generated identifier of the host

        Returns:
            The new lobby's id, or None if the server sent no body
        """
        request = CreateLobbyRequest(name=name, id=player_id)
        data = await self.request("POST", "/lobby", request.model_dump(mode="json"))
        if data is None:
            return None
        try:
            return LobbyId.model_validate(data)
        except ValidationError as e:
            raise ClashError(ErrorKind.JSON, str(e)) from e

"""WebSocket transport for one lobby session.

A thin pass-through: actions go out as JSON text frames, frames come back
as decoded events. No state, no retries.
"""

import logging
from typing import Protocol
from uuid import UUID

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from clash.errors import TransportError
from clash.settings import Settings, get_settings
from clash.ws.protocol import ClientAction, IncomingEvent, decode_event, encode_action

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """The parts of a WebSocket client connection the transport uses."""

    async def send(self, message: str) -> None: ...

    async def recv(self) -> str | bytes: ...

    async def close(self) -> None: ...


def lobby_ws_url(lobby_id: UUID, settings: Settings | None = None) -> str:
    """WebSocket address of a lobby."""
    settings = settings or get_settings()
    return f"{settings.ws_base}/ws/{lobby_id}"


class LobbyTransport:
    """Owns the single WebSocket connection of a lobby session."""

    def __init__(self, connection: Connection, lobby_id: UUID) -> None:
        """Wrap an already open connection.

        Args:
            connection: Open WebSocket connection
            lobby_id: Lobby the connection belongs to
        """
        self.connection = connection
        self.lobby_id = lobby_id
        self._closed = False

    @classmethod
    async def open(cls, lobby_id: UUID, settings: Settings | None = None) -> "LobbyTransport":
        """Connect to a lobby's WebSocket endpoint.

        Raises:
            TransportError: If the connection can't be established
        """
        url = lobby_ws_url(lobby_id, settings)
        logger.info(f"Connecting to lobby {lobby_id}")
        try:
            connection = await connect(url)
        except (OSError, WebSocketException) as e:
            logger.warning(f"Connection to lobby {lobby_id} failed: {e}")
            raise TransportError(f"Could not connect to {url}: {e}") from e
        return cls(connection, lobby_id)

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, action: ClientAction) -> None:
        """Send one client action.

        Raises:
            TransportError: If the connection is closed
        """
        if self._closed:
            raise TransportError("Connection already closed")
        data = encode_action(action)
        try:
            await self.connection.send(data)
        except ConnectionClosed as e:
            self._closed = True
            raise TransportError(f"Connection closed while sending {action.TYPE}") from e
        logger.debug(f"Sent {action.TYPE} to lobby {self.lobby_id}")

    async def receive(self) -> IncomingEvent | None:
        """Wait for the next frame and decode it.

        Returns:
            The decoded event, or None for frames of unknown type

        Raises:
            TransportError: If the connection closes or a frame isn't JSON
        """
        if self._closed:
            raise TransportError("Connection already closed")
        try:
            data = await self.connection.recv()
        except ConnectionClosed as e:
            self._closed = True
            raise TransportError(f"Connection to lobby {self.lobby_id} closed") from e

        try:
            return decode_event(data)
        except ValueError as e:
            logger.warning(f"Malformed frame from lobby {self.lobby_id}: {e}")
            raise TransportError(f"Malformed frame: {e}") from e

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self.connection.close()
        logger.info(f"Disconnected from lobby {self.lobby_id}")

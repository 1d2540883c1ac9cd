"""A player's membership in one lobby.

``LobbySession`` ties the stored credentials, the WebSocket transport and
the lobby replica together:

- ``connect`` opens the socket and authenticates with ``JoinLobby``
- ``next_event`` receives one frame, folds it into ``lobby`` and returns it
- the action helpers check preconditions locally, then send
- ``leave`` and a received kick tear the session down and forget the
  credentials; ``close`` keeps them so the caller can ``resume`` later

Frames are handled one at a time by whichever task awaits ``next_event``.
Nothing here reconnects or retries on its own.
"""

import logging
from uuid import UUID

from clash.errors import ClashError, TransportError
from clash.lobby.engine import LobbyEngine
from clash.lobby.models import ClientLobby, Credentials, LobbySettings
from clash.settings import Settings
from clash.store import CredentialStore
from clash.ws.protocol import (
    AddDeckAction,
    ClientAction,
    CzarPickAction,
    EndGameAction,
    ErrorEvent,
    FetchDecksAction,
    IncomingEvent,
    JoinLobbyAction,
    KickAction,
    KickEvent,
    LeaveLobbyAction,
    RestartRoundAction,
    StartRoundAction,
    SubmitOwnCardsAction,
    TimeoutEvent,
    UpdateSettingsAction,
)
from clash.ws.transport import LobbyTransport

logger = logging.getLogger(__name__)


class LobbySession:
    """One open connection of the local player to a lobby."""

    def __init__(
        self,
        credentials: Credentials,
        transport: LobbyTransport,
        store: CredentialStore | None = None,
    ) -> None:
        """Initialize the session over an open transport.

        Args:
            credentials: The local player's credentials
            transport: Open transport for ``credentials.lobby_id``
            store: Where credentials are kept for resuming (optional)
        """
        self.credentials = credentials
        self.transport = transport
        self.store = store
        self.lobby = ClientLobby.empty()

    @classmethod
    async def connect(
        cls,
        credentials: Credentials,
        store: CredentialStore | None = None,
        settings: Settings | None = None,
    ) -> "LobbySession":
        """Open the lobby WebSocket and join with ``credentials``."""
        transport = await LobbyTransport.open(credentials.lobby_id, settings)
        session = cls(credentials, transport, store)
        await session.join()
        return session

    @classmethod
    async def resume(
        cls, store: CredentialStore, settings: Settings | None = None
    ) -> "LobbySession | None":
        """Rejoin with previously stored credentials, if there are any."""
        credentials = store.load()
        if credentials is None:
            return None
        logger.info(f"Resuming session in lobby {credentials.lobby_id}")
        return await cls.connect(credentials, store, settings)

    @property
    def player_id(self) -> UUID:
        return self.credentials.player_id

    @property
    def closed(self) -> bool:
        return self.transport.closed

    async def join(self) -> None:
        """Authenticate on the connection. Must be the first frame sent."""
        await self.transport.send(JoinLobbyAction(credentials=self.credentials))
        if self.store is not None:
            self.store.save(self.credentials)
        logger.info(f"Player {self.player_id} joining lobby {self.credentials.lobby_id}")

    async def send(self, action: ClientAction) -> None:
        """Send an action if the replica says it can be accepted.

        Raises:
            ClashError: With the kind the server would reject the action with
            TransportError: If the connection is gone
        """
        error = LobbyEngine.validate_action(self.lobby, self.player_id, action)
        if error is not None:
            logger.info(f"Not sending {action.TYPE}: {error.value}")
            raise ClashError(error)
        await self.transport.send(action)
        self.lobby = LobbyEngine.record_action(self.lobby, action)

    async def next_event(self) -> IncomingEvent:
        """Receive, apply and return the next server event.

        ``Timeout`` is returned like any other event; deciding what to do
        about it is up to the caller. A ``Kick`` is returned after the
        session has been torn down.

        Raises:
            ClashError: When the server reports an error for this player
            TransportError: When the connection fails or is closed
        """
        while True:
            try:
                event = await self.transport.receive()
            except TransportError:
                self.lobby = ClientLobby.empty()
                raise

            if event is None:
                continue

            self.lobby = LobbyEngine.apply(self.lobby, event)
            logger.debug(
                f"Applied {event.TYPE} in lobby {self.credentials.lobby_id} "
                f"(phase={self.lobby.phase.value}, round={self.lobby.round})"
            )

            if isinstance(event, ErrorEvent):
                logger.info(f"Server rejected an action: {event.error.raw_kind}")
                raise event.error
            if isinstance(event, KickEvent):
                logger.info(f"Player {self.player_id} was kicked from the lobby")
                await self._teardown()
            elif isinstance(event, TimeoutEvent):
                logger.info(f"Player {self.player_id} timed out")
            return event

    async def leave(self) -> None:
        """Leave the lobby and forget the credentials."""
        try:
            if not self.closed:
                await self.transport.send(LeaveLobbyAction())
        finally:
            logger.info(f"Player {self.player_id} left lobby {self.credentials.lobby_id}")
            await self._teardown()

    async def close(self) -> None:
        """Close the connection but keep the credentials for ``resume``."""
        self.lobby = ClientLobby.empty()
        await self.transport.close()

    async def _teardown(self) -> None:
        await self.close()
        if self.store is not None:
            self.store.clear()

    # Action helpers

    async def update_settings(self, settings: LobbySettings) -> None:
        await self.send(UpdateSettingsAction(settings=settings))

    async def add_deck(self, deckcode: str) -> None:
        await self.send(AddDeckAction(deckcode=deckcode))

    async def fetch_decks(self) -> None:
        await self.send(FetchDecksAction())

    async def kick(self, player_id: UUID) -> None:
        await self.send(KickAction(kicked=player_id))

    async def end_game(self) -> None:
        await self.send(EndGameAction())

    async def start_round(self) -> None:
        await self.send(StartRoundAction())

    async def restart_round(self) -> None:
        await self.send(RestartRoundAction())

    async def submit_cards(self, indexes: list[int]) -> None:
        """Submit cards from the own hand by index."""
        await self.send(SubmitOwnCardsAction(indexes=indexes))

    async def czar_pick(self, index: int) -> None:
        """Pick the winning group of revealed cards (czar only)."""
        await self.send(CzarPickAction(index=index))

"""WebSocket protocol message types.

Every frame is a JSON object ``{"type": <name>, "data": <payload>}``;
``data`` is omitted for messages without fields. Each message is its own
pydantic model, so the set of messages is closed and callers can dispatch
on the model class.
"""

import json
import logging
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID

from pydantic import BaseModel, ValidationError

from clash.errors import ClashError
from clash.lobby.models import (
    BlackCard,
    ClientLobby,
    Credentials,
    DeckInfo,
    LobbySettings,
    PlayerInfo,
    WhiteCard,
)

logger = logging.getLogger(__name__)


class ClientEventType(Enum):
    """Types of messages sent from client to server."""

    JOIN_LOBBY = "JoinLobby"
    LEAVE_LOBBY = "LeaveLobby"
    UPDATE_SETTINGS = "UpdateSettings"
    ADD_DECK = "AddDeck"
    FETCH_DECKS = "FetchDecks"
    KICK = "Kick"
    END_GAME = "EndGame"
    START_ROUND = "StartRound"
    RESTART_ROUND = "RestartRound"
    SUBMIT_OWN_CARDS = "SubmitOwnCards"
    CZAR_PICK = "CzarPick"


class ServerEventType(Enum):
    """Types of messages broadcast by the server to every lobby member."""

    PLAYER_JOIN = "PlayerJoin"
    PLAYER_REMOVE = "PlayerRemove"
    ASSIGN_HOST = "AssignHost"
    START_ROUND = "StartRound"
    CARDS_SUBMITTED = "CardsSubmitted"
    UPDATE_DECKS = "UpdateDecks"
    UPDATE_SETTINGS = "UpdateSettings"
    REVEAL_CARDS = "RevealCards"
    ROUND_SKIP = "RoundSkip"
    ROUND_RESULT = "RoundResult"
    GAME_OVER = "GameOver"
    LOBBY_RESET = "LobbyReset"


class PrivateEventType(Enum):
    """Types of messages the server sends to a single player."""

    CLIENT_LOBBY = "ClientLobby"
    UPDATE_HAND = "UpdateHand"
    TIMEOUT = "Timeout"
    KICK = "Kick"
    ERROR = "Error"


class Message(BaseModel):
    """Base for all protocol messages; ``TYPE`` is the wire tag."""

    TYPE: ClassVar[str]

    def to_envelope(self) -> dict[str, Any]:
        """Build the ``{type, data?}`` envelope for this message."""
        data = self.model_dump(mode="json")
        if not data:
            return {"type": self.TYPE}
        return {"type": self.TYPE, "data": data}

    @classmethod
    def from_data(cls, data: Any) -> "Message":
        """Build the message from the envelope's ``data`` member."""
        return cls.model_validate(data if data is not None else {})


# Client -> Server Messages


class JoinLobbyAction(Message):
    """First frame on a new connection, authenticates the player."""

    TYPE: ClassVar[str] = ClientEventType.JOIN_LOBBY.value
    credentials: Credentials

    def to_envelope(self) -> dict[str, Any]:
        return {"type": self.TYPE, "data": {"credentials": self.credentials.to_wire()}}


class LeaveLobbyAction(Message):
    """Leave the lobby for good."""

    TYPE: ClassVar[str] = ClientEventType.LEAVE_LOBBY.value


class UpdateSettingsAction(Message):
    """Replace the lobby settings (host only, lobby open)."""

    TYPE: ClassVar[str] = ClientEventType.UPDATE_SETTINGS.value
    settings: LobbySettings


class AddDeckAction(Message):
    """Fetch a deck by code and add it to the lobby (host only)."""

    TYPE: ClassVar[str] = ClientEventType.ADD_DECK.value
    deckcode: str


class FetchDecksAction(Message):
    """Refresh the cached deck list (host only)."""

    TYPE: ClassVar[str] = ClientEventType.FETCH_DECKS.value


class KickAction(Message):
    """Remove another player (host only)."""

    TYPE: ClassVar[str] = ClientEventType.KICK.value
    kicked: UUID


class EndGameAction(Message):
    """End the running game (host only)."""

    TYPE: ClassVar[str] = ClientEventType.END_GAME.value


class StartRoundAction(Message):
    """Start the game or the next round (host only)."""

    TYPE: ClassVar[str] = ClientEventType.START_ROUND.value


class RestartRoundAction(Message):
    """Reset a finished game back to the open lobby (host only)."""

    TYPE: ClassVar[str] = ClientEventType.RESTART_ROUND.value


class SubmitOwnCardsAction(Message):
    """Submit cards from the own hand, by index."""

    TYPE: ClassVar[str] = ClientEventType.SUBMIT_OWN_CARDS.value
    indexes: list[int]


class CzarPickAction(Message):
    """Czar picks the winning group from the revealed cards."""

    TYPE: ClassVar[str] = ClientEventType.CZAR_PICK.value
    index: int


ClientAction = (
    JoinLobbyAction
    | LeaveLobbyAction
    | UpdateSettingsAction
    | AddDeckAction
    | FetchDecksAction
    | KickAction
    | EndGameAction
    | StartRoundAction
    | RestartRoundAction
    | SubmitOwnCardsAction
    | CzarPickAction
)


# Server -> Client broadcast messages


class PlayerJoinEvent(Message):
    """A player joined the lobby."""

    TYPE: ClassVar[str] = ServerEventType.PLAYER_JOIN.value
    player_id: UUID
    player_info: PlayerInfo


class PlayerRemoveEvent(Message):
    """A player left, was kicked, or timed out."""

    TYPE: ClassVar[str] = ServerEventType.PLAYER_REMOVE.value
    player_id: UUID


class AssignHostEvent(Message):
    """The host left; this player is the new host."""

    TYPE: ClassVar[str] = ServerEventType.ASSIGN_HOST.value
    player_id: UUID


class StartRoundEvent(Message):
    """A round started with a new czar and black card."""

    TYPE: ClassVar[str] = ServerEventType.START_ROUND.value
    czar_id: UUID
    black_card: BlackCard


class CardsSubmittedEvent(Message):
    """A player submitted their cards (contents stay hidden)."""

    TYPE: ClassVar[str] = ServerEventType.CARDS_SUBMITTED.value
    player_id: UUID


class UpdateDecksEvent(Message):
    """The deck list changed."""

    TYPE: ClassVar[str] = ServerEventType.UPDATE_DECKS.value
    decks: list[DeckInfo]


class UpdateSettingsEvent(Message):
    """The host changed the settings."""

    TYPE: ClassVar[str] = ServerEventType.UPDATE_SETTINGS.value
    settings: LobbySettings


class RevealCardsEvent(Message):
    """All submissions, shuffled so they can't be traced to submitters."""

    TYPE: ClassVar[str] = ServerEventType.REVEAL_CARDS.value
    selected_cards: list[list[WhiteCard]]


class RoundSkipEvent(Message):
    """The round ended without a winner."""

    TYPE: ClassVar[str] = ServerEventType.ROUND_SKIP.value


class RoundResultEvent(Message):
    """The czar picked a winner."""

    TYPE: ClassVar[str] = ServerEventType.ROUND_RESULT.value
    player_id: UUID
    winning_card_index: int


class GameOverEvent(Message):
    """The game ended."""

    TYPE: ClassVar[str] = ServerEventType.GAME_OVER.value


class LobbyResetEvent(Message):
    """The lobby went back to the waiting room."""

    TYPE: ClassVar[str] = ServerEventType.LOBBY_RESET.value


# Server -> Client private messages


class ClientLobbyEvent(Message):
    """Full snapshot of the lobby as seen by the recipient."""

    TYPE: ClassVar[str] = PrivateEventType.CLIENT_LOBBY.value
    lobby: ClientLobby

    def to_envelope(self) -> dict[str, Any]:
        return {"type": self.TYPE, "data": self.lobby.model_dump(mode="json")}

    @classmethod
    def from_data(cls, data: Any) -> "ClientLobbyEvent":
        return cls(lobby=ClientLobby.model_validate(data))


class UpdateHandEvent(Message):
    """The recipient's complete new hand."""

    TYPE: ClassVar[str] = PrivateEventType.UPDATE_HAND.value
    cards: list[WhiteCard]


class TimeoutEvent(Message):
    """The recipient was disconnected for too long."""

    TYPE: ClassVar[str] = PrivateEventType.TIMEOUT.value


class KickEvent(Message):
    """The recipient was removed from the lobby."""

    TYPE: ClassVar[str] = PrivateEventType.KICK.value


class ErrorEvent(Message):
    """An action of the recipient failed."""

    TYPE: ClassVar[str] = PrivateEventType.ERROR.value
    error: ClashError

    model_config = {"arbitrary_types_allowed": True}

    def to_envelope(self) -> dict[str, Any]:
        return {"type": self.TYPE, "data": self.error.to_payload()}

    @classmethod
    def from_data(cls, data: Any) -> "ErrorEvent":
        return cls(error=ClashError.from_payload(data))


BroadcastEvent = (
    PlayerJoinEvent
    | PlayerRemoveEvent
    | AssignHostEvent
    | StartRoundEvent
    | CardsSubmittedEvent
    | UpdateDecksEvent
    | UpdateSettingsEvent
    | RevealCardsEvent
    | RoundSkipEvent
    | RoundResultEvent
    | GameOverEvent
    | LobbyResetEvent
)

PrivateEvent = ClientLobbyEvent | UpdateHandEvent | TimeoutEvent | KickEvent | ErrorEvent

IncomingEvent = BroadcastEvent | PrivateEvent

# Broadcast and private tags are disjoint, "Kick" only ever arrives as private
SERVER_EVENTS: dict[str, type[Message]] = {
    cls.TYPE: cls
    for cls in (
        PlayerJoinEvent,
        PlayerRemoveEvent,
        AssignHostEvent,
        StartRoundEvent,
        CardsSubmittedEvent,
        UpdateDecksEvent,
        UpdateSettingsEvent,
        RevealCardsEvent,
        RoundSkipEvent,
        RoundResultEvent,
        GameOverEvent,
        LobbyResetEvent,
        ClientLobbyEvent,
        UpdateHandEvent,
        TimeoutEvent,
        KickEvent,
        ErrorEvent,
    )
}

CLIENT_ACTIONS: dict[str, type[Message]] = {
    cls.TYPE: cls
    for cls in (
        JoinLobbyAction,
        LeaveLobbyAction,
        UpdateSettingsAction,
        AddDeckAction,
        FetchDecksAction,
        KickAction,
        EndGameAction,
        StartRoundAction,
        RestartRoundAction,
        SubmitOwnCardsAction,
        CzarPickAction,
    )
}


def encode_action(action: ClientAction) -> str:
    """Serialize a client action to a JSON text frame."""
    return json.dumps(action.to_envelope())


def parse_server_event(data: dict[str, Any]) -> IncomingEvent | None:
    """Parse a server message from JSON data.

    Args:
        data: Parsed JSON envelope

    Returns:
        Parsed event, or None if the type is unknown or the payload invalid
    """
    msg_type = data.get("type")
    event_cls = SERVER_EVENTS.get(msg_type) if isinstance(msg_type, str) else None
    if event_cls is None:
        logger.debug(f"Ignoring unknown server message type: {msg_type!r}")
        return None

    try:
        return event_cls.from_data(data.get("data"))  # type: ignore[return-value]
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning(f"Dropping malformed {msg_type} message: {e}")
        return None


def decode_event(text: str | bytes) -> IncomingEvent | None:
    """Decode a text frame into an event.

    Raises:
        ValueError: If the frame is not a JSON object
    """
    msg_data = json.loads(text)
    if not isinstance(msg_data, dict):
        raise ValueError(f"Expected a JSON object, got {type(msg_data).__name__}")
    return parse_server_event(msg_data)

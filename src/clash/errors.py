"""Error taxonomy shared by the server protocol and the client.

Every failure the client reports is a ``ClashError`` carrying one
``ErrorKind``. Kinds in ``PAYLOAD_KINDS`` carry a free-text ``value``.
"""

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Closed set of error kinds."""

    LOBBY_LOGIN = "LobbyLogin"  # Malformed data during the login sequence
    LOBBY_CLOSED = "LobbyClosed"  # A game is going on, joining is not possible
    LOBBY_FULL = "LobbyFull"  # max_players reached
    LOBBY_START = "LobbyStart"  # Start criteria not met (players, decks, phase)
    LOBBY_NOT_FOUND = "LobbyNotFound"
    CARD_SUBMISSION = "CardSubmission"  # Submission rejected (phase, count, indexes)
    CZAR_CHOICE = "CzarChoice"  # Czar pick rejected
    UNAUTHORIZED = "Unauthorized"  # Action not allowed for this player
    DECK = "Deck"
    REQWEST = "Reqwest"  # Upstream or network request failure
    WEBSOCKET = "WebSocket"  # Local transport failure
    FILE_SYSTEM = "FileSystem"
    JSON = "Json"
    UNKNOWN = "Unknown"  # Sent by a newer server, see ClashError.raw_kind

    @classmethod
    def _missing_(cls, value: object) -> "ErrorKind | None":
        # Older servers spell it "Websocket"
        if isinstance(value, str) and value.lower() == "websocket":
            return cls.WEBSOCKET
        return None

    @property
    def has_payload(self) -> bool:
        """Return True if errors of this kind carry a text value."""
        return self in PAYLOAD_KINDS


PAYLOAD_KINDS = frozenset(
    {
        ErrorKind.DECK,
        ErrorKind.REQWEST,
        ErrorKind.WEBSOCKET,
        ErrorKind.FILE_SYSTEM,
        ErrorKind.JSON,
    }
)


class ClashError(Exception):
    """An error with a kind from the closed taxonomy.

    Errors of a kind this client doesn't know use ``ErrorKind.UNKNOWN`` and
    keep the name the server sent in ``raw_kind``.
    """

    def __init__(
        self, kind: ErrorKind, value: str | None = None, raw_kind: str | None = None
    ) -> None:
        self.kind = kind
        self.value = value
        self.raw_kind = raw_kind or kind.value
        super().__init__(f"{self.raw_kind}: {value}" if value else self.raw_kind)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClashError):
            return NotImplemented
        return (self.kind, self.value, self.raw_kind) == (
            other.kind,
            other.value,
            other.raw_kind,
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.raw_kind))

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the wire shape ``{"kind": ..., "value": ...}``."""
        if self.kind.has_payload:
            return {"kind": self.raw_kind, "value": self.value or ""}
        if self.kind is ErrorKind.UNKNOWN and self.value is not None:
            return {"kind": self.raw_kind, "value": self.value}
        return {"kind": self.raw_kind}

    @classmethod
    def from_payload(cls, data: Any) -> "ClashError":
        """Build an error from its wire shape.

        A kind name this client doesn't recognize still yields an error, of
        kind ``UNKNOWN``.

        Raises:
            ValueError: If the payload is not an object with a string kind
        """
        if not isinstance(data, dict):
            raise ValueError(f"Error payload must be an object, got {type(data).__name__}")
        kind_name = data.get("kind")
        if not isinstance(kind_name, str):
            raise ValueError(f"Error payload has no kind: {data!r}")

        value = data.get("value")
        try:
            kind = ErrorKind(kind_name)
        except ValueError:
            return cls(ErrorKind.UNKNOWN, None if value is None else str(value), kind_name)

        if kind.has_payload:
            return cls(kind, "" if value is None else str(value))
        if kind is ErrorKind.UNKNOWN:
            return cls(kind, None if value is None else str(value))
        return cls(kind)


class TransportError(ClashError):
    """Local WebSocket failure (closed socket, malformed frame).

    Kept apart from server-delivered ``Error`` envelopes so callers can tell
    a broken connection from a rejected action.
    """

    def __init__(self, value: str) -> None:
        super().__init__(ErrorKind.WEBSOCKET, value)

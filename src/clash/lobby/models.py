"""Lobby data model as replicated on the client."""

from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class GamePhase(Enum):
    """Discrete phases of a lobby."""

    LOBBY_OPEN = "LobbyOpen"  # Waiting room, settings editable
    SUBMITTING = "Submitting"  # Players pick white cards
    JUDGING = "Judging"  # Czar picks a winner
    ROUND_FINISHED = "RoundFinished"  # Result shown, next round pending
    GAME_OVER = "GameOver"  # Terminal until a reset


class WhiteCard(BaseModel):
    """A play card."""

    text: str


class BlackCard(BaseModel):
    """A prompt card with ``fields`` blanks to fill."""

    text: str
    fields: int = Field(ge=0)


class DeckMeta(BaseModel):
    """Metadata of a cached deck."""

    name: str
    deckcode: str
    language: str = ""
    nsfw: bool = False
    blacks_count: int = 0
    whites_count: int = 0
    fetched_at: int = 0  # Unix seconds


class DeckInfo(BaseModel):
    """A deck reference and whether it is enabled for this lobby."""

    meta: DeckMeta
    enabled: bool = False


class Scaling(BaseModel):
    """A time budget that is either constant or scales with player count."""

    type: Literal["Player", "Constant"]
    seconds: int = Field(ge=0)

    def budget(self, player_count: int) -> int:
        """Return the effective number of seconds for ``player_count`` submitters."""
        if self.type == "Player":
            return self.seconds * max(player_count, 0)
        return self.seconds


class LobbySettings(BaseModel):
    """Lobby configuration, host-editable while the lobby is open.

    ``None`` caps mean unbounded.
    """

    max_rounds: int | None = 10
    max_points: int | None = None
    max_submitting_time_secs: Scaling | None = Field(
        default_factory=lambda: Scaling(type="Constant", seconds=90)
    )
    max_judging_time_secs: int | None = 30
    wait_time_secs: int | None = 5
    max_players: int = 20
    decks: list[DeckInfo] = Field(default_factory=list)

    @property
    def enabled_decks(self) -> list[DeckInfo]:
        """Decks currently enabled."""
        return [d for d in self.decks if d.enabled]


class PlayerInfo(BaseModel):
    """Public information about one player."""

    name: str
    is_host: bool = False
    is_czar: bool = False
    points: int = Field(default=0, ge=0)


class Credentials(BaseModel):
    """Identity of the local player in one lobby.

    ``secret`` proves ownership of ``player_id``. It only leaves the client
    when joining.
    """

    display_name: str
    lobby_id: UUID
    player_id: UUID
    secret: UUID

    def to_wire(self) -> dict[str, str]:
        """Authentication shape sent with ``JoinLobby``."""
        return {
            "name": self.display_name,
            "id": str(self.player_id),
            "secret": str(self.secret),
        }


# Optional fields of ClientLobby and the phases in which they exist
PHASE_FIELDS: dict[str, frozenset[GamePhase]] = {
    "hand": frozenset(
        {
            GamePhase.SUBMITTING,
            GamePhase.JUDGING,
            GamePhase.ROUND_FINISHED,
            GamePhase.GAME_OVER,
        }
    ),
    "black_card": frozenset(
        {
            GamePhase.SUBMITTING,
            GamePhase.JUDGING,
            GamePhase.ROUND_FINISHED,
            GamePhase.GAME_OVER,
        }
    ),
    "submitted_players": frozenset({GamePhase.SUBMITTING}),
    "selected_cards": frozenset(
        {GamePhase.SUBMITTING, GamePhase.JUDGING, GamePhase.ROUND_FINISHED}
    ),
    "revealed_cards": frozenset(
        {GamePhase.JUDGING, GamePhase.ROUND_FINISHED, GamePhase.GAME_OVER}
    ),
    "czar_pick": frozenset({GamePhase.ROUND_FINISHED, GamePhase.GAME_OVER}),
    "winner": frozenset({GamePhase.ROUND_FINISHED, GamePhase.GAME_OVER}),
}

CZAR_PHASES = frozenset({GamePhase.SUBMITTING, GamePhase.JUDGING})


class ClientLobby(BaseModel):
    """The client's replica of one lobby.

    The optional fields are phase-scoped, see ``PHASE_FIELDS``.
    """

    players: dict[UUID, PlayerInfo] = Field(default_factory=dict)
    settings: LobbySettings = Field(default_factory=LobbySettings)
    phase: GamePhase = GamePhase.LOBBY_OPEN
    round: int = Field(default=0, ge=0)
    hand: list[WhiteCard] | None = None
    revealed_cards: list[list[WhiteCard]] | None = None
    submitted_players: list[UUID] | None = None
    selected_cards: list[int] | None = None
    czar_pick: int | None = None
    winner: UUID | None = None
    black_card: BlackCard | None = None

    @classmethod
    def empty(cls) -> "ClientLobby":
        """Replica before the first snapshot arrives."""
        return cls()

    def copy_lobby(self) -> "ClientLobby":
        """Create a deep copy of the replica."""
        return self.model_copy(deep=True)

    @property
    def host_id(self) -> UUID | None:
        """Identifier of the host, if known."""
        for player_id, info in self.players.items():
            if info.is_host:
                return player_id
        return None

    @property
    def czar_id(self) -> UUID | None:
        """Identifier of the current czar, if any."""
        for player_id, info in self.players.items():
            if info.is_czar:
                return player_id
        return None

    def is_host(self, player_id: UUID) -> bool:
        info = self.players.get(player_id)
        return info is not None and info.is_host

    def is_czar(self, player_id: UUID) -> bool:
        info = self.players.get(player_id)
        return info is not None and info.is_czar

    def has_submitted(self, player_id: UUID) -> bool:
        return player_id in (self.submitted_players or [])

    @property
    def submitter_count(self) -> int:
        """Number of players expected to submit this round (everyone but the czar)."""
        czars = sum(1 for info in self.players.values() if info.is_czar)
        return len(self.players) - czars

    @property
    def all_submitted(self) -> bool:
        """True once every non-czar player has submitted."""
        if self.phase != GamePhase.SUBMITTING:
            return False
        return len(self.submitted_players or []) >= self.submitter_count

"""Lobby data model and presentation helpers.

The state machine lives in ``clash.lobby.engine``; it depends on the wire
protocol and is imported from there directly.
"""

from clash.lobby.models import (
    BlackCard,
    ClientLobby,
    Credentials,
    DeckInfo,
    DeckMeta,
    GamePhase,
    LobbySettings,
    PlayerInfo,
    Scaling,
    WhiteCard,
)
from clash.lobby.roster import all_unique, sorted_roster

__all__ = [
    # Models
    "BlackCard",
    "ClientLobby",
    "Credentials",
    "DeckInfo",
    "DeckMeta",
    "GamePhase",
    "LobbySettings",
    "PlayerInfo",
    "Scaling",
    "WhiteCard",
    # Roster
    "all_unique",
    "sorted_roster",
]

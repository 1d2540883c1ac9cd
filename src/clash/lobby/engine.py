"""Client-side lobby state machine.

The server is authoritative. The client folds the server's events into a
``ClientLobby`` replica, one event at a time in arrival order, and checks
its own actions against the replica before sending them.

Phase flow::

    LobbyOpen -> Submitting -> Judging -> RoundFinished -> Submitting | GameOver
    GameOver -> LobbyOpen (reset)

``LobbyEngine.apply`` never mutates its input: it works on a copy and
returns it. Events that make no sense in the current phase are ignored
rather than rejected so newer servers can add events without breaking older
clients.
"""

import logging
from uuid import UUID

from clash.errors import ErrorKind
from clash.lobby.models import (
    CZAR_PHASES,
    PHASE_FIELDS,
    ClientLobby,
    GamePhase,
)
from clash.lobby.roster import all_unique
from clash.ws.protocol import (
    AddDeckAction,
    AssignHostEvent,
    CardsSubmittedEvent,
    ClientAction,
    ClientLobbyEvent,
    CzarPickAction,
    EndGameAction,
    ErrorEvent,
    FetchDecksAction,
    GameOverEvent,
    IncomingEvent,
    JoinLobbyAction,
    KickAction,
    KickEvent,
    LeaveLobbyAction,
    LobbyResetEvent,
    PlayerJoinEvent,
    PlayerRemoveEvent,
    RestartRoundAction,
    RevealCardsEvent,
    RoundResultEvent,
    RoundSkipEvent,
    StartRoundAction,
    StartRoundEvent,
    SubmitOwnCardsAction,
    TimeoutEvent,
    UpdateDecksEvent,
    UpdateHandEvent,
    UpdateSettingsAction,
    UpdateSettingsEvent,
)

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2


class LobbyEngine:
    """Reducer and action checks for the lobby replica.

    All methods are static. ``apply`` returns a new replica; the other
    methods only read.
    """

    @staticmethod
    def apply(lobby: ClientLobby, event: IncomingEvent) -> ClientLobby:
        """Fold one server event into the replica.

        Args:
            lobby: Current replica (not modified)
            event: Decoded server event

        Returns:
            The next replica
        """
        # Lifecycle events always apply
        if isinstance(event, ClientLobbyEvent):
            return event.lobby.copy_lobby()
        if isinstance(event, KickEvent):
            return ClientLobby.empty()

        # Informational, nothing to fold
        if isinstance(event, TimeoutEvent | ErrorEvent):
            return lobby

        state = lobby.copy_lobby()

        if isinstance(event, PlayerJoinEvent):
            state.players[event.player_id] = event.player_info.model_copy()

        elif isinstance(event, PlayerRemoveEvent):
            state.players.pop(event.player_id, None)
            if state.submitted_players is not None:
                state.submitted_players = [
                    p for p in state.submitted_players if p != event.player_id
                ]

        elif isinstance(event, AssignHostEvent):
            if event.player_id not in state.players:
                return lobby
            for player_id, info in state.players.items():
                info.is_host = player_id == event.player_id

        elif isinstance(event, UpdateDecksEvent):
            state.settings.decks = [d.model_copy(deep=True) for d in event.decks]

        elif isinstance(event, UpdateSettingsEvent):
            state.settings = event.settings.model_copy(deep=True)

        elif isinstance(event, UpdateHandEvent):
            # The first hand is dealt while the lobby is still open
            state.hand = [c.model_copy() for c in event.cards]

        elif isinstance(event, StartRoundEvent):
            if state.phase == GamePhase.GAME_OVER:
                return lobby
            LobbyEngine._start_round(state, event)

        elif isinstance(event, CardsSubmittedEvent):
            if state.phase != GamePhase.SUBMITTING:
                return lobby
            submitted = state.submitted_players or []
            if event.player_id not in submitted:
                submitted.append(event.player_id)
            state.submitted_players = submitted

        elif isinstance(event, RevealCardsEvent):
            if state.phase != GamePhase.SUBMITTING:
                return lobby
            LobbyEngine._enter_phase(state, GamePhase.JUDGING)
            state.revealed_cards = [
                [c.model_copy() for c in group] for group in event.selected_cards
            ]

        elif isinstance(event, RoundSkipEvent):
            if state.phase not in CZAR_PHASES:
                return lobby
            LobbyEngine._enter_phase(state, GamePhase.ROUND_FINISHED)
            state.winner = None
            state.czar_pick = None

        elif isinstance(event, RoundResultEvent):
            if state.phase != GamePhase.JUDGING:
                return lobby
            LobbyEngine._enter_phase(state, GamePhase.ROUND_FINISHED)
            state.winner = event.player_id
            state.czar_pick = event.winning_card_index
            winner = state.players.get(event.player_id)
            if winner is not None:
                winner.points += 1

        elif isinstance(event, GameOverEvent):
            if state.phase in (GamePhase.LOBBY_OPEN, GamePhase.GAME_OVER):
                return lobby
            # winner and czar_pick stay those of the last finished round, if any
            LobbyEngine._enter_phase(state, GamePhase.GAME_OVER)

        elif isinstance(event, LobbyResetEvent):
            LobbyEngine._reset(state)

        else:
            logger.debug(f"No reducer for {type(event).__name__}, ignoring")
            return lobby

        return state

    @staticmethod
    def _enter_phase(state: ClientLobby, phase: GamePhase) -> None:
        """Switch phase and drop every field that doesn't exist in it."""
        state.phase = phase
        for field_name, phases in PHASE_FIELDS.items():
            if phase not in phases:
                setattr(state, field_name, None)
        if phase not in CZAR_PHASES:
            for info in state.players.values():
                info.is_czar = False

    @staticmethod
    def _start_round(state: ClientLobby, event: StartRoundEvent) -> None:
        # Round-scoped results go away before the new round begins
        state.revealed_cards = None
        state.selected_cards = None
        state.czar_pick = None
        state.winner = None

        LobbyEngine._enter_phase(state, GamePhase.SUBMITTING)
        state.round += 1
        state.black_card = event.black_card.model_copy()
        state.submitted_players = []
        for player_id, info in state.players.items():
            info.is_czar = player_id == event.czar_id

    @staticmethod
    def _reset(state: ClientLobby) -> None:
        LobbyEngine._enter_phase(state, GamePhase.LOBBY_OPEN)
        state.round = 0
        for info in state.players.values():
            info.points = 0

    @staticmethod
    def validate_action(
        lobby: ClientLobby, player_id: UUID, action: ClientAction
    ) -> ErrorKind | None:
        """Check an outgoing action against the replica.

        The server has the final say; this only avoids sending actions that
        are certain to be rejected. Submissions are checked a little more
        strictly than the server does: repeating a hand index is refused.

        Args:
            lobby: Current replica
            player_id: The local player
            action: Action about to be sent

        Returns:
            The error kind the server would answer with, or None if plausible
        """
        is_host = lobby.is_host(player_id)
        phase = lobby.phase

        if isinstance(action, JoinLobbyAction | LeaveLobbyAction):
            return None

        if isinstance(action, UpdateSettingsAction | AddDeckAction | FetchDecksAction):
            if not is_host or phase != GamePhase.LOBBY_OPEN:
                return ErrorKind.UNAUTHORIZED
            return None

        if isinstance(action, KickAction):
            if not is_host or action.kicked == player_id:
                return ErrorKind.UNAUTHORIZED
            return None

        if isinstance(action, EndGameAction):
            return None if is_host else ErrorKind.UNAUTHORIZED

        if isinstance(action, StartRoundAction):
            if not is_host:
                return ErrorKind.UNAUTHORIZED
            if phase not in (GamePhase.LOBBY_OPEN, GamePhase.ROUND_FINISHED):
                return ErrorKind.LOBBY_START
            if len(lobby.players) < MIN_PLAYERS:
                return ErrorKind.LOBBY_START
            if phase == GamePhase.LOBBY_OPEN and not lobby.settings.enabled_decks:
                return ErrorKind.LOBBY_START
            return None

        if isinstance(action, RestartRoundAction):
            if not is_host or phase != GamePhase.GAME_OVER:
                return ErrorKind.UNAUTHORIZED
            return None

        if isinstance(action, SubmitOwnCardsAction):
            return LobbyEngine._check_submission(lobby, player_id, action.indexes)

        if isinstance(action, CzarPickAction):
            if (
                phase != GamePhase.JUDGING
                or not lobby.is_czar(player_id)
                or lobby.czar_pick is not None
                or not 0 <= action.index < len(lobby.revealed_cards or [])
            ):
                return ErrorKind.CZAR_CHOICE
            return None

        return None

    @staticmethod
    def _check_submission(
        lobby: ClientLobby, player_id: UUID, indexes: list[int]
    ) -> ErrorKind | None:
        if lobby.phase != GamePhase.SUBMITTING:
            return ErrorKind.CARD_SUBMISSION
        if lobby.is_czar(player_id) or lobby.has_submitted(player_id):
            return ErrorKind.CARD_SUBMISSION
        if lobby.black_card is None or len(indexes) != lobby.black_card.fields:
            return ErrorKind.CARD_SUBMISSION
        hand_size = len(lobby.hand or [])
        if not all(0 <= i < hand_size for i in indexes) or not all_unique(indexes):
            return ErrorKind.CARD_SUBMISSION
        return None

    @staticmethod
    def record_action(lobby: ClientLobby, action: ClientAction) -> ClientLobby:
        """Note the local player's own action in the replica.

        Only the own card selection is kept. Whether anything was accepted
        is learned from later server events.
        """
        if isinstance(action, SubmitOwnCardsAction) and lobby.phase == GamePhase.SUBMITTING:
            state = lobby.copy_lobby()
            state.selected_cards = list(action.indexes)
            return state
        return lobby

"""User-facing translation of client errors.

This module performs no recovery. It turns a ``ClashError`` into a
``Toast`` and hands it to whatever sink the UI provides, then re-raises.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import NoReturn, Protocol, TypeVar

from pydantic import BaseModel

from clash.errors import ClashError, ErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Toast(BaseModel):
    """A notification shown to the user."""

    title: str
    description: str


class ToastSink(Protocol):
    """Anything that can present an error toast."""

    def error(self, toast: Toast) -> None: ...


_MESSAGES: dict[ErrorKind, Toast] = {
    ErrorKind.LOBBY_LOGIN: Toast(
        title="Login Failed",
        description="The lobby couldn't verify who you are. Try joining again.",
    ),
    ErrorKind.LOBBY_CLOSED: Toast(
        title="Lobby Is Closed",
        description="The lobby you're trying to join is closed. A game is currently going on.",
    ),
    ErrorKind.LOBBY_FULL: Toast(
        title="Lobby Already Full",
        description="The lobby you're trying to join is already full.",
    ),
    ErrorKind.LOBBY_START: Toast(
        title="Game Can't Start",
        description="The game needs at least two players and an enabled deck with both card kinds.",
    ),
    ErrorKind.LOBBY_NOT_FOUND: Toast(
        title="Lobby Not Found",
        description="The lobby you're trying to join couldn't be found.",
    ),
    ErrorKind.CARD_SUBMISSION: Toast(
        title="Card Submission",
        description=(
            "The card couldn't be submitted. "
            "This might be happening due to a Game Phase mismatch."
        ),
    ),
    ErrorKind.CZAR_CHOICE: Toast(
        title="Czar Choice",
        description=(
            "Your choice as a Czar couldn't be submitted. "
            "This might be happening due to a Game Phase mismatch."
        ),
    ),
    ErrorKind.UNAUTHORIZED: Toast(
        title="Authorization Error",
        description="You're not authorized to do that action.",
    ),
}

_PAYLOAD_TITLES: dict[ErrorKind, str] = {
    ErrorKind.DECK: "Deck Error",
    ErrorKind.REQWEST: "Third Party Request Error",
    ErrorKind.WEBSOCKET: "Websocket Error",
    ErrorKind.FILE_SYSTEM: "File System Error",
    ErrorKind.JSON: "Json Serializing/Deserializing Error",
}

FATAL_TOAST = Toast(
    title="Fatal Frontend Error",
    description="An unknown Error has occurred. Try reopening the app!",
)


def error_message(error: ClashError | object) -> Toast:
    """Translate an error into the toast shown to the user.

    Anything that is not a ``ClashError`` of a known kind maps to the
    generic fatal message.
    """
    if not isinstance(error, ClashError):
        return FATAL_TOAST

    if error.kind in _PAYLOAD_TITLES:
        return Toast(title=_PAYLOAD_TITLES[error.kind], description=error.value or "")

    return _MESSAGES.get(error.kind, FATAL_TOAST)


def show_error(error: ClashError, sink: ToastSink) -> NoReturn:
    """Display the error via the sink and raise it."""
    sink.error(error_message(error))
    raise error


async def handle_errors(
    awaitable: Awaitable[T],
    sink: ToastSink,
    on_error: Callable[[], None] | None = None,
) -> T:
    """Await a client call, displaying and re-raising any ``ClashError``.

    Args:
        awaitable: The pending client call
        sink: Where toasts go
        on_error: Optional callback run after the toast, before re-raising

    Returns:
        The awaited result
    """
    try:
        return await awaitable
    except ClashError as e:
        logger.info(f"Surfacing {e.raw_kind} error to the user")
        sink.error(error_message(e))
        if on_error is not None:
            on_error()
        raise

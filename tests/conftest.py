"""Pytest configuration and fixtures."""

import os
import uuid
from unittest.mock import AsyncMock

# Tests must never pick up a developer's .env or talk to production
os.environ["CLASH_DEV_MODE"] = "true"
os.environ["CLASH_LOCAL_API_BASE"] = "http://test"

# Clear the settings cache to pick up the new environment variables
from clash.settings import get_settings

get_settings.cache_clear()

import pytest  # noqa: E402

from clash.lobby.models import (  # noqa: E402
    ClientLobby,
    Credentials,
    DeckInfo,
    DeckMeta,
    LobbySettings,
    PlayerInfo,
)

HOST_ID = uuid.UUID("11111111-1111-4111-8111-111111111111")
GUEST_ID = uuid.UUID("22222222-2222-4222-8222-222222222222")
THIRD_ID = uuid.UUID("33333333-3333-4333-8333-333333333333")
LOBBY_ID = uuid.UUID("99999999-9999-4999-8999-999999999999")


@pytest.fixture
def host_id() -> uuid.UUID:
    return HOST_ID


@pytest.fixture
def guest_id() -> uuid.UUID:
    return GUEST_ID


@pytest.fixture
def third_id() -> uuid.UUID:
    return THIRD_ID


@pytest.fixture
def lobby_id() -> uuid.UUID:
    return LOBBY_ID


@pytest.fixture
def deck() -> DeckInfo:
    """An enabled deck."""
    return DeckInfo(
        meta=DeckMeta(
            name="Base Set",
            deckcode="BASE1",
            language="en",
            blacks_count=90,
            whites_count=460,
            fetched_at=1_700_000_000,
        ),
        enabled=True,
    )


@pytest.fixture
def open_lobby(deck: DeckInfo) -> ClientLobby:
    """A lobby waiting to start: host plus one guest, one enabled deck."""
    return ClientLobby(
        players={
            HOST_ID: PlayerInfo(name="Hannah", is_host=True),
            GUEST_ID: PlayerInfo(name="Gus"),
        },
        settings=LobbySettings(decks=[deck]),
    )


@pytest.fixture
def credentials() -> Credentials:
    """Credentials of the guest player."""
    return Credentials(
        display_name="Gus",
        lobby_id=LOBBY_ID,
        player_id=GUEST_ID,
        secret=uuid.UUID("abcdefab-cdef-4abc-8def-abcdefabcdef"),
    )


@pytest.fixture
def mock_connection() -> AsyncMock:
    """Create a mock WebSocket client connection."""
    connection = AsyncMock()
    connection.send = AsyncMock()
    connection.recv = AsyncMock()
    connection.close = AsyncMock()
    return connection

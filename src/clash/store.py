"""Credential storage for the lifetime of one client session.

The store itself is a capability handed to whoever builds the session, so
nothing here is global. ``MemoryStore`` lives as long as the process; UIs
with their own session storage implement ``SessionStore`` over it.
"""

import logging
from typing import Protocol

from pydantic import ValidationError

from clash.lobby.models import Credentials

logger = logging.getLogger(__name__)

CREDENTIALS_KEY = "credentials"


class SessionStore(Protocol):
    """Session-scoped string key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self, key: str) -> None: ...


class MemoryStore:
    """In-process ``SessionStore``."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class CredentialStore:
    """Keeps the local player's credentials so a reload can rejoin."""

    def __init__(self, store: SessionStore, key: str = CREDENTIALS_KEY) -> None:
        self.store = store
        self.key = key

    def load(self) -> Credentials | None:
        """Return the stored credentials, or None if absent or unreadable."""
        raw = self.store.get(self.key)
        if raw is None:
            return None
        try:
            return Credentials.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable stored credentials: {e.error_count()} errors")
            return None

    def save(self, credentials: Credentials) -> None:
        self.store.set(self.key, credentials.model_dump_json())

    def clear(self) -> None:
        self.store.clear(self.key)

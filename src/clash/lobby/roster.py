"""Ordering helpers for presenting lobby state."""

import locale
from collections.abc import Iterable, Mapping
from uuid import UUID

from clash.lobby.models import PlayerInfo


def _collate(text: str) -> str:
    # strxfrm rejects NUL
    return locale.strxfrm(text.replace("\x00", ""))


def _name_key(name: str) -> tuple[str, str, str]:
    # Case-insensitive first so "ann" and "Ann" sit together, exact form second
    return _collate(name.casefold()), _collate(name), name


def sorted_roster(players: Mapping[UUID, PlayerInfo] | None) -> list[tuple[UUID, PlayerInfo]]:
    """Return players in display order.

    Sorted by name using the process locale's collation, ties broken by the
    canonical identifier string. Distinct identifiers never compare equal, so
    the order is total.
    """
    if not players:
        return []
    return sorted(players.items(), key=lambda item: (*_name_key(item[1].name), str(item[0])))


def all_unique(indexes: Iterable[int]) -> bool:
    """Check that no index appears twice."""
    seen: set[int] = set()
    for index in indexes:
        if index in seen:
            return False
        seen.add(index)
    return True

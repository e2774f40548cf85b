"""Session descriptor model."""

from __future__ import annotations

from enum import StrEnum

from pysprintpoker.models._base import FrozenSprintPokerModel


class CardSet(StrEnum):
    """Card deck variant selected when the session was created.

    Values without a mapped member resolve to ``MODIFIED_FIBONACCI``.
    """

    TIME = "time"
    FIBONACCI = "fibonacci"
    MODIFIED_FIBONACCI = "modified-fibonacci"

    @classmethod
    def _missing_(cls, value: object) -> CardSet:
        return cls.MODIFIED_FIBONACCI


class SessionInfo(FrozenSprintPokerModel):
    """Immutable descriptor of an estimation session, loaded once at join."""

    session_id: str
    sprint_name: str = ""
    card_set: CardSet = CardSet.MODIFIED_FIBONACCI

"""Data models for sprint poker sessions."""

from pysprintpoker.models._base import FrozenSprintPokerModel, SprintPokerModel
from pysprintpoker.models.card import (
    DECKS,
    FIBONACCI_DECK,
    MODIFIED_FIBONACCI_DECK,
    TIME_DECK,
    Card,
    deck_for,
)
from pysprintpoker.models.responses import OperationResult, ResponseStatus
from pysprintpoker.models.session import CardSet, SessionInfo
from pysprintpoker.models.statistics import UNSET, VoteStatistics
from pysprintpoker.models.story import Story, StoryDraft
from pysprintpoker.models.user import User
from pysprintpoker.models.vote import Vote

__all__ = [
    "Card",
    "CardSet",
    "DECKS",
    "FIBONACCI_DECK",
    "FrozenSprintPokerModel",
    "MODIFIED_FIBONACCI_DECK",
    "OperationResult",
    "ResponseStatus",
    "SessionInfo",
    "SprintPokerModel",
    "Story",
    "StoryDraft",
    "TIME_DECK",
    "UNSET",
    "User",
    "Vote",
    "VoteStatistics",
    "deck_for",
]

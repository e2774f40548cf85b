"""pysprintpoker - Async client-side state engine for sprint poker sessions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pysprintpoker")
except PackageNotFoundError:
    __version__ = "0+local"
from pysprintpoker.client import SprintPokerClient
from pysprintpoker.config import SprintPokerConfig
from pysprintpoker.exceptions import (
    SprintPokerApiError,
    SprintPokerConfigError,
    SprintPokerError,
    SprintPokerStateError,
    SprintPokerTransportError,
)
from pysprintpoker.models import (
    Card,
    CardSet,
    OperationResult,
    ResponseStatus,
    SessionInfo,
    Story,
    StoryDraft,
    User,
    Vote,
    VoteStatistics,
)
from pysprintpoker.state.events import EventType, SessionEvent
from pysprintpoker.state.store import EntityStore

__all__ = [
    "__version__",
    "Card",
    "CardSet",
    "EntityStore",
    "EventType",
    "OperationResult",
    "ResponseStatus",
    "SessionEvent",
    "SessionInfo",
    "SprintPokerApiError",
    "SprintPokerClient",
    "SprintPokerConfig",
    "SprintPokerConfigError",
    "SprintPokerError",
    "SprintPokerStateError",
    "SprintPokerTransportError",
    "Story",
    "StoryDraft",
    "User",
    "Vote",
    "VoteStatistics",
]

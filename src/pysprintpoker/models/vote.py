"""Vote model."""

from __future__ import annotations

from pysprintpoker.models._base import SprintPokerModel


class Vote(SprintPokerModel):
    """One participant's estimate for a story.

    ``vote_id`` is ``None`` while the vote is in flight (not yet persisted).
    ``value`` is the id of the chosen card.
    """

    vote_id: str | None = None
    session_id: str | None = None
    story_id: str
    username: str
    value: int

    @property
    def is_provisional(self) -> bool:
        """Whether the backend has not assigned an id yet."""
        return self.vote_id is None

"""Participant model."""

from __future__ import annotations

from pydantic import Field, field_validator

from pysprintpoker.models._base import SprintPokerModel


class User(SprintPokerModel):
    """A participant of the session, identified by ``username``."""

    username: str
    session_id: str | None = None

    # Derived locally from the votes collection, never sent by the server.
    has_voted: bool = Field(default=False, exclude=True)
    vote: int | None = Field(default=None, exclude=True)

    @field_validator("username")
    @classmethod
    def _username_non_empty(cls, value: str) -> str:
        username = value.strip()
        if not username:
            raise ValueError("username must be non-empty")
        return username

    def clear_vote(self) -> None:
        self.has_voted = False
        self.vote = None

    def mark_voted(self, value: int) -> None:
        self.has_voted = True
        self.vote = value

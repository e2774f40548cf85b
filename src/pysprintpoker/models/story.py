"""Story model."""

from __future__ import annotations

from pydantic import Field, field_validator

from pysprintpoker.models._base import SprintPokerModel


class Story(SprintPokerModel):
    """An item being estimated.

    ``ended`` flips once (active -> ended); ``order`` is the display rank.
    """

    story_id: str
    session_id: str | None = None
    story_name: str = ""
    order: int = 0
    ended: bool = False

    @field_validator("story_id")
    @classmethod
    def _story_id_non_empty(cls, value: str) -> str:
        story_id = value.strip()
        if not story_id:
            raise ValueError("story_id must be non-empty")
        return story_id


class StoryDraft(SprintPokerModel):
    """Payload for creating a story (the "new story" input buffer)."""

    session_id: str
    story_name: str = ""
    order: int = Field(default=1, ge=1)

"""Normalized session events.

Push payloads are converted into these events at the ingestion boundary;
only the reconciler applies them to the store.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pysprintpoker.models.story import Story
from pysprintpoker.models.user import User
from pysprintpoker.models.vote import Vote


class EventType(StrEnum):
    STORY_ADDED = "STORY_ADDED"
    STORY_REMOVED = "STORY_REMOVED"
    STORY_ENDED = "STORY_ENDED"
    VOTE_ADDED = "VOTE_ADDED"
    VOTE_REMOVED = "VOTE_REMOVED"
    USER_CONNECTED = "USER_CONNECTED"
    USER_DISCONNECTED = "USER_DISCONNECTED"


#: Record type carried by each event; the remaining events carry a bare identity.
RECORD_EVENTS: dict[EventType, type[Story] | type[Vote] | type[User]] = {
    EventType.STORY_ADDED: Story,
    EventType.VOTE_ADDED: Vote,
    EventType.USER_CONNECTED: User,
}


class SessionEvent(BaseModel):
    """An authoritative change pushed by the server.

    ``data`` is the full record for the ``*_ADDED``/``USER_CONNECTED``
    events and the identity value (story id, vote id, username) otherwise.
    """

    model_config = ConfigDict(frozen=True)

    type: EventType
    data: Story | Vote | User | str
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

"""Identity-based lookup over session collections.

Every mutable record is located by the identity field of its kind; the
collections are small (tens of entries), so lookup is a linear scan where
the first match wins.  "Not found" is an expected outcome and is reported
with the :data:`NOT_FOUND` sentinel, never with an exception.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any

from pysprintpoker.models.vote import Vote

NOT_FOUND = -1


class EntityKind(StrEnum):
    STORY = "story"
    VOTE = "vote"
    USER = "user"
    CARD = "card"


IDENTITY_FIELDS: dict[EntityKind, str] = {
    EntityKind.STORY: "story_id",
    EntityKind.VOTE: "vote_id",
    EntityKind.USER: "username",
    EntityKind.CARD: "id",
}

# Probes may be built from wire payloads, which use camelCase keys.
_WIRE_FIELDS: dict[EntityKind, str] = {
    EntityKind.STORY: "storyId",
    EntityKind.VOTE: "voteId",
    EntityKind.USER: "username",
    EntityKind.CARD: "id",
}


def identity_of(kind: EntityKind, record: Any) -> Any:
    """Return the identity value carried by *record* (model or mapping)."""
    field = IDENTITY_FIELDS[kind]
    if isinstance(record, Mapping):
        if field in record:
            return record[field]
        return record.get(_WIRE_FIELDS[kind])
    return getattr(record, field, None)


def locate(kind: EntityKind, collection: Sequence[Any], probe: Any) -> int:
    """Return the position of the record matching *probe*, or :data:`NOT_FOUND`."""
    wanted = identity_of(kind, probe)
    for index, item in enumerate(collection):
        if identity_of(kind, item) == wanted:
            return index
    return NOT_FOUND


def locate_vote_slot(votes: Sequence[Vote], vote: Vote) -> int:
    """Locate the slot a vote should occupy.

    Matches on ``vote_id`` first.  Otherwise falls back to the vote of the
    same user on the same story: at most one vote per (story, user) pair is
    meaningful, and this is what lets a provisional vote and its confirmed
    record collapse into a single entry.
    """
    if vote.vote_id is not None:
        index = locate(EntityKind.VOTE, votes, vote)
        if index != NOT_FOUND:
            return index
    for index, item in enumerate(votes):
        if item.story_id == vote.story_id and item.username == vote.username:
            return index
    return NOT_FOUND

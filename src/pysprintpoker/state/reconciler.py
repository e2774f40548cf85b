"""Apply pushed session events to the entity store.

Delivery is at-least-once and unordered, and the server echoes the local
user's own actions back.  Every handler is therefore idempotent and treats a
missing record as a no-op: re-applying an event that already took effect
changes nothing, and a vote may arrive before its user.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pysprintpoker.models.story import Story
from pysprintpoker.models.user import User
from pysprintpoker.models.vote import Vote
from pysprintpoker.state.derived import recompute_statistics, recompute_user_annotations
from pysprintpoker.state.events import EventType, SessionEvent
from pysprintpoker.state.identity import NOT_FOUND, EntityKind
from pysprintpoker.state.store import EntityStore

_logger = logging.getLogger(__name__)


class EventReconciler:
    """Merges the authoritative event stream into an :class:`EntityStore`."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self._handlers: dict[EventType, Callable[[SessionEvent], bool]] = {
            EventType.STORY_ADDED: self._story_added,
            EventType.STORY_REMOVED: self._story_removed,
            EventType.STORY_ENDED: self._story_ended,
            EventType.VOTE_ADDED: self._vote_added,
            EventType.VOTE_REMOVED: self._vote_removed,
            EventType.USER_CONNECTED: self._user_connected,
            EventType.USER_DISCONNECTED: self._user_disconnected,
        }

    @property
    def store(self) -> EntityStore:
        return self._store

    def apply(self, event: SessionEvent) -> bool:
        """Apply one event; returns whether the store changed.

        Observers are notified once per applied event.
        """
        handler = self._handlers.get(event.type)
        if handler is None:
            return False
        changed = handler(event)
        _logger.debug("Applied %s observed_at=%s changed=%s", event.type, event.observed_at.isoformat(), changed)
        self._store.notify()
        return changed

    def _story_added(self, event: SessionEvent) -> bool:
        story = event.data
        if not isinstance(story, Story):
            return False
        if self._store.index_of(EntityKind.STORY, story) != NOT_FOUND:
            return False
        self._store.upsert(EntityKind.STORY, story)
        return True

    def _story_removed(self, event: SessionEvent) -> bool:
        return self._store.remove(EntityKind.STORY, {"story_id": event.data}) is not None

    def _story_ended(self, event: SessionEvent) -> bool:
        story = self._store.get(EntityKind.STORY, {"story_id": event.data})
        if story is None:
            return False
        changed = not story.ended
        story.ended = True
        recompute_statistics(self._store)
        return changed

    def _vote_added(self, event: SessionEvent) -> bool:
        vote = event.data
        if not isinstance(vote, Vote):
            return False
        existing = self._store.votes
        self._store.upsert(EntityKind.VOTE, vote)
        changed = existing != self._store.votes

        if vote.story_id != self._store.current_story_id:
            return changed
        user = self._store.get(EntityKind.USER, {"username": vote.username})
        if user is None:
            # Roster and vote events are not ordered; the user annotation is
            # recomputed when the user connects.
            return changed
        if not user.has_voted or user.vote != vote.value:
            user.mark_voted(vote.value)
            changed = True
        if vote.username == self._store.current_username and self._store.current_vote != vote:
            self._store.current_vote = vote
            changed = True
        return changed

    def _vote_removed(self, event: SessionEvent) -> bool:
        vote: Vote | None = self._store.get(EntityKind.VOTE, {"vote_id": event.data})
        if vote is None:
            return False
        if vote.username == self._store.current_username:
            # Own retraction is already reflected locally.
            return False
        self._store.remove(EntityKind.VOTE, vote)
        recompute_user_annotations(self._store)
        return True

    def _user_connected(self, event: SessionEvent) -> bool:
        user = event.data
        if not isinstance(user, User):
            return False
        if self._store.index_of(EntityKind.USER, user) != NOT_FOUND:
            return False
        self._store.upsert(EntityKind.USER, user)
        recompute_user_annotations(self._store)
        return True

    def _user_disconnected(self, event: SessionEvent) -> bool:
        return self._store.remove(EntityKind.USER, {"username": event.data}) is not None

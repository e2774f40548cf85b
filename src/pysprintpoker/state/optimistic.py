"""Optimistic local actions.

Local user actions are applied to the store before the backend confirms
them, then reconciled with the response: a ``KO`` answer (or a transport
failure, which is re-raised) rolls the store back to its pre-action state.
Requests are neither serialized nor cancelled; a superseding action and a
stale response resolve through identity-keyed upserts.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pysprintpoker.exceptions import SprintPokerStateError
from pysprintpoker.models.card import Card
from pysprintpoker.models.responses import OperationResult
from pysprintpoker.models.story import Story, StoryDraft
from pysprintpoker.models.vote import Vote
from pysprintpoker.state.derived import recompute_statistics, recompute_user_annotations
from pysprintpoker.state.identity import NOT_FOUND, EntityKind, locate_vote_slot
from pysprintpoker.state.store import CardSelection, EntityStore

_logger = logging.getLogger(__name__)


class SessionBackend(Protocol):
    """Backend operations the mutator needs."""

    async def fetch_votes(self, story_id: str) -> list[Vote]: ...

    async def save_vote(self, vote: Vote) -> OperationResult[Vote]: ...

    async def delete_vote(self, vote_id: str) -> OperationResult[None]: ...

    async def create_story(self, draft: StoryDraft) -> OperationResult[Story]: ...

    async def delete_story(self, story_id: str) -> OperationResult[None]: ...

    async def end_story(self, story_id: str) -> OperationResult[None]: ...


class OptimisticMutator:
    """Applies the local user's actions to an :class:`EntityStore`."""

    def __init__(self, store: EntityStore, backend: SessionBackend) -> None:
        self._store = store
        self._backend = backend
        self.loading = False
        self.new_story_name = ""

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_current_story(self) -> Story:
        story = self._store.current_story
        if story is None:
            raise SprintPokerStateError("No current story selected")
        return story

    def _require_username(self) -> str:
        username = self._store.current_username
        if not username:
            raise SprintPokerStateError("No local user for this session")
        return username

    def _session_id(self) -> str | None:
        session = self._store.session
        return session.session_id if session is not None else None

    def _refresh_votes(self) -> None:
        recompute_user_annotations(self._store)
        self._store.notify()

    # ------------------------------------------------------------------
    # Votes
    # ------------------------------------------------------------------

    async def select_card(self, card: Card) -> OperationResult[Vote] | OperationResult[None] | None:
        """Vote with an unselected card, or retract the vote of the selected one.

        Ignored (returns ``None``) while the current story is ended or a vote
        request is in flight.
        """
        story = self._store.current_story
        if story is None or story.ended or self.loading:
            return None
        if not self._store.selection.is_selected(card):
            return await self.cast_vote(card)
        return await self.retract_vote()

    async def cast_vote(self, card: Card) -> OperationResult[Vote]:
        """Vote *card* for the current story (or change the current estimate)."""
        store = self._store
        story = self._require_current_story()
        username = self._require_username()

        previous_vote = store.current_vote
        previous_selection = store.selection.snapshot()
        vote = Vote(
            session_id=self._session_id(),
            story_id=story.story_id,
            username=username,
            value=card.id,
        )
        # Changing an estimate reuses the id of this user's vote on this story.
        slot = locate_vote_slot(store.votes, vote)
        replaced = store.votes[slot] if slot != NOT_FOUND else None
        if replaced is not None:
            vote.vote_id = replaced.vote_id

        store.upsert(EntityKind.VOTE, vote)
        store.current_vote = vote
        store.selection.select(card)
        self._refresh_votes()

        self.loading = True
        try:
            result = await self._backend.save_vote(vote)
        except Exception:
            self._rollback_vote(vote, replaced, previous_vote, previous_selection)
            raise
        finally:
            self.loading = False

        if not result.ok:
            _logger.debug("Vote rejected story=%s user=%s: %s", story.story_id, username, result.message)
            self._rollback_vote(vote, replaced, previous_vote, previous_selection)
            return result

        confirmed = result.record
        if confirmed is not None:
            store.upsert(EntityKind.VOTE, confirmed)
            if confirmed.story_id == store.current_story_id:
                store.current_vote = confirmed
        self._refresh_votes()
        return result

    def _rollback_vote(
        self,
        vote: Vote,
        replaced: Vote | None,
        previous_vote: Vote | None,
        previous_selection: CardSelection,
    ) -> None:
        store = self._store
        if vote.story_id != store.current_story_id:
            # The story was switched meanwhile; its vote snapshot was reloaded.
            self._refresh_votes()
            return
        if replaced is not None:
            store.upsert(EntityKind.VOTE, replaced)
        else:
            index = locate_vote_slot(store.votes, vote)
            # A confirmed record may already have arrived through the push channel.
            if index != NOT_FOUND and store.votes[index].is_provisional:
                store.remove(EntityKind.VOTE, store.votes[index])
        store.current_vote = previous_vote
        store.selection = previous_selection
        self._refresh_votes()

    async def retract_vote(self) -> OperationResult[None]:
        """Retract the local user's persisted vote.

        The vote is removed only once the backend confirms; a ``KO`` answer
        leaves the local state untouched.
        """
        store = self._store
        current = store.current_vote
        if current is None or current.vote_id is None:
            raise SprintPokerStateError("No persisted vote to retract")

        self.loading = True
        try:
            result = await self._backend.delete_vote(current.vote_id)
        finally:
            self.loading = False

        if not result.ok:
            _logger.debug("Vote retraction rejected vote=%s: %s", current.vote_id, result.message)
            return result

        store.remove(EntityKind.VOTE, current)
        store.current_vote = None
        store.selection.deselect()
        self._refresh_votes()
        return result

    # ------------------------------------------------------------------
    # Stories
    # ------------------------------------------------------------------

    async def add_story(self, name: str | None = None) -> OperationResult[Story] | None:
        """Create a story from *name* (or the pending input buffer).

        Blank names are ignored.  The input buffer is cleared once the backend
        confirms; the story itself is appended (its push echo is a no-op).
        """
        story_name = (name if name is not None else self.new_story_name).strip()
        if not story_name:
            return None
        session_id = self._session_id()
        if session_id is None:
            raise SprintPokerStateError("No session loaded")

        draft = StoryDraft(
            session_id=session_id,
            story_name=story_name,
            order=len(self._store.stories) + 1,
        )
        result = await self._backend.create_story(draft)
        if not result.ok:
            _logger.debug("Story creation rejected name=%s: %s", story_name, result.message)
            return result

        self.new_story_name = ""
        if result.record is not None and self._store.index_of(EntityKind.STORY, result.record) == NOT_FOUND:
            self._store.upsert(EntityKind.STORY, result.record)
        self._store.notify()
        return result

    async def remove_story(self, story: Story) -> OperationResult[None]:
        """Remove *story* immediately; put it back in place if the backend declines."""
        store = self._store
        index = store.index_of(EntityKind.STORY, story)
        removed = store.remove(EntityKind.STORY, story)
        store.notify()

        try:
            result = await self._backend.delete_story(story.story_id)
        except Exception:
            self._restore_story(index, removed)
            raise

        if not result.ok:
            _logger.debug("Story removal rejected story=%s: %s", story.story_id, result.message)
            self._restore_story(index, removed)
        return result

    def _restore_story(self, index: int, removed: Story | None) -> None:
        if removed is None:
            return
        self._store.restore(EntityKind.STORY, index, removed)
        self._store.notify()

    async def end_story(self) -> OperationResult[None] | None:
        """End the current story; reopened locally if the backend declines.

        Returns ``None`` when the story was already ended.
        """
        story = self._require_current_story()
        if story.ended:
            return None

        story.ended = True
        self._store.notify()

        try:
            result = await self._backend.end_story(story.story_id)
        except Exception:
            self._reopen_story(story)
            raise

        if not result.ok:
            _logger.debug("End of story rejected story=%s: %s", story.story_id, result.message)
            self._reopen_story(story)
            return result

        recompute_statistics(self._store)
        self._store.notify()
        return result

    def _reopen_story(self, story: Story) -> None:
        story.ended = False
        recompute_statistics(self._store)
        self._store.notify()

    async def set_current_story(self, story: Story) -> None:
        """Make *story* the current one and load its votes."""
        store = self._store
        store.current_story_id = story.story_id
        store.selection.deselect()

        votes = await self._backend.fetch_votes(story.story_id)
        if store.current_story_id != story.story_id:
            # Superseded by a newer switch while the fetch was in flight.
            return

        store.load(EntityKind.VOTE, votes)
        store.current_vote = next(
            (vote for vote in store.votes if vote.username == store.current_username),
            None,
        )
        if store.current_vote is not None:
            store.selection.select(store.card(store.current_vote.value))
        recompute_user_annotations(store)
        recompute_statistics(store)
        store.notify()

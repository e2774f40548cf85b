"""In-memory entity store for one estimation session.

This is the only component holding session records.  Every collection
mutation goes through :meth:`EntityStore.upsert` / :meth:`EntityStore.remove`
(or the compensating :meth:`EntityStore.restore`), which keeps identities
unique per kind.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pysprintpoker.exceptions import SprintPokerStateError
from pysprintpoker.models.card import Card
from pysprintpoker.models.session import SessionInfo
from pysprintpoker.models.statistics import VoteStatistics
from pysprintpoker.models.story import Story
from pysprintpoker.models.user import User
from pysprintpoker.models.vote import Vote
from pysprintpoker.state.identity import NOT_FOUND, EntityKind, locate, locate_vote_slot

_logger = logging.getLogger(__name__)

Observer = Callable[["EntityStore"], None]


class CardTransition(StrEnum):
    """UI transition hint recorded when a card is (de)selected."""

    MOVE_UP = "move-up"
    MOVE_DOWN = "move-down"


@dataclass
class CardSelection:
    """Locally selected card; at most one card is selected at a time."""

    selected_card_id: int | None = None
    transitions: dict[int, CardTransition] = field(default_factory=dict)

    def is_selected(self, card: Card) -> bool:
        return self.selected_card_id == card.id

    def select(self, card: Card | None) -> None:
        """Select *card*, deselecting the previously selected one."""
        if card is None or self.is_selected(card):
            return
        if self.selected_card_id is not None:
            self.transitions[self.selected_card_id] = CardTransition.MOVE_DOWN
        self.selected_card_id = card.id
        self.transitions[card.id] = CardTransition.MOVE_UP

    def deselect(self) -> None:
        if self.selected_card_id is None:
            return
        self.transitions[self.selected_card_id] = CardTransition.MOVE_DOWN
        self.selected_card_id = None

    def snapshot(self) -> CardSelection:
        return CardSelection(self.selected_card_id, dict(self.transitions))


class EntityStore:
    """Ordered stories, users and votes of the active session, plus the fixed deck.

    The store also carries the view pointers the other components share:
    the local user, the current story, the local user's current vote, the
    card selection and the last computed statistics.  It never notifies
    observers on its own; callers fire :meth:`notify` once per applied event
    or action.
    """

    def __init__(
        self,
        *,
        session: SessionInfo | None = None,
        cards: Sequence[Card] = (),
        current_username: str | None = None,
    ) -> None:
        self.session = session
        self.current_username = current_username
        self.current_story_id: str | None = None
        self.current_vote: Vote | None = None
        self.selection = CardSelection()
        self.statistics = VoteStatistics()
        self._cards: tuple[Card, ...] = tuple(cards)
        self._collections: dict[EntityKind, list[Any]] = {
            EntityKind.STORY: [],
            EntityKind.USER: [],
            EntityKind.VOTE: [],
        }
        self._observers: list[Observer] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def stories(self) -> tuple[Story, ...]:
        return tuple(self._collections[EntityKind.STORY])

    @property
    def users(self) -> tuple[User, ...]:
        return tuple(self._collections[EntityKind.USER])

    @property
    def votes(self) -> tuple[Vote, ...]:
        return tuple(self._collections[EntityKind.VOTE])

    @property
    def cards(self) -> tuple[Card, ...]:
        return self._cards

    def _items(self, kind: EntityKind) -> Sequence[Any]:
        if kind == EntityKind.CARD:
            return self._cards
        return self._collections[kind]

    def index_of(self, kind: EntityKind, probe: Any) -> int:
        """Position of the record matching *probe*, or ``NOT_FOUND``."""
        return locate(kind, self._items(kind), probe)

    def get(self, kind: EntityKind, probe: Any) -> Any | None:
        index = self.index_of(kind, probe)
        if index == NOT_FOUND:
            return None
        return self._items(kind)[index]

    def card(self, card_id: int | None) -> Card | None:
        if card_id is None:
            return None
        return self.get(EntityKind.CARD, {"id": card_id})

    @property
    def current_story(self) -> Story | None:
        if self.current_story_id is None:
            return None
        return self.get(EntityKind.STORY, {"story_id": self.current_story_id})

    @property
    def current_user(self) -> User | None:
        if self.current_username is None:
            return None
        return self.get(EntityKind.USER, {"username": self.current_username})

    def story_votes(self) -> list[Vote]:
        """Votes of the current story, in store order."""
        if self.current_story_id is None:
            return []
        return [vote for vote in self._collections[EntityKind.VOTE] if vote.story_id == self.current_story_id]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _mutable(self, kind: EntityKind) -> list[Any]:
        if kind == EntityKind.CARD:
            raise SprintPokerStateError("The card deck is fixed for the session and cannot be mutated")
        return self._collections[kind]

    def _slot(self, kind: EntityKind, items: list[Any], record: Any) -> int:
        if kind == EntityKind.VOTE:
            return locate_vote_slot(items, record)
        return locate(kind, items, record)

    def upsert(self, kind: EntityKind, record: Any) -> int:
        """Replace the record with the same identity in place, or append it.

        Returns the position the record now occupies.
        """
        items = self._mutable(kind)
        index = self._slot(kind, items, record)
        if index == NOT_FOUND:
            items.append(record)
            return len(items) - 1
        items[index] = record
        return index

    def remove(self, kind: EntityKind, probe: Any) -> Any | None:
        """Remove the record matching *probe*; returns it, or ``None`` when absent."""
        items = self._mutable(kind)
        index = locate(kind, items, probe)
        if index == NOT_FOUND:
            return None
        return items.pop(index)

    def restore(self, kind: EntityKind, index: int, record: Any) -> int:
        """Compensating re-insert: put *record* back at *index* unless already present."""
        items = self._mutable(kind)
        existing = self._slot(kind, items, record)
        if existing != NOT_FOUND:
            items[existing] = record
            return existing
        position = max(0, min(index, len(items)))
        items.insert(position, record)
        return position

    def load(self, kind: EntityKind, records: Iterable[Any]) -> None:
        """Replace a collection with a snapshot (deduplicated by identity)."""
        self._mutable(kind).clear()
        for record in records:
            self.upsert(kind, record)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register *observer*; returns a callable that unregisters it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def notify(self) -> None:
        """Fire every observer once."""
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                _logger.debug("Store observer failed", exc_info=True)

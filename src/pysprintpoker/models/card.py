"""Cards and the fixed decks they belong to."""

from __future__ import annotations

from pysprintpoker.models._base import FrozenSprintPokerModel
from pysprintpoker.models.session import CardSet


class Card(FrozenSprintPokerModel):
    """One permissible estimate value.

    ``id`` is what a vote carries as its ``value``; ``value`` is what is
    displayed.
    """

    id: int
    value: str
    unit: str | None = None
    color: str = "grey"

    @property
    def display(self) -> str:
        """Display value with the unit suffix, e.g. ``"4 h"``."""
        if self.unit:
            return f"{self.value} {self.unit}"
        return self.value


def _deck(*specs: tuple[str, str | None, str]) -> tuple[Card, ...]:
    return tuple(
        Card(id=position, value=value, unit=unit, color=color)
        for position, (value, unit, color) in enumerate(specs, start=1)
    )


FIBONACCI_DECK: tuple[Card, ...] = _deck(
    ("0", None, "green"),
    ("1", None, "green"),
    ("2", None, "green"),
    ("3", None, "blue"),
    ("5", None, "blue"),
    ("8", None, "yellow"),
    ("13", None, "yellow"),
    ("21", None, "orange"),
    ("34", None, "orange"),
    ("55", None, "red"),
    ("89", None, "red"),
    ("?", None, "grey"),
)

MODIFIED_FIBONACCI_DECK: tuple[Card, ...] = _deck(
    ("0", None, "green"),
    ("½", None, "green"),
    ("1", None, "green"),
    ("2", None, "green"),
    ("3", None, "blue"),
    ("5", None, "blue"),
    ("8", None, "yellow"),
    ("13", None, "yellow"),
    ("20", None, "orange"),
    ("40", None, "orange"),
    ("100", None, "red"),
    ("?", None, "grey"),
)

TIME_DECK: tuple[Card, ...] = _deck(
    ("1", "h", "green"),
    ("2", "h", "green"),
    ("4", "h", "blue"),
    ("6", "h", "blue"),
    ("1", "d", "yellow"),
    ("2", "d", "yellow"),
    ("3", "d", "orange"),
    ("5", "d", "orange"),
    ("1", "w", "red"),
    ("?", None, "grey"),
)

DECKS: dict[CardSet, tuple[Card, ...]] = {
    CardSet.TIME: TIME_DECK,
    CardSet.FIBONACCI: FIBONACCI_DECK,
    CardSet.MODIFIED_FIBONACCI: MODIFIED_FIBONACCI_DECK,
}


def deck_for(card_set: CardSet | str) -> tuple[Card, ...]:
    """Return the deck of a card set (unknown names fall back like :class:`CardSet`)."""
    return DECKS[CardSet(card_set)]

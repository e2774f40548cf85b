"""Derived views recomputed from the store contents.

Nothing here is cached independently: user annotations and statistics are
always a pure function of the current votes, users, stories and deck.
"""

from __future__ import annotations

from pysprintpoker.models.statistics import VoteStatistics
from pysprintpoker.state.identity import NOT_FOUND, EntityKind
from pysprintpoker.state.store import EntityStore


def recompute_user_annotations(store: EntityStore) -> None:
    """Reset every user's ``has_voted``/``vote`` and set them from the active story's votes."""
    votes = store.story_votes()
    for user in store.users:
        user.clear_vote()
        for vote in votes:
            if vote.username == user.username:
                user.mark_voted(vote.value)
                break


def recompute_statistics(store: EntityStore) -> VoteStatistics:
    """Compute min/max revealed estimates of the active story.

    Only meaningful once the story is ended; before that (and when no vote
    maps to a card of the deck) both values are the ``"-"`` placeholder.
    The result is also kept on ``store.statistics``.
    """
    story = store.current_story
    statistics = VoteStatistics()
    if story is not None and story.ended:
        positions = [
            position
            for position in (store.index_of(EntityKind.CARD, {"id": vote.value}) for vote in store.story_votes())
            if position != NOT_FOUND
        ]
        if positions:
            statistics = VoteStatistics(
                min=store.cards[min(positions)].display,
                max=store.cards[max(positions)].display,
            )
    store.statistics = statistics
    return statistics


def card_color(store: EntityStore, value: int | None) -> dict[str, bool]:
    """Color tag of a voted card, active only once the current story is ended."""
    if value is None:
        return {}
    card = store.card(value)
    if card is None:
        return {}
    story = store.current_story
    return {card.color: bool(story is not None and story.ended)}

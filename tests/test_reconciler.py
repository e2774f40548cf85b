from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from pysprintpoker.models.card import FIBONACCI_DECK
from pysprintpoker.models.session import CardSet, SessionInfo
from pysprintpoker.models.story import Story
from pysprintpoker.models.user import User
from pysprintpoker.models.vote import Vote
from pysprintpoker.state.events import EventType, SessionEvent
from pysprintpoker.state.identity import EntityKind
from pysprintpoker.state.reconciler import EventReconciler
from pysprintpoker.state.store import EntityStore


def _reconciler() -> EventReconciler:
    store = EntityStore(
        session=SessionInfo(session_id="sess", card_set=CardSet.FIBONACCI),
        cards=FIBONACCI_DECK,
        current_username="A",
    )
    store.load(EntityKind.USER, [User(username="A"), User(username="B")])
    store.load(EntityKind.STORY, [Story(story_id="S1")])
    store.current_story_id = "S1"
    return EventReconciler(store)


def _event(event_type: EventType, data: Story | Vote | User | str) -> SessionEvent:
    return SessionEvent(type=event_type, data=data)


def test_story_added_is_idempotent() -> None:
    reconciler = _reconciler()
    event = _event(EventType.STORY_ADDED, Story(story_id="S2", story_name="login page"))

    assert reconciler.apply(event) is True
    assert reconciler.apply(event) is False
    assert [s.story_id for s in reconciler.store.stories] == ["S1", "S2"]


def test_user_connected_is_idempotent() -> None:
    reconciler = _reconciler()
    event = _event(EventType.USER_CONNECTED, User(username="C"))

    reconciler.apply(event)
    reconciler.apply(event)

    assert [u.username for u in reconciler.store.users] == ["A", "B", "C"]


def test_vote_added_is_idempotent() -> None:
    reconciler = _reconciler()
    event = _event(EventType.VOTE_ADDED, Vote(vote_id="v2", story_id="S1", username="B", value=5))

    assert reconciler.apply(event) is True
    assert reconciler.apply(event) is False

    store = reconciler.store
    assert len(store.votes) == 1
    user = store.get(EntityKind.USER, {"username": "B"})
    assert user.has_voted is True
    assert user.vote == 5


def test_vote_for_other_story_does_not_annotate() -> None:
    reconciler = _reconciler()

    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="v9", story_id="S9", username="B", value=5)))

    user = reconciler.store.get(EntityKind.USER, {"username": "B"})
    assert user.has_voted is False
    assert len(reconciler.store.votes) == 1


def test_vote_before_user_connects() -> None:
    reconciler = _reconciler()

    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="v3", story_id="S1", username="C", value=8)))
    assert len(reconciler.store.votes) == 1

    reconciler.apply(_event(EventType.USER_CONNECTED, User(username="C")))

    user = reconciler.store.get(EntityKind.USER, {"username": "C"})
    assert user.has_voted is True
    assert user.vote == 8


def test_vote_removed_for_other_user() -> None:
    reconciler = _reconciler()
    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="v2", story_id="S1", username="B", value=5)))

    assert reconciler.apply(_event(EventType.VOTE_REMOVED, "v2")) is True

    user = reconciler.store.get(EntityKind.USER, {"username": "B"})
    assert reconciler.store.votes == ()
    assert user.has_voted is False
    assert user.vote is None


def test_own_vote_removed_echo_is_ignored() -> None:
    reconciler = _reconciler()
    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="v1", story_id="S1", username="A", value=3)))

    assert reconciler.apply(_event(EventType.VOTE_REMOVED, "v1")) is False
    assert len(reconciler.store.votes) == 1


def test_missing_identities_are_noops() -> None:
    reconciler = _reconciler()

    assert reconciler.apply(_event(EventType.STORY_REMOVED, "nope")) is False
    assert reconciler.apply(_event(EventType.STORY_ENDED, "nope")) is False
    assert reconciler.apply(_event(EventType.VOTE_REMOVED, "nope")) is False
    assert reconciler.apply(_event(EventType.USER_DISCONNECTED, "nope")) is False


def test_story_ended_recomputes_statistics() -> None:
    reconciler = _reconciler()
    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="v1", story_id="S1", username="A", value=4)))
    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="v2", story_id="S1", username="B", value=6)))

    assert reconciler.apply(_event(EventType.STORY_ENDED, "S1")) is True
    assert reconciler.apply(_event(EventType.STORY_ENDED, "S1")) is False

    store = reconciler.store
    assert store.current_story.ended is True
    assert store.statistics.min == "3"
    assert store.statistics.max == "8"


def test_story_removed_and_user_disconnected() -> None:
    reconciler = _reconciler()

    assert reconciler.apply(_event(EventType.STORY_REMOVED, "S1")) is True
    assert reconciler.apply(_event(EventType.USER_DISCONNECTED, "B")) is True

    assert reconciler.store.stories == ()
    assert [u.username for u in reconciler.store.users] == ["A"]


def test_observers_fire_once_per_event() -> None:
    reconciler = _reconciler()
    calls: list[EntityStore] = []
    reconciler.store.subscribe(calls.append)

    reconciler.apply(_event(EventType.STORY_ADDED, Story(story_id="S2")))
    reconciler.apply(_event(EventType.STORY_ADDED, Story(story_id="S2")))

    assert len(calls) == 2


def test_provisional_vote_collapses_with_echo() -> None:
    reconciler = _reconciler()
    store = reconciler.store
    store.upsert(EntityKind.VOTE, Vote(story_id="S1", username="A", value=3))

    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="v1", story_id="S1", username="A", value=3)))

    assert len(store.votes) == 1
    assert store.votes[0].vote_id == "v1"
    assert store.current_vote == store.votes[0]
    user = store.get(EntityKind.USER, {"username": "A"})
    assert user.has_voted is True
    assert user.vote == 3


def test_vote_removed_on_other_story_keeps_active_annotation() -> None:
    reconciler = _reconciler()
    store = reconciler.store
    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="b1", story_id="S1", username="B", value=5)))
    reconciler.apply(_event(EventType.VOTE_ADDED, Vote(vote_id="b2", story_id="S2", username="B", value=2)))

    assert reconciler.apply(_event(EventType.VOTE_REMOVED, "b2")) is True

    user = store.get(EntityKind.USER, {"username": "B"})
    assert [v.vote_id for v in store.votes] == ["b1"]
    assert (user.has_voted, user.vote) == (True, 5)


def test_apply_logs_observation_time(caplog: pytest.LogCaptureFixture) -> None:
    reconciler = _reconciler()
    observed = datetime(2026, 1, 1, 12, 0)
    event = SessionEvent(type=EventType.STORY_REMOVED, data="S1", observed_at=observed)

    with caplog.at_level(logging.DEBUG, logger="pysprintpoker.state.reconciler"):
        reconciler.apply(event)

    assert event.observed_at.tzinfo is UTC
    assert "observed_at=2026-01-01T12:00:00+00:00" in caplog.text

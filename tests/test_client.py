from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import pytest

from pysprintpoker._push import PushEvent, PushRuntime
from pysprintpoker._transport import JsonTransport
from pysprintpoker.client import SprintPokerClient
from pysprintpoker.config import SprintPokerConfig
from pysprintpoker.exceptions import SprintPokerStateError
from pysprintpoker.models.card import FIBONACCI_DECK
from pysprintpoker.state.identity import EntityKind


@dataclass
class _FakeMqttClient:
    disconnected: bool = False

    def disconnect(self) -> None:
        self.disconnected = True

    def loop_stop(self) -> None:
        return None


_ROUTES: dict[tuple[str, str], Any] = {
    ("GET", "/sessions/sess"): {"sessionId": "sess", "sprintName": "Sprint 1", "cardSet": "fibonacci"},
    ("GET", "/users"): [{"username": "A", "sessionId": "sess"}, {"username": "B", "sessionId": "sess"}],
    ("GET", "/stories"): [{"storyId": "S1", "order": 1}, {"storyId": "S2", "order": 2}],
    ("GET", "/votes"): [{"voteId": "v5", "storyId": "S1", "username": "B", "value": 5}],
    ("POST", "/votes"): {"voteId": "v1", "storyId": "S1", "username": "A", "value": 4},
    ("POST", "/users/disconnect"): None,
}


@pytest.fixture
def requests(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, str]]:
    seen: list[tuple[str, str]] = []

    async def _request(
        self: JsonTransport,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Any = None,
    ) -> Any:
        seen.append((method, endpoint))
        return _ROUTES[(method, endpoint)]

    def _start(self: PushRuntime, config: SprintPokerConfig) -> None:
        self._client = _FakeMqttClient()  # type: ignore[assignment]
        self._topic = config.push_topic

    monkeypatch.setattr(JsonTransport, "request", _request)
    monkeypatch.setattr(PushRuntime, "start", _start)
    return seen


def _config() -> SprintPokerConfig:
    return SprintPokerConfig(session_id="sess", username="A")


@pytest.mark.asyncio
async def test_join_bootstraps_session(requests: list[tuple[str, str]]) -> None:
    async with SprintPokerClient(_config()) as client:
        store = await client.join()

        assert store.session is not None and store.session.sprint_name == "Sprint 1"
        assert store.cards == FIBONACCI_DECK
        assert [u.username for u in store.users] == ["A", "B"]
        assert store.current_story_id == "S1"
        assert len(store.votes) == 1
        assert store.get(EntityKind.USER, {"username": "B"}).vote == 5
        assert client.push_running

    assert requests[:4] == [
        ("GET", "/sessions/sess"),
        ("GET", "/users"),
        ("GET", "/stories"),
        ("GET", "/votes"),
    ]


@pytest.mark.asyncio
async def test_vote_and_push_echo(requests: list[tuple[str, str]]) -> None:
    async with SprintPokerClient(_config()) as client:
        await client.join()
        notified: list[object] = []
        client.subscribe(notified.append)

        result = await client.cast_vote(FIBONACCI_DECK[3])
        client._on_push_event(  # type: ignore[attr-defined]
            PushEvent(
                topic="sprint-poker/sessions/sess",
                payload={
                    "type": "VOTE_ADDED",
                    "data": {"voteId": "v1", "storyId": "S1", "username": "A", "value": 4},
                },
            )
        )

        store = client.store
        assert result.ok
        assert [v.vote_id for v in store.votes] == ["v5", "v1"]
        assert store.current_user.vote == 4
        assert notified


@pytest.mark.asyncio
async def test_unknown_push_event_ignored(
    requests: list[tuple[str, str]], caplog: pytest.LogCaptureFixture
) -> None:
    async with SprintPokerClient(_config()) as client:
        await client.join()
        notified: list[object] = []
        client.subscribe(notified.append)

        with caplog.at_level(logging.DEBUG, logger="pysprintpoker.client"):
            client._on_push_event(  # type: ignore[attr-defined]
                PushEvent(topic="sprint-poker/sessions/sess", payload={"type": "CHAT", "data": "hi"})
            )

        assert notified == []
        assert "Dropped push from topic=sprint-poker/sessions/sess" in caplog.text


@pytest.mark.asyncio
async def test_logout_stops_push(requests: list[tuple[str, str]]) -> None:
    async with SprintPokerClient(_config()) as client:
        await client.join()

        result = await client.logout()

        assert result.ok
        assert not client.push_running
        assert requests[-1] == ("POST", "/users/disconnect")


@pytest.mark.asyncio
async def test_actions_require_join(requests: list[tuple[str, str]]) -> None:
    async with SprintPokerClient(_config()) as client:
        with pytest.raises(SprintPokerStateError):
            await client.end_story()
        with pytest.raises(SprintPokerStateError):
            _ = client.store

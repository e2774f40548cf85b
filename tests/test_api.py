from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from pysprintpoker._api import stories as stories_api
from pysprintpoker._api import users as users_api
from pysprintpoker._api import votes as votes_api
from pysprintpoker._api.sessions import fetch_session
from pysprintpoker.exceptions import SprintPokerApiError, SprintPokerTransportError
from pysprintpoker.models.responses import ResponseStatus
from pysprintpoker.models.session import CardSet
from pysprintpoker.models.story import StoryDraft
from pysprintpoker.models.user import User
from pysprintpoker.models.vote import Vote


@dataclass
class _FakeTransport:
    body: Any = None
    error: Exception | None = None
    requests: list[tuple[str, str, Mapping[str, str] | None, Any]] = field(default_factory=list)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Any = None,
    ) -> Any:
        self.requests.append((method, endpoint, params, payload))
        if self.error is not None:
            raise self.error
        return self.body


@pytest.mark.asyncio
async def test_save_vote_sends_wire_payload() -> None:
    transport = _FakeTransport(body={"voteId": "v1", "storyId": "S1", "username": "A", "value": 3})

    result = await votes_api.save_vote(transport, Vote(story_id="S1", username="A", value=3))

    assert result.ok
    assert result.record is not None and result.record.vote_id == "v1"
    method, endpoint, _params, payload = transport.requests[0]
    assert (method, endpoint) == ("POST", "/votes")
    assert payload == {"storyId": "S1", "username": "A", "value": 3}


@pytest.mark.asyncio
async def test_http_error_becomes_ko() -> None:
    transport = _FakeTransport(error=SprintPokerApiError("HTTP 409 from /votes: conflict", status_code=409))

    result = await votes_api.save_vote(transport, Vote(story_id="S1", username="A", value=3))

    assert result.status == ResponseStatus.KO
    assert "conflict" in result.message


@pytest.mark.asyncio
async def test_ko_body_becomes_ko() -> None:
    transport = _FakeTransport(body={"status": "KO", "message": "story ended"})

    result = await stories_api.end_story(transport, "S1")

    assert not result.ok
    assert result.message == "story ended"
    assert transport.requests[0][:2] == ("POST", "/stories/S1/end")


@pytest.mark.asyncio
async def test_status_only_operations() -> None:
    transport = _FakeTransport(body=None)

    assert (await votes_api.delete_vote(transport, "v1")).ok
    assert (await stories_api.delete_story(transport, "S1")).ok
    assert (await users_api.disconnect_user(transport, User(username="A", session_id="sess"))).ok

    assert [r[:2] for r in transport.requests] == [
        ("DELETE", "/votes/v1"),
        ("DELETE", "/stories/S1"),
        ("POST", "/users/disconnect"),
    ]
    assert transport.requests[2][3] == {"username": "A", "sessionId": "sess"}


@pytest.mark.asyncio
async def test_transport_failure_propagates() -> None:
    transport = _FakeTransport(error=SprintPokerTransportError("timeout", endpoint="/votes"))

    with pytest.raises(SprintPokerTransportError):
        await votes_api.save_vote(transport, Vote(story_id="S1", username="A", value=3))


@pytest.mark.asyncio
async def test_malformed_record_raises() -> None:
    transport = _FakeTransport(body={"username": "A"})

    with pytest.raises(SprintPokerTransportError):
        await votes_api.save_vote(transport, Vote(story_id="S1", username="A", value=3))


@pytest.mark.asyncio
async def test_create_story() -> None:
    transport = _FakeTransport(body={"storyId": "S9", "storyName": "search", "order": 4, "sessionId": "sess"})

    result = await stories_api.create_story(transport, StoryDraft(session_id="sess", story_name="search", order=4))

    assert result.record is not None and result.record.story_id == "S9"
    assert transport.requests[0][3] == {"sessionId": "sess", "storyName": "search", "order": 4}


@pytest.mark.asyncio
async def test_fetch_stories_sorted_by_order() -> None:
    transport = _FakeTransport(
        body=[
            {"storyId": "S2", "order": 2},
            {"storyId": "S1", "order": 1},
        ]
    )

    stories = await stories_api.fetch_stories(transport, "sess")

    assert [s.story_id for s in stories] == ["S1", "S2"]
    assert transport.requests[0][2] == {"sessionId": "sess"}


@pytest.mark.asyncio
async def test_fetch_votes_and_users() -> None:
    transport = _FakeTransport(body=[{"voteId": "v1", "storyId": "S1", "username": "A", "value": 2}])
    votes = await votes_api.fetch_votes(transport, "S1")

    assert votes[0].value == 2
    assert transport.requests[0][2] == {"storyId": "S1"}

    transport.body = [{"username": "A"}, {"username": "B", "sessionId": "sess"}]
    users = await users_api.fetch_users(transport, "sess")

    assert [u.username for u in users] == ["A", "B"]


@pytest.mark.asyncio
async def test_fetch_session_unknown_card_set_falls_back() -> None:
    transport = _FakeTransport(body={"sessionId": "sess", "sprintName": "Sprint 12", "cardSet": "t-shirt"})

    info = await fetch_session(transport, "sess")

    assert info.card_set == CardSet.MODIFIED_FIBONACCI
    assert info.sprint_name == "Sprint 12"
    assert transport.requests[0][:2] == ("GET", "/sessions/sess")

"""HTTP implementation of the session backend used by the client."""

from __future__ import annotations

from pysprintpoker._api import sessions as _sessions_api
from pysprintpoker._api import stories as _stories_api
from pysprintpoker._api import users as _users_api
from pysprintpoker._api import votes as _votes_api
from pysprintpoker._transport import Transport
from pysprintpoker.models.responses import OperationResult
from pysprintpoker.models.session import SessionInfo
from pysprintpoker.models.story import Story, StoryDraft
from pysprintpoker.models.user import User
from pysprintpoker.models.vote import Vote


class HttpSessionBackend:
    """Binds the endpoint modules to one transport."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def fetch_session(self, session_id: str) -> SessionInfo:
        return await _sessions_api.fetch_session(self._transport, session_id)

    async def fetch_users(self, session_id: str) -> list[User]:
        return await _users_api.fetch_users(self._transport, session_id)

    async def disconnect_user(self, user: User) -> OperationResult[None]:
        return await _users_api.disconnect_user(self._transport, user)

    async def fetch_stories(self, session_id: str) -> list[Story]:
        return await _stories_api.fetch_stories(self._transport, session_id)

    async def create_story(self, draft: StoryDraft) -> OperationResult[Story]:
        return await _stories_api.create_story(self._transport, draft)

    async def delete_story(self, story_id: str) -> OperationResult[None]:
        return await _stories_api.delete_story(self._transport, story_id)

    async def end_story(self, story_id: str) -> OperationResult[None]:
        return await _stories_api.end_story(self._transport, story_id)

    async def fetch_votes(self, story_id: str) -> list[Vote]:
        return await _votes_api.fetch_votes(self._transport, story_id)

    async def save_vote(self, vote: Vote) -> OperationResult[Vote]:
        return await _votes_api.save_vote(self._transport, vote)

    async def delete_vote(self, vote_id: str) -> OperationResult[None]:
        return await _votes_api.delete_vote(self._transport, vote_id)

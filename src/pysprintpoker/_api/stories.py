"""Story endpoints.

Endpoints:
  - GET    /stories?sessionId=
  - POST   /stories
  - DELETE /stories/{storyId}
  - POST   /stories/{storyId}/end
"""

from __future__ import annotations

from pysprintpoker._api._common import call_operation, fetch_records
from pysprintpoker._constants import STORIES_ENDPOINT
from pysprintpoker._transport import Transport
from pysprintpoker.models.responses import OperationResult
from pysprintpoker.models.story import Story, StoryDraft


async def fetch_stories(transport: Transport, session_id: str) -> list[Story]:
    """Fetch the stories of a session, ordered by rank."""
    stories = await fetch_records(transport, STORIES_ENDPOINT, Story, params={"sessionId": session_id})
    return sorted(stories, key=lambda story: story.order)


async def create_story(transport: Transport, draft: StoryDraft) -> OperationResult[Story]:
    return await call_operation(transport, "POST", STORIES_ENDPOINT, payload=draft.to_wire(), model=Story)


async def delete_story(transport: Transport, story_id: str) -> OperationResult[None]:
    return await call_operation(transport, "DELETE", f"{STORIES_ENDPOINT}/{story_id}")


async def end_story(transport: Transport, story_id: str) -> OperationResult[None]:
    return await call_operation(transport, "POST", f"{STORIES_ENDPOINT}/{story_id}/end")

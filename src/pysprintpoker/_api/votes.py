"""Vote endpoints.

Endpoints:
  - GET    /votes?storyId=
  - POST   /votes      (create, or update when the payload carries a voteId)
  - DELETE /votes/{voteId}
"""

from __future__ import annotations

from pysprintpoker._api._common import call_operation, fetch_records
from pysprintpoker._constants import VOTES_ENDPOINT
from pysprintpoker._transport import Transport
from pysprintpoker.models.responses import OperationResult
from pysprintpoker.models.vote import Vote


async def fetch_votes(transport: Transport, story_id: str) -> list[Vote]:
    """Fetch the persisted votes of a story."""
    return await fetch_records(transport, VOTES_ENDPOINT, Vote, params={"storyId": story_id})


async def save_vote(transport: Transport, vote: Vote) -> OperationResult[Vote]:
    """Create or update a vote; the result carries the authoritative vote id."""
    return await call_operation(transport, "POST", VOTES_ENDPOINT, payload=vote.to_wire(), model=Vote)


async def delete_vote(transport: Transport, vote_id: str) -> OperationResult[None]:
    return await call_operation(transport, "DELETE", f"{VOTES_ENDPOINT}/{vote_id}")

"""Session endpoints.

Endpoints:
  - GET /sessions/{sessionId}
"""

from __future__ import annotations

from pysprintpoker._api._common import validate_record
from pysprintpoker._constants import SESSIONS_ENDPOINT
from pysprintpoker._transport import Transport
from pysprintpoker.models.session import SessionInfo


async def fetch_session(transport: Transport, session_id: str) -> SessionInfo:
    """Fetch the immutable session descriptor."""
    endpoint = f"{SESSIONS_ENDPOINT}/{session_id}"
    body = await transport.request("GET", endpoint)
    return validate_record(endpoint, SessionInfo, body)

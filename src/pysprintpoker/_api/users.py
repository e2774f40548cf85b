"""User endpoints.

Endpoints:
  - GET  /users?sessionId=
  - POST /users/disconnect
"""

from __future__ import annotations

from pysprintpoker._api._common import call_operation, fetch_records
from pysprintpoker._constants import USERS_ENDPOINT
from pysprintpoker._transport import Transport
from pysprintpoker.models.responses import OperationResult
from pysprintpoker.models.user import User


async def fetch_users(transport: Transport, session_id: str) -> list[User]:
    """Fetch the connected users of a session."""
    return await fetch_records(transport, USERS_ENDPOINT, User, params={"sessionId": session_id})


async def disconnect_user(transport: Transport, user: User) -> OperationResult[None]:
    """Disconnect *user* from its session."""
    return await call_operation(transport, "POST", f"{USERS_ENDPOINT}/disconnect", payload=user.to_wire())

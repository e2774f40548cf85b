"""JSON-over-HTTP transport for the sprint poker backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pysprintpoker._constants import USER_AGENT
from pysprintpoker.config import SprintPokerConfig
from pysprintpoker.exceptions import SprintPokerApiError, SprintPokerTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (:class:`JsonTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Any = None,
    ) -> Any:
        ...


def _error_message(text: str) -> str:
    """Extract the backend's error message from an error body, if any."""
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return text[:200]
    if isinstance(body, dict):
        for key in ("exception", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return text[:200]


class JsonTransport:
    """HTTP transport sending and receiving JSON documents."""

    def __init__(
        self,
        config: SprintPokerConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (``None`` when empty).

        Raises :class:`SprintPokerApiError` for non-2xx answers and
        :class:`SprintPokerTransportError` for network failures, timeouts and
        undecodable bodies.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        url = f"{self._config.base_url}{endpoint}"

        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                json=payload,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise SprintPokerApiError(
                        f"HTTP {resp.status} from {endpoint}: {_error_message(text)}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except SprintPokerApiError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise SprintPokerTransportError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SprintPokerTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

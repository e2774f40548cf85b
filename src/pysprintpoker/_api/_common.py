"""Shared helpers for backend endpoint modules.

This module centralizes the most repeated patterns:
- turning backend rejections into ``KO`` results
- validating returned records into typed models
- fetching record lists

It is internal to pysprintpoker and may change at any time.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pysprintpoker._transport import Transport
from pysprintpoker.exceptions import SprintPokerApiError, SprintPokerTransportError
from pysprintpoker.models.responses import OperationResult, ResponseStatus

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _is_rejection(body: Any) -> bool:
    if not isinstance(body, dict):
        return False
    status = body.get("status")
    return isinstance(status, str) and status.strip().upper() == ResponseStatus.KO


def validate_record(endpoint: str, model: type[M], body: Any) -> M:
    """Validate a response body into *model*."""
    if not isinstance(body, dict):
        raise SprintPokerTransportError(
            f"Unexpected response body from {endpoint}: {type(body).__name__}",
            endpoint=endpoint,
        )
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise SprintPokerTransportError(
            f"Malformed record from {endpoint}: {exc.error_count()} validation error(s)",
            endpoint=endpoint,
        ) from exc


async def call_operation(
    transport: Transport,
    method: str,
    endpoint: str,
    *,
    params: Mapping[str, str] | None = None,
    payload: Any = None,
    model: type[M] | None = None,
) -> OperationResult[M]:
    """Run a write operation and report its outcome as a status tag.

    Non-2xx answers and ``{"status": "KO"}`` bodies are rejections and come
    back as ``KO`` results.  Transport failures propagate.
    """
    try:
        body = await transport.request(method, endpoint, params=params, payload=payload)
    except SprintPokerApiError as exc:
        _logger.debug("%s %s rejected: %s", method, endpoint, exc)
        return OperationResult.rejected(str(exc))

    if _is_rejection(body):
        message = body.get("message") or body.get("exception") or ""
        _logger.debug("%s %s answered KO: %s", method, endpoint, message)
        return OperationResult.rejected(str(message))

    if model is None:
        return OperationResult.success()
    return OperationResult.success(validate_record(endpoint, model, body))


async def fetch_records(
    transport: Transport,
    endpoint: str,
    model: type[M],
    *,
    params: Mapping[str, str] | None = None,
) -> list[M]:
    """Fetch a list of records.  Any backend error propagates."""
    body = await transport.request("GET", endpoint, params=params)
    items = body if isinstance(body, list) else []
    return [validate_record(endpoint, model, item) for item in items]

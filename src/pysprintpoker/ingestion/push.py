"""Push-channel ingestion helpers.

Translates decoded push payloads (``{"type": ..., "data": ...}``) into
:class:`pysprintpoker.state.events.SessionEvent`.  Payloads with an unknown
tag or an unexpected shape are dropped here so that the reconciler only ever
sees well-formed events.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pysprintpoker.state.events import RECORD_EVENTS, EventType, SessionEvent

_logger = logging.getLogger(__name__)


class _PushEnvelope(BaseModel):
    """Minimal Pydantic envelope for push messages."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str = Field(...)
    data: Any = None


def _event_type(value: str) -> EventType | None:
    try:
        return EventType(value.strip().upper())
    except ValueError:
        return None


def _identity_value(data: Any) -> str | None:
    if isinstance(data, bool):
        return None
    if isinstance(data, (str, int)):
        text = str(data).strip()
        return text or None
    return None


def build_session_event(payload: dict[str, Any]) -> SessionEvent | None:
    """Build a session event from a push payload, or ``None`` when it cannot be applied."""
    try:
        envelope = _PushEnvelope.model_validate(payload)
    except ValidationError:
        _logger.debug("Dropping push payload without type: %s", payload)
        return None

    event_type = _event_type(envelope.type)
    if event_type is None:
        _logger.debug("Ignoring unknown push event type=%s", envelope.type)
        return None

    record_type = RECORD_EVENTS.get(event_type)
    if record_type is not None:
        if not isinstance(envelope.data, dict):
            _logger.debug("Dropping %s event without record payload", event_type)
            return None
        try:
            record = record_type.model_validate(envelope.data)
        except ValidationError:
            _logger.debug("Dropping malformed %s event", event_type, exc_info=True)
            return None
        return SessionEvent(type=event_type, data=record)

    identity = _identity_value(envelope.data)
    if identity is None:
        _logger.debug("Dropping %s event without identity", event_type)
        return None
    return SessionEvent(type=event_type, data=identity)

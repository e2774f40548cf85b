"""Internal push-channel payload parsing and MQTT runtime.

The broker delivers the events of one session on a single topic.  The
runtime connects in the background, subscribes on every (re)connect and
forwards decoded payloads to the asyncio loop that owns the store.
"""

from __future__ import annotations

import asyncio
import json
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from pysprintpoker.config import SprintPokerConfig
from pysprintpoker.exceptions import SprintPokerError

#: Backoff bounds (seconds) for automatic reconnects after a lost connection.
RECONNECT_MIN_DELAY = 1
RECONNECT_MAX_DELAY = 30


@dataclass(frozen=True)
class PushEvent:
    """Decoded push message as received on the session topic."""

    topic: str
    payload: dict[str, Any]


def _build_client_id(config: SprintPokerConfig) -> str:
    return f"sprint-poker_{config.session_id}_{config.username}_{secrets.token_hex(4)}"


def decode_push_payload(payload: bytes) -> dict[str, Any]:
    """Parse push payload bytes into a JSON object."""
    try:
        parsed = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SprintPokerError("Push payload is not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise SprintPokerError("Push payload decoded to non-object JSON")
    return parsed


class PushRuntime:
    """Session-topic subscriber running paho's network loop on its own thread.

    Connection loss is handled by paho's reconnect loop; the session topic is
    subscribed again after every successful connect.  Delivery is
    at-least-once, so duplicates after a reconnect are expected downstream.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_event: Callable[[PushEvent], None],
        keepalive: int = 60,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._on_event = on_event
        self._keepalive = keepalive
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._topic: str | None = None
        self._connected = False

    @property
    def is_running(self) -> bool:
        """Whether the network loop is active (connected or reconnecting)."""
        return self._client is not None

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def topic(self) -> str | None:
        return self._topic

    def start(self, config: SprintPokerConfig) -> None:
        """Start connecting to the broker; returns without waiting for the connection."""
        self.stop()
        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=_build_client_id(config),
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._logger)
        if config.push_tls:
            client.tls_set()
        client.reconnect_delay_set(min_delay=RECONNECT_MIN_DELAY, max_delay=RECONNECT_MAX_DELAY)
        client.on_connect = self._handle_connect
        client.on_subscribe = self._handle_subscribe
        client.on_message = self._handle_message
        client.on_disconnect = self._handle_disconnect

        self._topic = config.push_topic
        client.connect_async(config.push_host, config.push_port, keepalive=self._keepalive)
        client.loop_start()
        self._client = client
        self._logger.debug(
            "Push listener started broker=%s:%s topic=%s",
            config.push_host,
            config.push_port,
            self._topic,
        )

    def stop(self) -> None:
        """Disconnect and join the network thread; safe to call repeatedly."""
        client, self._client = self._client, None
        self._topic = None
        self._connected = False
        if client is None:
            return
        client.disconnect()
        client.loop_stop()
        self._logger.debug("Push listener stopped")

    # ------------------------------------------------------------------
    # paho callbacks (network thread)
    # ------------------------------------------------------------------

    def _handle_connect(
        self,
        client: mqtt.Client,
        _userdata: Any,
        _flags: Any,
        reason_code: Any,
        _properties: Any,
    ) -> None:
        if reason_code.is_failure:
            self._logger.warning("Push broker refused connection: %s", reason_code)
            return
        self._connected = True
        if self._topic:
            client.subscribe(self._topic, qos=1)

    def _handle_subscribe(
        self,
        _client: mqtt.Client,
        _userdata: Any,
        _mid: int,
        reason_codes: list[Any],
        _properties: Any,
    ) -> None:
        refused = [code for code in reason_codes if code.is_failure]
        if refused:
            self._logger.warning("Push subscription to %s refused: %s", self._topic, refused)
        else:
            self._logger.debug("Subscribed to %s", self._topic)

    def _handle_message(self, _client: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
        if msg.topic != self._topic:
            self._logger.debug("Ignoring push on foreign topic %s", msg.topic)
            return
        try:
            payload = decode_push_payload(msg.payload)
        except SprintPokerError:
            self._logger.debug("Undecodable push on %s", msg.topic, exc_info=True)
            return
        self._loop.call_soon_threadsafe(self._on_event, PushEvent(topic=msg.topic, payload=payload))

    def _handle_disconnect(
        self,
        _client: mqtt.Client,
        _userdata: Any,
        _flags: Any,
        reason_code: Any,
        _properties: Any,
    ) -> None:
        was_connected, self._connected = self._connected, False
        if was_connected and self._client is not None:
            self._logger.debug("Push connection lost (%s); reconnecting", reason_code)

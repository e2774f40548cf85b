"""Client configuration for pysprintpoker."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pysprintpoker.exceptions import SprintPokerConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class SprintPokerConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend REST base URL (no trailing slash).
    session_id : str
        Identifier of the estimation session to join.
    username : str
        Name of the local participant.  Must already be connected to the
        session (authentication is handled elsewhere).
    request_timeout : float
        Total timeout in seconds for a single backend request.
    push_enabled : bool
        Enable the MQTT push-event listener.
    push_host : str
        MQTT broker host.
    push_port : int
        MQTT broker port.
    push_keepalive : int
        MQTT keepalive in seconds.
    push_tls : bool
        Connect to the broker over TLS.
    push_topic_prefix : str
        Topic prefix; events for a session arrive on
        ``{push_topic_prefix}/{session_id}``.
    """

    session_id: str
    username: str
    base_url: str = "http://localhost:8080"
    request_timeout: float = 10.0
    push_enabled: bool = True
    push_host: str = "localhost"
    push_port: int = 1883
    push_keepalive: int = 60
    push_tls: bool = False
    push_topic_prefix: str = "sprint-poker/sessions"

    def __post_init__(self) -> None:
        for name in ("session_id", "username", "base_url"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise SprintPokerConfigError(f"{name} must be a non-empty string")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def push_topic(self) -> str:
        """Topic carrying the push events of the configured session."""
        return f"{self.push_topic_prefix.rstrip('/')}/{self.session_id}"

    @classmethod
    def from_env(cls, **overrides: Any) -> SprintPokerConfig:
        """Create configuration from environment variables.

        Reads ``SPRINT_POKER_SESSION_ID``, ``SPRINT_POKER_USERNAME`` and the
        optional ``SPRINT_POKER_*`` variables.  Explicit keyword arguments
        override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SPRINT_POKER_SESSION_ID": "session_id",
            "SPRINT_POKER_USERNAME": "username",
            "SPRINT_POKER_BASE_URL": "base_url",
            "SPRINT_POKER_PUSH_HOST": "push_host",
            "SPRINT_POKER_PUSH_TOPIC_PREFIX": "push_topic_prefix",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("SPRINT_POKER_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        port_env = env.get("SPRINT_POKER_PUSH_PORT")
        if port_env is not None and "push_port" not in overrides:
            config_kwargs["push_port"] = int(port_env)

        keepalive_env = env.get("SPRINT_POKER_PUSH_KEEPALIVE")
        if keepalive_env is not None and "push_keepalive" not in overrides:
            config_kwargs["push_keepalive"] = int(keepalive_env)

        if "push_enabled" not in overrides:
            config_kwargs["push_enabled"] = _env_bool(env.get("SPRINT_POKER_PUSH_ENABLED"), True)

        if "push_tls" not in overrides:
            config_kwargs["push_tls"] = _env_bool(env.get("SPRINT_POKER_PUSH_TLS"), False)

        config_kwargs.update(overrides)

        missing = [name for name in ("session_id", "username") if name not in config_kwargs]
        if missing:
            raise SprintPokerConfigError(f"Missing configuration: {', '.join(missing)}")

        return cls(**config_kwargs)

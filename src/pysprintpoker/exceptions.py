"""Custom exception hierarchy for pysprintpoker."""

from __future__ import annotations


class SprintPokerError(Exception):
    """Base exception for all pysprintpoker errors."""


class SprintPokerConfigError(SprintPokerError):
    """Invalid or missing configuration."""


class SprintPokerTransportError(SprintPokerError):
    """HTTP-level failure (network, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
    ) -> None:
        self.endpoint = endpoint
        super().__init__(message)


class SprintPokerApiError(SprintPokerError):
    """Backend answered with a non-2xx status.

    Endpoint functions translate this into a ``KO`` result; callers of the
    high-level client normally never see it.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class SprintPokerStateError(SprintPokerError):
    """Operation not possible in the current local state.

    Raised for misuse such as voting without an active story, or trying to
    mutate the fixed card deck.
    """

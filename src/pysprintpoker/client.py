"""High-level async client for a sprint poker session."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pysprintpoker._backend import HttpSessionBackend
from pysprintpoker._push import PushEvent, PushRuntime
from pysprintpoker._transport import JsonTransport
from pysprintpoker.config import SprintPokerConfig
from pysprintpoker.exceptions import SprintPokerError, SprintPokerStateError
from pysprintpoker.ingestion.push import build_session_event
from pysprintpoker.models.card import Card, deck_for
from pysprintpoker.models.responses import OperationResult
from pysprintpoker.models.statistics import VoteStatistics
from pysprintpoker.models.story import Story
from pysprintpoker.models.user import User
from pysprintpoker.models.vote import Vote
from pysprintpoker.state.identity import EntityKind
from pysprintpoker.state.optimistic import OptimisticMutator
from pysprintpoker.state.reconciler import EventReconciler
from pysprintpoker.state.store import EntityStore, Observer

_logger = logging.getLogger(__name__)


class SprintPokerClient:
    """Async client for one participant of an estimation session.

    Usage::

        async with SprintPokerClient(config) as client:
            await client.join()
            await client.select_card(client.store.cards[3])
    """

    def __init__(
        self,
        config: SprintPokerConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._backend: HttpSessionBackend | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._push_runtime: PushRuntime | None = None
        self._store: EntityStore | None = None
        self._reconciler: EventReconciler | None = None
        self._mutator: OptimisticMutator | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SprintPokerClient:
        self._loop = asyncio.get_running_loop()
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._backend = HttpSessionBackend(JsonTransport(self._config, self._http_session))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self._stop_push()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._backend = None
        self._loop = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_backend(self) -> HttpSessionBackend:
        if self._backend is None:
            raise SprintPokerError("Client not initialized. Use 'async with SprintPokerClient(...) as client:'")
        return self._backend

    def _require_mutator(self) -> OptimisticMutator:
        if self._mutator is None:
            raise SprintPokerStateError("Session not joined. Call 'await client.join()' first")
        return self._mutator

    @property
    def store(self) -> EntityStore:
        """Entity store of the joined session."""
        if self._store is None:
            raise SprintPokerStateError("Session not joined. Call 'await client.join()' first")
        return self._store

    @property
    def statistics(self) -> VoteStatistics:
        return self.store.statistics

    @property
    def loading(self) -> bool:
        """Whether a vote request is in flight."""
        return self._mutator is not None and self._mutator.loading

    @property
    def push_running(self) -> bool:
        return self._push_runtime is not None and self._push_runtime.is_running

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register a callback fired after every applied event or action."""
        return self.store.subscribe(observer)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def join(self) -> EntityStore:
        """Load the session snapshot and start listening for push events."""
        backend = self._require_backend()
        session_id = self._config.session_id

        info = await backend.fetch_session(session_id)
        store = EntityStore(
            session=info,
            cards=deck_for(info.card_set),
            current_username=self._config.username,
        )
        store.load(EntityKind.USER, await backend.fetch_users(session_id))
        store.load(EntityKind.STORY, await backend.fetch_stories(session_id))
        _logger.debug(
            "Joined session=%s card_set=%s users=%d stories=%d",
            session_id,
            info.card_set,
            len(store.users),
            len(store.stories),
        )

        self._store = store
        self._reconciler = EventReconciler(store)
        self._mutator = OptimisticMutator(store, backend)

        self._ensure_push_started()
        if store.stories:
            await self._mutator.set_current_story(store.stories[0])
        else:
            store.notify()
        return store

    async def logout(self) -> OperationResult[None]:
        """Disconnect the local user from the session."""
        backend = self._require_backend()
        user = self.store.current_user or User(
            username=self._config.username,
            session_id=self._config.session_id,
        )
        result = await backend.disconnect_user(user)
        if result.ok:
            self._stop_push()
        else:
            _logger.debug("Logout rejected user=%s: %s", user.username, result.message)
        return result

    # ------------------------------------------------------------------
    # Push channel
    # ------------------------------------------------------------------

    def _ensure_push_started(self) -> None:
        """Best-effort push startup (failures must not break the REST flow)."""
        if not self._config.push_enabled:
            return
        if self._push_runtime is not None and self._push_runtime.is_running:
            return
        loop = self._loop or asyncio.get_running_loop()
        try:
            runtime = PushRuntime(
                loop=loop,
                on_event=self._on_push_event,
                keepalive=self._config.push_keepalive,
                logger=_logger,
            )
            runtime.start(self._config)
            self._push_runtime = runtime
        except Exception:
            _logger.debug("Push startup failed", exc_info=True)

    def _stop_push(self) -> None:
        runtime = self._push_runtime
        self._push_runtime = None
        if runtime is not None:
            runtime.stop()

    def _on_push_event(self, event: PushEvent) -> None:
        """Handle a decoded push message (called on the event loop)."""
        reconciler = self._reconciler
        if reconciler is None:
            return
        session_event = build_session_event(event.payload)
        if session_event is None:
            _logger.debug("Dropped push from topic=%s", event.topic)
            return
        reconciler.apply(session_event)

    # ------------------------------------------------------------------
    # Local actions
    # ------------------------------------------------------------------

    async def select_card(self, card: Card) -> OperationResult[Vote] | OperationResult[None] | None:
        return await self._require_mutator().select_card(card)

    async def cast_vote(self, card: Card) -> OperationResult[Vote]:
        return await self._require_mutator().cast_vote(card)

    async def retract_vote(self) -> OperationResult[None]:
        return await self._require_mutator().retract_vote()

    async def add_story(self, name: str) -> OperationResult[Story] | None:
        return await self._require_mutator().add_story(name)

    async def remove_story(self, story: Story) -> OperationResult[None]:
        return await self._require_mutator().remove_story(story)

    async def end_story(self) -> OperationResult[None] | None:
        return await self._require_mutator().end_story()

    async def set_current_story(self, story: Story) -> None:
        await self._require_mutator().set_current_story(story)

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any
from uuid import UUID, uuid4

import redis

from roundtable.api.models import ActionKind, MatchSnapshot
from roundtable.core.events import MatchEvent
from roundtable.engine import GameEngine
from roundtable.match_setup import MatchConfig
from roundtable.presentation import ActionSlot, Presenter
from roundtable.settings import LoopSettings
from roundtable.streams import EventStream, publish_event
from roundtable.turn_loop import TurnLoop
from roundtable.websocket_hub import MatchWebSocketHub

logger = logging.getLogger(__name__)

# How long a cancelled worker gets to finish its in-flight action.
CANCEL_JOIN_SECONDS = 2.0


class WebPresenter(Presenter):
    """Presenter backed by the HTTP/WebSocket layer.

    The worker thread pushes snapshots, prompts and events in; request handlers
    read the latest snapshot and answer prompts via `submit()`. Events are fanned
    out to WebSocket clients and, when configured, a Redis Stream.
    """

    def __init__(
        self,
        *,
        match_id: UUID,
        hub: MatchWebSocketHub,
        event_loop: asyncio.AbstractEventLoop | None = None,
        r: redis.Redis | None = None,
        history: int = 100,
    ) -> None:
        self.match_id = match_id
        self._hub = hub
        self._event_loop = event_loop
        self._r = r
        self._stream = EventStream(match_id=str(match_id))

        self._cond = threading.Condition()
        self._snapshot: MatchSnapshot | None = None
        self._slot: ActionSlot | None = None
        self._legal: list[ActionKind] = []
        self.recent_events: deque[MatchEvent] = deque(maxlen=history)

    # ---- Presenter (worker thread) ----

    def show(self, snapshot: MatchSnapshot) -> None:
        snap = snapshot.model_copy(update={"match_id": self.match_id})
        with self._cond:
            self._snapshot = snap
        self._broadcast({"type": "snapshot", "snapshot": snap.model_dump(mode="json")})

    def prompt(self, snapshot: MatchSnapshot, legal_actions: list[ActionKind], slot: ActionSlot) -> None:
        with self._cond:
            self._snapshot = snapshot.model_copy(update={"match_id": self.match_id})
            self._slot = slot
            self._legal = list(legal_actions)
            self._cond.notify_all()
        self._broadcast(
            {
                "type": "action_requested",
                "turn": snapshot.turn,
                "legal_actions": [a.value for a in legal_actions],
            }
        )

    def notify(self, event: MatchEvent) -> None:
        with self._cond:
            self.recent_events.append(event)
        if self._r is not None:
            try:
                publish_event(r=self._r, stream=self._stream, event=event)
            except redis.RedisError:
                logger.exception("failed to publish %s event for match %s", event.type, self.match_id)
        self._broadcast(event.as_dict())

    # ---- request handlers ----

    def latest(self) -> MatchSnapshot | None:
        with self._cond:
            return self._snapshot

    def pending_actions(self) -> list[ActionKind]:
        """Legal actions of the open prompt, or [] when nothing is awaiting input."""

        with self._cond:
            if self._slot is None or self._slot.resolved:
                return []
            return list(self._legal)

    def wait_for_prompt(self, timeout: float) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._slot is not None and not self._slot.resolved, timeout=timeout)

    def submit(self, action: ActionKind) -> bool:
        """Answer the open prompt.

        Returns False when there is no open prompt (none yet, or already
        answered). Raises ValueError for an action outside the legal set.
        """

        with self._cond:
            slot = self._slot
            if slot is None or slot.resolved:
                return False
            if action not in self._legal:
                allowed = ",".join(a.value for a in self._legal)
                raise ValueError(f"Action '{action.value}' not allowed (allowed: {allowed})")
            return slot.fulfill(action)

    def _broadcast(self, payload: dict[str, Any]) -> None:
        loop = self._event_loop
        if loop is None or loop.is_closed():
            return
        future = asyncio.run_coroutine_threadsafe(self._hub.broadcast(str(self.match_id), payload), loop)
        future.add_done_callback(self._on_broadcast_done)

    def _on_broadcast_done(self, future: concurrent.futures.Future[None]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("broadcast for match %s failed", self.match_id, exc_info=exc)


@dataclass(slots=True)
class MatchSession:
    match_id: UUID
    config: MatchConfig
    engine: GameEngine
    presenter: WebPresenter
    loop: TurnLoop


class MatchRegistry:
    """In-process registry of running matches. Nothing is persisted."""

    def __init__(self, *, settings: LoopSettings | None = None, r: redis.Redis | None = None) -> None:
        self.settings = settings or LoopSettings()
        self.r = r
        self.hub = MatchWebSocketHub()
        self._lock = threading.Lock()
        self._sessions: dict[UUID, MatchSession] = {}

    def create(
        self,
        config: MatchConfig,
        *,
        event_loop: asyncio.AbstractEventLoop | None = None,
        match_id: UUID | None = None,
    ) -> MatchSession:
        """Build and start a match. Raises IllegalConfiguration for bad parameters."""

        return self._start(GameEngine.create(config), config, event_loop=event_loop, match_id=match_id or uuid4())

    def _start(
        self,
        engine: GameEngine,
        config: MatchConfig,
        *,
        event_loop: asyncio.AbstractEventLoop | None,
        match_id: UUID,
    ) -> MatchSession:
        presenter = WebPresenter(match_id=match_id, hub=self.hub, event_loop=event_loop, r=self.r)
        # Seed the presenter before the worker exists so readers never see None.
        presenter.show(engine.snapshot())

        loop = TurnLoop(engine, presenter, settings=self.settings, name=f"turn-loop-{match_id}")
        session = MatchSession(match_id=match_id, config=config, engine=engine, presenter=presenter, loop=loop)
        with self._lock:
            self._sessions[match_id] = session
        loop.start()
        logger.info("match %s started", match_id)
        return session

    def get(self, match_id: UUID) -> MatchSession | None:
        with self._lock:
            return self._sessions.get(match_id)

    def sessions(self) -> list[MatchSession]:
        with self._lock:
            return list(self._sessions.values())

    def cancel(self, match_id: UUID) -> bool:
        with self._lock:
            session = self._sessions.pop(match_id, None)
        if session is None:
            return False
        self._stop(session)
        return True

    def restart(self, match_id: UUID, *, event_loop: asyncio.AbstractEventLoop | None = None) -> MatchSession | None:
        """Cancel the running loop, reset its engine and start a new loop under the same id."""

        with self._lock:
            session = self._sessions.pop(match_id, None)
        if session is None:
            return None
        self._stop(session)
        if session.loop.running:
            # The old worker still holds the engine; give the match a fresh one.
            engine = GameEngine.create(session.config)
        else:
            engine = session.engine
            engine.reset()
        return self._start(engine, session.config, event_loop=event_loop, match_id=match_id)

    def shutdown(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            self._stop(session)

    @staticmethod
    def _stop(session: MatchSession) -> None:
        session.loop.cancel()
        if not session.loop.join(CANCEL_JOIN_SECONDS):
            logger.warning("match %s worker did not stop within %.1fs", session.match_id, CANCEL_JOIN_SECONDS)
        else:
            logger.info("match %s stopped", session.match_id)

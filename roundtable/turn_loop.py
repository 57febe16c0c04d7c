from __future__ import annotations

import logging
import threading

from roundtable.api.models import ActionKind
from roundtable.core.errors import ErrorKind
from roundtable.core.events import MatchEvent
from roundtable.engine import ActionOutcome, GameEngine
from roundtable.presentation import ActionSlot, Presenter
from roundtable.settings import LoopSettings

logger = logging.getLogger(__name__)


class TurnLoop:
    """Drives one match on a dedicated worker thread.

    The worker is the only thread that touches the engine. Each iteration it
    publishes a snapshot plus the legal actions, blocks on a fresh ActionSlot,
    applies the answer and pushes the resulting events and snapshot back.

    Cancellation is cooperative: `cancel()` sets a flag that is checked at the
    top of each iteration and after the pacing delay, and closes any pending
    slot. An action already being applied always completes.
    """

    def __init__(
        self,
        engine: GameEngine,
        presenter: Presenter,
        *,
        settings: LoopSettings | None = None,
        name: str = "turn-loop",
    ) -> None:
        self.engine = engine
        self.presenter = presenter
        self.settings = settings or LoopSettings()
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._slot: ActionSlot | None = None
        self._thread = threading.Thread(target=self.run, name=name, daemon=True)

    # ---- lifecycle ----

    def start(self) -> None:
        logger.info("starting %s", self._thread.name)
        self._thread.start()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled.set()
            slot = self._slot
        if slot is not None:
            slot.close()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker to exit. Returns True if it has."""

        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    # ---- worker ----

    def run(self) -> None:
        try:
            self._run()
        except Exception:
            logger.exception("%s crashed", self._thread.name)
            raise
        finally:
            with self._lock:
                self._slot = None

    def _run(self) -> None:
        self.presenter.show(self.engine.snapshot())

        while not self.engine.is_terminal:
            slot = ActionSlot()
            with self._lock:
                if self._cancelled.is_set():
                    break
                self._slot = slot

            action = self._request_action(slot)
            if action is None or self._cancelled.is_set():
                break

            outcome = self.engine.apply(action)
            self._publish(outcome)

            if outcome.ok and not self.engine.is_terminal:
                if self._cancelled.wait(self.settings.pace_seconds):
                    break

        logger.info(
            "%s stopped (terminal=%s, cancelled=%s)",
            self._thread.name,
            self.engine.is_terminal,
            self.cancelled,
        )

    def _request_action(self, slot: ActionSlot) -> ActionKind | None:
        """Block until the presenter answers; fall back to the default action.

        Returns None only when the loop was cancelled while waiting.
        """

        snapshot = self.engine.snapshot()
        try:
            self.presenter.prompt(snapshot, list(snapshot.legal_actions), slot)
            action = slot.wait(self.settings.input_timeout_seconds)
        except Exception as e:
            logger.exception("presenter failed while prompting for an action")
            action = None
            reason = f"Input channel failed: {e}"
        else:
            reason = "Input channel closed or timed out"

        if action is not None:
            return action
        if self._cancelled.is_set():
            return None

        default = self.settings.default_action
        logger.warning("no action supplied on turn %d; defaulting to %s", self.engine.state.turn, default.value)
        self.presenter.notify(
            MatchEvent.now(
                type="error",
                turn=self.engine.state.turn,
                payload={
                    "action": default.value,
                    "kind": ErrorKind.input_channel_failure.value,
                    "reason": reason,
                },
            )
        )
        return default

    def _publish(self, outcome: ActionOutcome) -> None:
        for event in outcome.events:
            self.presenter.notify(event)
        self.presenter.show(self.engine.snapshot())

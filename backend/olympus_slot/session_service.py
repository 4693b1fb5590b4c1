"""Holder for the single in-memory play session served by the API."""
import logging
from typing import Any

from olympus_slot.config import Settings, settings as default_settings
from olympus_slot.display import EventQueueDisplay
from olympus_slot.errors import ErrorCode, GameError
from olympus_slot.logic.controller import GameStateController
from olympus_slot.logic.rng import SeededRNG
from olympus_slot.logic.scheduler import AsyncioScheduler, Scheduler
from olympus_slot.messages import MessageCatalog


logger = logging.getLogger(__name__)


class SessionService:
    """
    Creates, replaces and tears down the play session.

    There is exactly one session per process; reset() is the equivalent of
    reloading the page and discards all state.
    """

    def __init__(self, settings: Settings | None = None, scheduler: Scheduler | None = None):
        self.settings = settings or default_settings
        self.scheduler = scheduler
        self._controller: GameStateController | None = None
        self._display: EventQueueDisplay | None = None
        self._messages: MessageCatalog | None = None

    def start(self, seed: int | None = None) -> GameStateController:
        """Start a fresh session, replacing any existing one."""
        self.close()
        if self._messages is None:
            self._messages = MessageCatalog.load(
                self.settings.locale, self.settings.tutor_lines_path
            )
        if seed is None:
            seed = self.settings.rng_seed
        rng = SeededRNG(seed=seed) if seed is not None else None

        self._display = EventQueueDisplay()
        self._controller = GameStateController(
            settings=self.settings,
            rng=rng,
            scheduler=self.scheduler or AsyncioScheduler(),
            display=self._display,
            messages=self._messages,
        )
        self._controller.start()
        logger.info("Session %s started (seed=%s)", self._controller.session_id, seed)
        return self._controller

    def close(self) -> None:
        """Stop the current session's timers."""
        if self._controller is not None:
            self._controller.stop()
            self._controller = None
            self._display = None

    @property
    def controller(self) -> GameStateController:
        """Current session; SESSION_NOT_STARTED outside the app lifespan."""
        if self._controller is None:
            raise GameError(ErrorCode.SESSION_NOT_STARTED, "No session is running")
        return self._controller

    def drain_events(self) -> list[dict[str, Any]]:
        """Display events queued since the last poll."""
        if self._display is None:
            return []
        return self._display.drain()


# Global instance
session_service = SessionService()

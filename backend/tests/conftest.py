"""Pytest fixtures for backend tests."""
from typing import Any, Callable, Generator

import pytest
from fastapi.testclient import TestClient

from olympus_slot.config import Settings
from olympus_slot.display import EventQueueDisplay
from olympus_slot.logic.controller import GameStateController
from olympus_slot.logic.rng import RNGBase, SeededRNG
from olympus_slot.logic.scheduler import VirtualScheduler
from olympus_slot.messages import MessageCatalog
from olympus_slot.telemetry import TelemetryService


# Last reel stop (3.5s) plus the resolve delay, with room to spare
SPIN_SETTLE_S = 4.0


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (many simulated sessions)"
    )


class ScriptedRNG(RNGBase):
    """
    RNG whose random() returns queued values first.

    randint() and random() past the script come from a seeded source, so
    tests can force the win/loss draw without scripting reel positions.
    """

    def __init__(self, randoms: list[float] | None = None, seed: int = 0):
        self._randoms = list(randoms or [])
        self._fallback = SeededRNG(seed=seed)

    def push(self, *values: float) -> None:
        self._randoms.extend(values)

    def random(self) -> float:
        if self._randoms:
            return self._randoms.pop(0)
        return self._fallback.random()

    def randint(self, a: int, b: int) -> int:
        return self._fallback.randint(a, b)


class RecordingTelemetrySink:
    """Telemetry sink that keeps every event."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        self.events.append((event_name, data))

    def get_events(self, event_name: str) -> list[dict[str, Any]]:
        return [data for name, data in self.events if name == event_name]


def messages_of(display: EventQueueDisplay, channel: str | None = None) -> list[dict[str, Any]]:
    """Message events, optionally for one channel."""
    return [
        e for e in display.events
        if e["type"] == "message" and (channel is None or e["channel"] == channel)
    ]


def tutor_keys(display: EventQueueDisplay) -> list[str]:
    return [e["key"] for e in messages_of(display, "tutor")]


@pytest.fixture
def game_settings() -> Settings:
    """Default game settings, independent of the environment."""
    return Settings(
        starting_credits=1000,
        cost_per_spin=60,
        max_spins=15,
        rng_seed=None,
        locale="en",
        tutor_lines_path=None,
    )


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def display() -> EventQueueDisplay:
    return EventQueueDisplay()


@pytest.fixture
def telemetry_sink() -> RecordingTelemetrySink:
    return RecordingTelemetrySink()


@pytest.fixture
def messages() -> MessageCatalog:
    return MessageCatalog.load("en")


@pytest.fixture
def make_controller(
    game_settings: Settings,
    scheduler: VirtualScheduler,
    display: EventQueueDisplay,
    telemetry_sink: RecordingTelemetrySink,
    messages: MessageCatalog,
) -> Callable[..., GameStateController]:
    """Factory for controllers on a virtual clock with recording collaborators."""

    def _make(rng: RNGBase | None = None, settings: Settings | None = None) -> GameStateController:
        return GameStateController(
            settings=settings or game_settings,
            rng=rng or SeededRNG(seed=42),
            scheduler=scheduler,
            display=display,
            messages=messages,
            telemetry=TelemetryService(sink=telemetry_sink),
            session_id="test-session",
        )

    return _make


@pytest.fixture
def client_with_virtual_session() -> Generator[tuple[TestClient, VirtualScheduler], None, None]:
    """TestClient whose session runs on a virtual clock the test advances."""
    from olympus_slot.main import app
    from olympus_slot.session_service import session_service

    original_scheduler = session_service.scheduler
    virtual = VirtualScheduler()
    session_service.scheduler = virtual

    with TestClient(app) as client:
        yield client, virtual

    session_service.scheduler = original_scheduler

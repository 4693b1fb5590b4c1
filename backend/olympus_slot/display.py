"""Display capability the engine drives, and its default implementations."""
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class Cue(str, Enum):
    """Discrete points an audio/animation player can hook."""

    SPIN_START = "spin_start"
    REEL_STOP = "reel_stop"
    WIN = "win"
    LOSE = "lose"


class Channel(str, Enum):
    """Where a message is meant to appear."""

    TUTOR = "tutor"
    RESULT = "result"
    MODAL = "modal"
    REALITY_CHECK = "reality_check"
    CASHOUT = "cashout"


@dataclass(frozen=True)
class SessionStats:
    """Numbers the stats panel shows."""

    credits: int
    spin_count: int
    wins: int
    losses: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DisplayMessage:
    """A resolved message ready to show."""

    channel: Channel
    key: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"channel": self.channel.value, "key": self.key, "text": self.text}


class SessionDisplay(Protocol):
    """Everything the engine asks of a front end."""

    def update_stats(self, stats: SessionStats) -> None:
        ...

    def set_controls_enabled(self, spin_enabled: bool, cashout_enabled: bool) -> None:
        ...

    def show_message(self, message: DisplayMessage) -> None:
        ...

    def render_history(self, history: list[int]) -> None:
        ...

    def show_payouts(self, payouts: dict[str, int]) -> None:
        ...

    def show_educational_info(self, phase: int, odds: float, text: str) -> None:
        ...

    def play_cue(self, cue: Cue, data: dict[str, Any]) -> None:
        ...

    def session_ended(self, cause: str) -> None:
        ...


class LoggingDisplay:
    """Headless display that logs what it would show."""

    def update_stats(self, stats: SessionStats) -> None:
        logger.debug("stats %s", stats.to_dict())

    def set_controls_enabled(self, spin_enabled: bool, cashout_enabled: bool) -> None:
        logger.debug("controls spin=%s cashout=%s", spin_enabled, cashout_enabled)

    def show_message(self, message: DisplayMessage) -> None:
        logger.info("[%s] %s", message.channel.value, message.text)

    def render_history(self, history: list[int]) -> None:
        logger.info("credit history %s", history)

    def show_payouts(self, payouts: dict[str, int]) -> None:
        logger.debug("payouts %s", payouts)

    def show_educational_info(self, phase: int, odds: float, text: str) -> None:
        logger.debug("education: %s", text)

    def play_cue(self, cue: Cue, data: dict[str, Any]) -> None:
        logger.debug("cue %s %s", cue.value, data)

    def session_ended(self, cause: str) -> None:
        logger.info("session ended: %s", cause)


class EventQueueDisplay:
    """
    Display that queues every call as a plain dict.

    A remote front end polls drain() to replay them in order.
    """

    def __init__(self) -> None:
        self._events: list[dict[str, Any]] = []

    def _push(self, event_type: str, **data: Any) -> None:
        self._events.append({"type": event_type, **data})

    def update_stats(self, stats: SessionStats) -> None:
        self._push("stats", **stats.to_dict())

    def set_controls_enabled(self, spin_enabled: bool, cashout_enabled: bool) -> None:
        self._push("controls", spinEnabled=spin_enabled, cashoutEnabled=cashout_enabled)

    def show_message(self, message: DisplayMessage) -> None:
        self._push("message", **message.to_dict())

    def render_history(self, history: list[int]) -> None:
        self._push("history", creditHistory=list(history))

    def show_payouts(self, payouts: dict[str, int]) -> None:
        self._push("payouts", payouts=dict(payouts))

    def show_educational_info(self, phase: int, odds: float, text: str) -> None:
        self._push("education", phase=phase, odds=odds, text=text)

    def play_cue(self, cue: Cue, data: dict[str, Any]) -> None:
        self._push("cue", cue=cue.value, **data)

    def session_ended(self, cause: str) -> None:
        self._push("sessionEnded", cause=cause)

    @property
    def events(self) -> list[dict[str, Any]]:
        return list(self._events)

    def drain(self) -> list[dict[str, Any]]:
        events, self._events = self._events, []
        return events


class DisplayBridge:
    """
    Forwards engine calls to a display without letting it break the session.

    A failing display is counted and logged; the spin carries on.
    """

    def __init__(self, display: SessionDisplay | None = None):
        self._display = display or LoggingDisplay()
        self._errors = 0

    @property
    def display(self) -> SessionDisplay:
        return self._display

    @property
    def error_count(self) -> int:
        return self._errors

    def call(self, method: str, *args: Any) -> None:
        try:
            getattr(self._display, method)(*args)
        except Exception as e:
            self._errors += 1
            logger.warning(
                "Display error (count=%d): %s - %s",
                self._errors,
                method,
                str(e),
            )

"""Timer abstraction for reel animation, hand-off and reality checks."""
import asyncio
import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol


logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Anything with cancel(); asyncio.TimerHandle qualifies."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Runs callbacks at a later (real or virtual) time on one logical thread."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        ...

    def time(self) -> float:
        """Current time in seconds on this scheduler's clock."""
        ...


@dataclass(order=True)
class _VirtualTimer:
    when: float
    seq: int
    callback: Callable[..., Any] = field(compare=False)
    args: tuple[Any, ...] = field(compare=False, default=())
    cancelled: bool = field(compare=False, default=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """
    Deterministic scheduler driven by advance().

    Callbacks due at the same instant run in the order they were scheduled.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[_VirtualTimer] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> _VirtualTimer:
        timer = _VirtualTimer(self._now + max(delay, 0.0), next(self._seq), callback, args)
        heapq.heappush(self._queue, timer)
        return timer

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every timer that comes due. Returns the count run."""
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0].when <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = timer.when
            timer.callback(*timer.args)
            ran += 1
        self._now = target
        return ran

    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)


class AsyncioScheduler:
    """Schedules on the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay, callback, *args)

    def time(self) -> float:
        return time.time()


@dataclass(frozen=True)
class SequenceStep:
    """One step of a timed sequence; at is seconds from sequence start."""

    name: str
    at: float
    callback: Callable[[], Any]


class TimedSequence:
    """
    A finite chain of steps run strictly in order.

    Only the first step is scheduled up front; each step schedules its
    successor after running, so a later step can never fire before an
    earlier one.
    """

    def __init__(self, scheduler: Scheduler, steps: list[SequenceStep]):
        if any(b.at < a.at for a, b in zip(steps, steps[1:])):
            raise ValueError("sequence steps must be in non-decreasing time order")
        self._scheduler = scheduler
        self._steps = steps
        self._position = 0

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self._steps]

    def start(self) -> None:
        if self._steps:
            self._scheduler.call_later(self._steps[0].at, self._run_step)

    def _run_step(self) -> None:
        step = self._steps[self._position]
        logger.debug("sequence step %s at +%.2fs", step.name, step.at)
        step.callback()
        self._position += 1
        if self._position < len(self._steps):
            nxt = self._steps[self._position]
            self._scheduler.call_later(nxt.at - step.at, self._run_step)

"""Cooperative timers and animation frames.

Everything in chronoglobe runs on one thread. Timers (hide debounce, pitch
recentering) and the per-frame auto-rotation callback go through a Scheduler
so the same code runs against a real asyncio loop or a virtual clock in tests.
"""

import abc
import asyncio
import heapq
import itertools
from collections.abc import Callable

Callback = Callable[[], None]


class TimerHandle:
    """Handle for a scheduled callback. cancel() is idempotent."""

    def __init__(self, callback: Callback) -> None:
        self._callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def _fire(self) -> None:
        if not self.pending:
            return
        self.fired = True
        self._callback()


class Scheduler(abc.ABC):
    """Base class for timer/frame schedulers."""

    @abc.abstractmethod
    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        """Run callback once after delay_ms milliseconds."""
        ...

    @abc.abstractmethod
    def request_frame(self, callback: Callback) -> TimerHandle:
        """Run callback once on the next animation frame."""
        ...

    @abc.abstractmethod
    def now_ms(self) -> float:
        ...


class ManualScheduler(Scheduler):
    """Virtual clock. Time only moves when advance() or run_frames() is called."""

    def __init__(self, frame_ms: float = 1000 / 60) -> None:
        self.frame_ms = frame_ms
        self._now = 0.0
        self._seq = itertools.count()
        self._timers: list[tuple[float, int, TimerHandle]] = []
        self._frames: list[TimerHandle] = []

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback)
        heapq.heappush(self._timers, (self._now + max(0.0, delay_ms), next(self._seq), handle))
        return handle

    def request_frame(self, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback)
        self._frames.append(handle)
        return handle

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, h in self._timers if h.pending)

    @property
    def pending_frames(self) -> int:
        return sum(1 for h in self._frames if h.pending)

    def advance(self, ms: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self._now + ms
        while self._timers and self._timers[0][0] <= target:
            due, _, handle = heapq.heappop(self._timers)
            self._now = due
            handle._fire()
        self._now = target

    def run_frames(self, count: int = 1) -> None:
        """Run `count` animation frames, advancing the clock one frame each."""
        for _ in range(count):
            self.advance(self.frame_ms)
            frames, self._frames = self._frames, []
            for handle in frames:
                handle._fire()


class _AsyncioHandle(TimerHandle):
    def __init__(self, callback: Callback) -> None:
        super().__init__(callback)
        self.loop_handle: asyncio.TimerHandle | None = None

    def cancel(self) -> None:
        super().cancel()
        if self.loop_handle is not None:
            self.loop_handle.cancel()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop. Frames run at `fps`."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, fps: int = 60) -> None:
        self.loop = loop or asyncio.get_running_loop()
        self.frame_s = 1.0 / fps

    def now_ms(self) -> float:
        return self.loop.time() * 1000

    def _schedule(self, delay_s: float, callback: Callback) -> TimerHandle:
        handle = _AsyncioHandle(callback)
        handle.loop_handle = self.loop.call_later(delay_s, handle._fire)
        return handle

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        return self._schedule(max(0.0, delay_ms) / 1000, callback)

    def request_frame(self, callback: Callback) -> TimerHandle:
        return self._schedule(self.frame_s, callback)

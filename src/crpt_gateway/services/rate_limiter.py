from __future__ import annotations

import enum
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class LimiterShutdown(Exception):
    pass


class TimeUnit(enum.Enum):
    MILLISECOND = 0.001
    SECOND = 1.0
    MINUTE = 60.0
    HOUR = 3600.0
    DAY = 86400.0

    @property
    def seconds(self) -> float:
        return self.value

    @classmethod
    def parse(cls, name: str) -> TimeUnit:
        """
        Accepts "second", "SECONDS", "minute", ... (case-insensitive, optional plural).
        """
        key = name.strip().upper()
        if key.endswith("S"):
            key = key[:-1]
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown time unit: {name!r}") from None


@dataclass(frozen=True)
class LimiterSnapshot:
    capacity: int
    available: int
    window_s: float
    waiting: int
    windows_elapsed: int
    closed: bool


class WindowLimiter:
    """
    Fixed-window admission control shared by any number of threads.

    At most ``capacity`` permits are granted per window. A dedicated ticker
    thread restores ``available`` to ``capacity`` every ``window_s`` seconds,
    counted from construction rather than from the last call. Unused permits
    do not roll over into the next window, so a burst of up to
    ``2 * capacity`` is possible around a boundary.

    Blocked callers are served in arrival order. After shutdown() every
    blocked and future acquire raises LimiterShutdown.
    """

    def __init__(self, capacity: int, window_s: float, *, autostart: bool = True) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if window_s <= 0:
            raise ValueError("window_s must be positive")

        self._capacity = int(capacity)
        self._window_s = float(window_s)

        self._cond = threading.Condition(threading.Lock())
        self._available = self._capacity
        self._waiters: deque[object] = deque()
        self._windows_elapsed = 0
        self._closed = False

        self._stop = threading.Event()
        self._started_at = time.monotonic()
        self._ticker: threading.Thread | None = None
        if autostart:
            self._ticker = threading.Thread(
                target=self._run_ticker,
                name="window-limiter-ticker",
                daemon=True,
            )
            self._ticker.start()

        logger.info(
            "Window limiter started capacity=%d window_s=%.3f autostart=%s",
            self._capacity,
            self._window_s,
            autostart,
        )

    @classmethod
    def for_time_unit(cls, unit: TimeUnit | str, request_limit: int, *, autostart: bool = True) -> WindowLimiter:
        if isinstance(unit, str):
            unit = TimeUnit.parse(unit)
        return cls(request_limit, unit.seconds, autostart=autostart)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window_s(self) -> float:
        return self._window_s

    @property
    def available(self) -> int:
        with self._cond:
            return self._available

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def snapshot(self) -> LimiterSnapshot:
        with self._cond:
            return LimiterSnapshot(
                capacity=self._capacity,
                available=self._available,
                window_s=self._window_s,
                waiting=len(self._waiters),
                windows_elapsed=self._windows_elapsed,
                closed=self._closed,
            )

    def acquire(self) -> None:
        """
        Block until a permit is granted. Raises LimiterShutdown once the limiter is shut down.
        """
        self.try_acquire(None)

    def try_acquire(self, timeout: float | None = None) -> bool:
        """
        Wait at most ``timeout`` seconds for a permit.

        Returns True when a permit was consumed, False when the wait expired.
        ``timeout=None`` waits without bound, ``timeout=0`` never waits.
        """
        deadline = None if timeout is None else time.monotonic() + max(0.0, timeout)
        ticket = object()

        with self._cond:
            if self._closed:
                raise LimiterShutdown("Window limiter is shut down")

            # fast path only when nobody is queued ahead of us
            if not self._waiters and self._available > 0:
                self._available -= 1
                return True

            self._waiters.append(ticket)
            try:
                while True:
                    if self._closed:
                        raise LimiterShutdown("Window limiter is shut down")

                    if self._waiters[0] is ticket and self._available > 0:
                        self._waiters.popleft()
                        self._available -= 1
                        if self._available > 0 and self._waiters:
                            self._cond.notify_all()
                        return True

                    if deadline is None:
                        self._cond.wait()
                    else:
                        remaining = deadline - time.monotonic()
                        if remaining <= 0:
                            return False
                        self._cond.wait(remaining)
            finally:
                # timed out or shut down while still queued
                if ticket in self._waiters:
                    self._waiters.remove(ticket)
                    self._cond.notify_all()

    def tick(self) -> None:
        """
        Start a new window: restore ``available`` to ``capacity`` and wake waiters.

        Called by the ticker thread; a no-op after shutdown.
        """
        with self._cond:
            if self._closed:
                return
            self._available = self._capacity
            self._windows_elapsed += 1
            if self._waiters:
                self._cond.notify_all()
            waiting = len(self._waiters)

        logger.debug("Window limiter tick window=%d waiting=%d", self._windows_elapsed, waiting)

    def shutdown(self, timeout: float | None = 5.0) -> None:
        with self._cond:
            if self._closed:
                return
            self._closed = True
            waiting = len(self._waiters)
            self._cond.notify_all()

        self._stop.set()
        ticker = self._ticker
        if ticker is not None and ticker is not threading.current_thread():
            ticker.join(timeout)

        logger.info("Window limiter shut down released_waiters=%d", waiting)

    def _run_ticker(self) -> None:
        next_tick = self._started_at + self._window_s
        while not self._stop.wait(max(0.0, next_tick - time.monotonic())):
            self.tick()
            next_tick += self._window_s

            now = time.monotonic()
            if next_tick <= now:
                skipped = int((now - next_tick) // self._window_s) + 1
                logger.warning("Window limiter ticker fell behind, skipping %d tick(s)", skipped)
                next_tick += skipped * self._window_s

    def __enter__(self) -> WindowLimiter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

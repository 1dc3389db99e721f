"""Tick scheduler -- turns wall-clock time into logical TICK events.

The scheduler owns at most one pending ``loop.call_later`` handle.  It never
reacts to commands directly; the host calls :meth:`TickScheduler.sync` after
every effective transition and the scheduler compares the current phase with
what it holds.  That makes repeated starts idempotent by construction.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Callable, Optional

from quiztimer.core.machine import TimerState

logger = logging.getLogger(__name__)

TICK_INTERVAL = 1.0

# A firing this close to its deadline (as a fraction of the interval) counts
# as on time; event loops may run a callback up to one clock resolution early.
_EARLY_FIRE_TOLERANCE = 0.05


class TickScheduler:
    """Feeds one tick per elapsed interval to the host while it is running.

    Each firing re-reads the state at fire time, so a tick scheduled before
    a pause or reset is discarded instead of mutating a stopped timer.  The
    number of ticks fed per firing is corrected against ``clock() -
    started_at``: a late firing catches up, an early one is suppressed.
    """

    def __init__(
        self,
        state_provider: Callable[[], TimerState],
        on_tick: Callable[[], None],
        *,
        interval: float = TICK_INTERVAL,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._state_provider = state_provider
        self._on_tick = on_tick
        self._interval = interval
        self._loop = loop
        self._clock = clock

        self._handle: Optional[asyncio.Handle] = None
        self._armed = False
        self._generation = 0
        self._anchor = 0.0
        self._delivered = 0
        self._closed = False

    # -- public interface ----------------------------------------------------

    @property
    def active(self) -> bool:
        """True while a repeating callback is held."""
        return self._armed

    @property
    def closed(self) -> bool:
        return self._closed

    def sync(self) -> None:
        """Acquire or release the repeating callback to match the phase."""
        state = self._state_provider()
        if not state.is_running or self._closed:
            self._release()
            return
        if self._armed and self._anchor == state.started_at:
            return
        self._release()
        self._acquire(state.started_at)

    def close(self) -> None:
        """Release the callback for good; later syncs never re-acquire."""
        self._release()
        self._closed = True

    def __enter__(self) -> TickScheduler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- private helpers -----------------------------------------------------

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _acquire(self, anchor: float) -> None:
        self._event_loop()
        self._generation += 1
        self._armed = True
        self._anchor = anchor
        self._delivered = 0
        logger.debug("tick interval acquired (generation %d)", self._generation)
        self._schedule_next()

    def _release(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._armed:
            logger.debug("tick interval released (generation %d)", self._generation)
        self._armed = False
        self._generation += 1

    def _schedule_next(self) -> None:
        deadline = self._anchor + (self._delivered + 1) * self._interval
        delay = max(0.0, deadline - self._clock())
        self._handle = self._event_loop().call_later(delay, self._fire, self._generation)

    def _due_ticks(self) -> int:
        elapsed = self._clock() - self._anchor
        expected = math.floor(elapsed / self._interval + _EARLY_FIRE_TOLERANCE)
        return expected - self._delivered

    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._handle = None
        if not self._state_provider().is_running:
            logger.debug("discarding tick for a timer that is no longer running")
            self._release()
            return

        due = self._due_ticks()
        if due > 1:
            logger.info("tick scheduler fell behind, catching up %d ticks", due - 1)
        elif due <= 0:
            logger.debug("suppressing early firing")

        for _ in range(max(0, due)):
            self._delivered += 1
            self._on_tick()
            if generation != self._generation:
                return
            if not self._state_provider().is_running:
                self._release()
                return

        self._schedule_next()

"""Timer session -- the object a quiz or session view holds on to.

Wires a :class:`TimerStateMachine` to a :class:`TickScheduler`, exposes the
start/pause/resume/reset commands and reports transitions through optional
callbacks.  All callbacks run synchronously in command or scheduler context.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from quiztimer.core.config import TimerConfiguration
from quiztimer.core.machine import (
    Pause,
    Reset,
    Resume,
    Start,
    Tick,
    TimerEvent,
    TimerPhase,
    TimerState,
    TimerStateMachine,
)
from quiztimer.core.scheduler import TICK_INTERVAL, TickScheduler
from quiztimer.core.thresholds import (
    TimerStatus,
    evaluate_status,
    format_time,
    progress_percentage,
    status_label,
)

logger = logging.getLogger(__name__)

Callback = Optional[Callable[[], None]]


class TimerSession:
    """A single countdown or stopwatch owned by one view.

    Commands that are not valid from the current phase are no-ops and return
    ``False``.  Use the session as a context manager (or call :meth:`close`)
    so the pending tick callback is cancelled when the view goes away.

    Unless *loop* is given, the session must be started from inside a running
    asyncio event loop.
    """

    def __init__(
        self,
        config: TimerConfiguration,
        *,
        on_start: Callback = None,
        on_pause: Callback = None,
        on_resume: Callback = None,
        on_reset: Callback = None,
        on_tick: Optional[Callable[[int], None]] = None,
        on_time_up: Callback = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        clock: Callable[[], float] = time.monotonic,
        interval: float = TICK_INTERVAL,
    ) -> None:
        self._config = config
        self._machine = TimerStateMachine(config)
        self._state: TimerState = self._machine.initial_state()
        self._clock = clock

        self._on_start = on_start
        self._on_pause = on_pause
        self._on_resume = on_resume
        self._on_reset = on_reset
        self._on_tick = on_tick
        self._on_time_up = on_time_up

        self._scheduler = TickScheduler(
            lambda: self._state,
            self._tick,
            interval=interval,
            loop=loop,
            clock=clock,
        )

        if config.auto_start:
            self.start()

    # -- commands ------------------------------------------------------------

    def start(self) -> bool:
        """Start an idle timer."""
        return self._command(Start(now=self._clock()), self._on_start)

    def pause(self) -> bool:
        """Pause a running timer, freezing ``time_left``."""
        return self._command(Pause(), self._on_pause)

    def resume(self) -> bool:
        """Resume a paused timer."""
        return self._command(Resume(now=self._clock()), self._on_resume)

    def reset(self) -> bool:
        """Return to the initial idle state.  Always permitted until closed."""
        if self._scheduler.closed:
            return False
        self._dispatch(Reset())
        if self._on_reset is not None:
            self._on_reset()
        return True

    def close(self) -> None:
        """Cancel any pending tick.  Later commands are no-ops."""
        self._scheduler.close()

    def __enter__(self) -> TimerSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- read-only view ------------------------------------------------------

    @property
    def config(self) -> TimerConfiguration:
        return self._config

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def time_left(self) -> int:
        return self._state.time_left

    @property
    def phase(self) -> TimerPhase:
        return self._state.phase

    @property
    def ticking(self) -> bool:
        """True while a tick callback is scheduled."""
        return self._scheduler.active

    @property
    def status(self) -> TimerStatus:
        config = self._config
        return evaluate_status(
            config.mode,
            self._state.time_left,
            config.total_duration,
            config.warning_threshold,
            config.danger_threshold,
            self._state.phase,
        )

    @property
    def progress_percentage(self) -> Optional[int]:
        config = self._config
        return progress_percentage(
            config.mode, self._state.time_left, config.total_duration, cap=config.total_duration
        )

    @property
    def label(self) -> str:
        return status_label(self._state.phase, self.status)

    @property
    def display(self) -> str:
        return format_time(self._state.time_left)

    # -- private helpers -----------------------------------------------------

    def _dispatch(self, event: TimerEvent) -> bool:
        """Apply *event*; return whether the state changed."""
        new_state = self._machine.transition(self._state, event)
        if new_state is self._state or self._scheduler.closed:
            return False
        previous, self._state = self._state, new_state
        try:
            self._scheduler.sync()
        except RuntimeError:
            # no event loop to tick on
            self._state = previous
            raise
        return True

    def _command(self, event: TimerEvent, callback: Callback) -> bool:
        if not self._dispatch(event):
            logger.debug("%s ignored while %s", type(event).__name__, self._state.phase.value)
            return False
        if callback is not None:
            callback()
        return True

    def _tick(self) -> None:
        if not self._dispatch(Tick()):
            return
        state = self._state
        if self._on_tick is not None:
            self._on_tick(state.time_left)
        if state.time_up:
            logger.info("time is up after %ds", self._config.total_duration)
            if self._on_time_up is not None:
                self._on_time_up()

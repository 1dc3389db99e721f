"""Timer core -- a pure state machine over countdown and stopwatch timers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from quiztimer.core.config import TimerConfiguration, TimerMode

logger = logging.getLogger(__name__)


class TimerPhase(Enum):
    """Possible phases of the timer."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


# -- events -------------------------------------------------------------------


@dataclass(frozen=True)
class Start:
    """Begin counting from IDLE.  *now* is the host clock reading."""

    now: float


@dataclass(frozen=True)
class Pause:
    """Freeze a running timer."""


@dataclass(frozen=True)
class Resume:
    """Continue a paused timer.  *now* is the host clock reading."""

    now: float


@dataclass(frozen=True)
class Reset:
    """Return to IDLE with the configured starting value."""


@dataclass(frozen=True)
class Tick:
    """One elapsed logical second."""


TimerEvent = Union[Start, Pause, Resume, Reset, Tick]


# -- state --------------------------------------------------------------------


@dataclass(frozen=True)
class TimerState:
    """Snapshot of a timer.

    ``started_at`` is the clock reading of the latest START or RESUME and is
    only consulted by the tick scheduler.  ``time_up`` is set on exactly the
    transition that finishes a countdown and cleared by the next one.
    """

    time_left: int
    phase: TimerPhase = TimerPhase.IDLE
    started_at: float = 0.0
    time_up: bool = False

    @property
    def is_running(self) -> bool:
        return self.phase is TimerPhase.RUNNING


class TimerStateMachine:
    """Maps ``(state, event)`` to the next state for one configuration.

    Contains no clock, no I/O and no scheduling.  An event that is not valid
    from the current phase returns the very same state object, so callers can
    detect a no-op with ``is``.
    """

    def __init__(self, config: TimerConfiguration) -> None:
        self._config = config

    @property
    def config(self) -> TimerConfiguration:
        return self._config

    def initial_state(self) -> TimerState:
        """Return the IDLE state a new or reset timer starts from."""
        return TimerState(time_left=self._config.initial_time_left)

    def transition(self, state: TimerState, event: TimerEvent) -> TimerState:
        """Return the state that follows *state* after *event*."""
        if isinstance(event, Reset):
            new_state = self.initial_state()
        elif state.phase is TimerPhase.FINISHED:
            return state
        elif isinstance(event, Start):
            if state.phase is not TimerPhase.IDLE:
                return state
            new_state = replace(
                state, phase=TimerPhase.RUNNING, started_at=event.now, time_up=False
            )
        elif isinstance(event, Pause):
            if state.phase is not TimerPhase.RUNNING:
                return state
            new_state = replace(state, phase=TimerPhase.PAUSED, time_up=False)
        elif isinstance(event, Resume):
            if state.phase is not TimerPhase.PAUSED:
                return state
            new_state = replace(
                state, phase=TimerPhase.RUNNING, started_at=event.now, time_up=False
            )
        elif isinstance(event, Tick):
            if state.phase is not TimerPhase.RUNNING:
                return state
            new_state = self._tick(state)
        else:
            raise TypeError(f"unknown timer event: {event!r}")

        if new_state.phase is not state.phase:
            logger.debug(
                "%s -> %s on %s (time_left=%d)",
                state.phase.value,
                new_state.phase.value,
                type(event).__name__,
                new_state.time_left,
            )
        return new_state

    # -- private helpers -----------------------------------------------------

    def _tick(self, state: TimerState) -> TimerState:
        if self._config.mode is TimerMode.STOPWATCH:
            return replace(state, time_left=state.time_left + 1, time_up=False)

        time_left = max(0, state.time_left - 1)
        if time_left == 0:
            return replace(state, time_left=0, phase=TimerPhase.FINISHED, time_up=True)
        return replace(state, time_left=time_left, time_up=False)

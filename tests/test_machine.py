"""Tests for the pure TimerStateMachine transition function."""

from __future__ import annotations

import logging
from typing import List

import pytest

from quiztimer.core.config import TimerConfiguration, TimerMode
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


def _countdown(duration: int = 5) -> TimerStateMachine:
    return TimerStateMachine(
        TimerConfiguration(total_duration=duration, warning_threshold=0, danger_threshold=0)
    )


def _stopwatch(duration: int = 30) -> TimerStateMachine:
    return TimerStateMachine(
        TimerConfiguration(total_duration=duration, mode=TimerMode.STOPWATCH)
    )


def _apply(machine: TimerStateMachine, events: List[TimerEvent]) -> TimerState:
    state = machine.initial_state()
    for event in events:
        state = machine.transition(state, event)
    return state


def _in_phase(machine: TimerStateMachine, phase: TimerPhase) -> TimerState:
    """Drive a fresh timer into *phase* through public events only."""
    routes = {
        TimerPhase.IDLE: [],
        TimerPhase.RUNNING: [Start(now=0.0), Tick()],
        TimerPhase.PAUSED: [Start(now=0.0), Tick(), Pause()],
        TimerPhase.FINISHED: [Start(now=0.0)] + [Tick()] * machine.config.total_duration,
    }
    state = _apply(machine, routes[phase])
    assert state.phase is phase
    return state


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


class TestInitialState:
    """A fresh timer is IDLE with the mode's starting value."""

    def test_countdown_starts_at_total_duration(self) -> None:
        state = _countdown(90).initial_state()
        assert state == TimerState(time_left=90, phase=TimerPhase.IDLE)

    def test_stopwatch_starts_at_zero(self) -> None:
        state = _stopwatch().initial_state()
        assert state.time_left == 0
        assert state.phase is TimerPhase.IDLE
        assert not state.time_up


# ---------------------------------------------------------------------------
# Valid transitions
# ---------------------------------------------------------------------------


class TestValidTransitions:
    """Each command moves along exactly one edge of the phase graph."""

    def test_start_runs_and_records_clock(self) -> None:
        machine = _countdown()
        state = machine.transition(machine.initial_state(), Start(now=42.5))
        assert state.phase is TimerPhase.RUNNING
        assert state.started_at == 42.5
        assert state.time_left == 5

    def test_pause_freezes_time_left(self) -> None:
        state = _apply(_countdown(), [Start(now=0.0), Tick(), Tick(), Pause()])
        assert state.phase is TimerPhase.PAUSED
        assert state.time_left == 3

    def test_resume_records_fresh_clock(self) -> None:
        state = _apply(_countdown(), [Start(now=1.0), Tick(), Pause(), Resume(now=20.0)])
        assert state.phase is TimerPhase.RUNNING
        assert state.started_at == 20.0
        assert state.time_left == 4

    def test_tick_decrements_countdown(self) -> None:
        state = _apply(_countdown(), [Start(now=0.0), Tick(), Tick(), Tick()])
        assert state.time_left == 2
        assert state.phase is TimerPhase.RUNNING
        assert not state.time_up

    def test_countdown_finishes_on_last_tick(self) -> None:
        state = _apply(_countdown(3), [Start(now=0.0), Tick(), Tick(), Tick()])
        assert state.time_left == 0
        assert state.phase is TimerPhase.FINISHED
        assert state.time_up

    def test_stopwatch_counts_up_without_terminating(self) -> None:
        state = _apply(_stopwatch(5), [Start(now=0.0)] + [Tick()] * 10)
        assert state.time_left == 10
        assert state.phase is TimerPhase.RUNNING
        assert not state.time_up


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------


class TestReset:
    """RESET is accepted from every phase and restores the initial state."""

    @pytest.mark.parametrize("phase", list(TimerPhase))
    def test_reset_restores_initial_countdown_state(self, phase: TimerPhase) -> None:
        machine = _countdown()
        state = machine.transition(_in_phase(machine, phase), Reset())
        assert state == machine.initial_state()

    def test_reset_stopwatch_returns_to_zero(self) -> None:
        machine = _stopwatch()
        state = _apply(machine, [Start(now=0.0), Tick(), Tick(), Reset()])
        assert state == TimerState(time_left=0)

    def test_reset_clears_time_up_marker(self) -> None:
        machine = _countdown(1)
        finished = _apply(machine, [Start(now=0.0), Tick()])
        assert finished.time_up
        assert not machine.transition(finished, Reset()).time_up

    def test_timer_can_run_again_after_reset(self) -> None:
        state = _apply(_countdown(2), [Start(now=0.0), Tick(), Tick(), Reset(), Start(now=9.0)])
        assert state.phase is TimerPhase.RUNNING
        assert state.time_left == 2


# ---------------------------------------------------------------------------
# Invalid-in-phase events are no-ops
# ---------------------------------------------------------------------------

_NO_OPS = [
    (TimerPhase.IDLE, Pause()),
    (TimerPhase.IDLE, Resume(now=1.0)),
    (TimerPhase.IDLE, Tick()),
    (TimerPhase.RUNNING, Start(now=1.0)),
    (TimerPhase.RUNNING, Resume(now=1.0)),
    (TimerPhase.PAUSED, Start(now=1.0)),
    (TimerPhase.PAUSED, Pause()),
    (TimerPhase.PAUSED, Tick()),
    (TimerPhase.FINISHED, Start(now=1.0)),
    (TimerPhase.FINISHED, Pause()),
    (TimerPhase.FINISHED, Resume(now=1.0)),
    (TimerPhase.FINISHED, Tick()),
]


class TestNoOps:
    """Events not valid from the current phase return the same state object."""

    @pytest.mark.parametrize("phase,event", _NO_OPS)
    def test_invalid_event_is_ignored(self, phase: TimerPhase, event: TimerEvent) -> None:
        machine = _countdown()
        state = _in_phase(machine, phase)
        assert machine.transition(state, event) is state

    def test_double_pause_keeps_time_left(self) -> None:
        machine = _countdown()
        paused = _in_phase(machine, TimerPhase.PAUSED)
        again = machine.transition(paused, Pause())
        assert again.phase is TimerPhase.PAUSED
        assert again.time_left == paused.time_left

    def test_tick_after_pause_is_discarded(self) -> None:
        state = _apply(_countdown(), [Start(now=0.0), Tick(), Pause(), Tick(), Tick()])
        assert state.time_left == 4

    def test_unknown_event_type_raises(self) -> None:
        machine = _countdown()
        with pytest.raises(TypeError):
            machine.transition(machine.initial_state(), "START")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Scenario and logging
# ---------------------------------------------------------------------------


class TestScenario:
    """The five-second pause/resume walk-through."""

    def test_start_tick_pause_resume_finish(self) -> None:
        machine = _countdown(5)
        state = _apply(machine, [Start(now=0.0), Tick(), Tick(), Tick()])
        assert (state.time_left, state.phase) == (2, TimerPhase.RUNNING)

        state = machine.transition(state, Pause())
        assert (state.time_left, state.phase) == (2, TimerPhase.PAUSED)

        state = machine.transition(state, Resume(now=10.0))
        state = machine.transition(state, Tick())
        assert not state.time_up
        state = machine.transition(state, Tick())
        assert (state.time_left, state.phase) == (0, TimerPhase.FINISHED)
        assert state.time_up

    def test_phase_changes_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="quiztimer.core.machine"):
            _apply(_countdown(), [Start(now=0.0)])
        assert "idle -> running on Start" in caplog.text

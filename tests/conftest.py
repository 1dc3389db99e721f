"""Shared fixtures: a controllable clock and an event loop stand-in."""

from __future__ import annotations

from typing import Any, Callable, List, Optional

import pytest


class FakeClock:
    """A monotonic clock whose value only moves when a test says so."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeHandle:
    """Mimics ``asyncio.TimerHandle``: a scheduled callback that can be cancelled."""

    def __init__(self, when: float, callback: Callable[..., None], args: tuple) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> None:
        self.fired = True
        self.callback(*self.args)


class FakeLoop:
    """Implements the slice of the asyncio loop API the tick scheduler uses.

    Callbacks never run on their own; tests move time with :meth:`advance`
    or fire the next callback at an arbitrary moment with :meth:`fire_at`.
    """

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.handles: List[FakeHandle] = []

    def call_later(self, delay: float, callback: Callable[..., None], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.clock.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def next_handle(self) -> Optional[FakeHandle]:
        pending = self.pending
        return min(pending, key=lambda h: h.when) if pending else None

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every callback that falls due on time."""
        target = self.clock.now + seconds
        while True:
            handle = self.next_handle()
            if handle is None or handle.when > target:
                break
            self.clock.now = max(self.clock.now, handle.when)
            handle.run()
        self.clock.now = target

    def fire_at(self, when: float) -> None:
        """Run the next pending callback at *when*, early or late."""
        handle = self.next_handle()
        assert handle is not None, "no callback is scheduled"
        self.clock.now = when
        handle.run()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def loop(clock: FakeClock) -> FakeLoop:
    return FakeLoop(clock)

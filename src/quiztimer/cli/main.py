"""CLI entry point for quiztimer.

Uses Click to expose the ``quiztimer`` command group: ``run`` drives a live
timer in the terminal and ``check`` classifies a single reading.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Callable, Optional, TypeVar

import click

import quiztimer
from quiztimer.core.config import (
    DEFAULT_DANGER_THRESHOLD,
    DEFAULT_WARNING_THRESHOLD,
    TimerConfiguration,
    TimerMode,
)
from quiztimer.core.errors import ConfigurationError
from quiztimer.core.machine import TimerPhase, TimerState
from quiztimer.core.scheduler import TICK_INTERVAL
from quiztimer.core.session import TimerSession
from quiztimer.core.thresholds import (
    evaluate_status,
    format_time,
    mode_caption,
    progress_percentage,
    status_label,
)
from quiztimer.utils.logging_config import configure_logging

T = TypeVar("T")

_MODES = click.Choice([mode.value for mode in TimerMode])
_PHASES = click.Choice([phase.value for phase in TimerPhase])

warning_option = click.option(
    "--warning",
    type=int,
    default=DEFAULT_WARNING_THRESHOLD,
    envvar="QUIZTIMER_WARNING",
    show_default=True,
    help="Seconds remaining at which the timer enters the warning band.",
)
danger_option = click.option(
    "--danger",
    type=int,
    default=DEFAULT_DANGER_THRESHOLD,
    envvar="QUIZTIMER_DANGER",
    show_default=True,
    help="Seconds remaining at which the timer enters the danger band.",
)
mode_option = click.option(
    "--mode", type=_MODES, default=TimerMode.COUNTDOWN.value, show_default=True
)


def _run(action: Callable[[], T]) -> T:
    """Execute *action*, converting ``ConfigurationError`` to a CLI error.

    On ``ConfigurationError`` the message is printed to stderr and the
    process exits with code 1.
    """
    try:
        return action()
    except ConfigurationError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)


def _format_progress(progress: Optional[int]) -> str:
    return "--" if progress is None else f"{progress}%"


def _render(session: TimerSession) -> str:
    return f"{session.display}  {session.label}  {_format_progress(session.progress_percentage)}"


async def _drive(config: TimerConfiguration, interval: float) -> TimerState:
    """Run a session until the countdown expires or the stopwatch hits its cap."""
    done = asyncio.Event()

    def on_tick(time_left: int) -> None:
        click.echo(_render(session))
        if config.mode is TimerMode.STOPWATCH and time_left >= config.total_duration:
            session.pause()

    with TimerSession(
        config,
        on_tick=on_tick,
        on_pause=done.set,
        on_time_up=done.set,
        interval=interval,
    ) as session:
        click.echo(mode_caption(config.mode))
        click.echo(_render(session))
        await done.wait()
        return session.state


@click.group()
@click.version_option(version=quiztimer.__version__, prog_name="quiztimer")
@click.option("-v", "--verbose", is_flag=True, help="Log timer transitions to stderr.")
def cli(verbose: bool) -> None:
    """quiztimer: countdown and stopwatch timer for quizzes and timed sessions."""
    configure_logging(verbose)


@cli.command()
@click.argument("duration", type=int)
@mode_option
@click.option("--minutes", is_flag=True, help="Read DURATION as a quiz time limit in minutes.")
@warning_option
@danger_option
@click.option("--interval", type=float, default=TICK_INTERVAL, hidden=True)
def run(
    duration: int, mode: str, minutes: bool, warning: int, danger: int, interval: float
) -> None:
    """Run a timer of DURATION seconds in the terminal.

    A stopwatch counts up and stops itself once it reaches DURATION.
    """
    settings = dict(
        mode=mode, warning_threshold=warning, danger_threshold=danger, auto_start=True
    )
    if minutes:
        config = _run(lambda: TimerConfiguration.from_time_limit(duration, **settings))
    else:
        config = _run(lambda: TimerConfiguration(total_duration=duration, **settings))

    final = asyncio.run(_drive(config, interval))
    if final.phase is TimerPhase.FINISHED:
        click.echo("Time's up!")
    else:
        click.echo(f"Stopwatch stopped at {format_time(final.time_left)}")


@cli.command()
@click.argument("time_left", type=click.IntRange(min=0))
@click.option("--duration", type=int, required=True, help="Total duration in seconds.")
@mode_option
@warning_option
@danger_option
@click.option("--phase", type=_PHASES, default=TimerPhase.RUNNING.value, show_default=True)
def check(
    time_left: int, duration: int, mode: str, warning: int, danger: int, phase: str
) -> None:
    """Show status and progress for a timer reading of TIME_LEFT seconds."""
    config = _run(
        lambda: TimerConfiguration(
            total_duration=duration,
            mode=mode,
            warning_threshold=warning,
            danger_threshold=danger,
        )
    )
    if config.mode is TimerMode.COUNTDOWN and time_left > config.total_duration:
        raise click.BadParameter(
            f"{time_left} exceeds the {config.total_duration}s duration", param_hint="TIME_LEFT"
        )

    timer_phase = TimerPhase(phase)
    status = evaluate_status(
        config.mode,
        time_left,
        config.total_duration,
        config.warning_threshold,
        config.danger_threshold,
        timer_phase,
    )
    progress = progress_percentage(
        config.mode, time_left, config.total_duration, cap=config.total_duration
    )
    click.echo(
        f"{format_time(time_left)} {status.value} "
        f"({status_label(timer_phase, status)}) {_format_progress(progress)}"
    )

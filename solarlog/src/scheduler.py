"""
Cooperative timer pool running the daemon's recurring tasks.

Every registered task becomes one asyncio loop; the loops run concurrently
via asyncio.gather() until a shared shutdown event is set. Because each task
is a single sequential loop, a firing never overlaps the previous firing of
the same task: a firing that overruns its period delays the next one instead
of running two at once.

Two kinds of schedule are supported:
- fixed rate: first firing after ``initial_delay_s``, then every
  ``period_s`` measured from the planned (not actual) firing time.
- dynamic: the delay before every firing is asked from a callable, e.g.
  the nightly trigger that re-anchors on standard-time midnight each day.

Loops are resilient: an exception raised by a task is logged and the loop
continues. A registration error is logged and that task simply never runs.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[None]]
"""A task body: an async callable taking no arguments."""


class SchedulingError(Exception):
    """A recurring task could not be registered."""


@dataclass(frozen=True)
class _Registration:
    name: str
    action: Action
    next_delay: Callable[[], float]
    fixed_rate: bool


class Scheduler:
    """Runs named recurring async tasks until shutdown.

    Args:
        shutdown_event: Setting this event stops every loop after its
            current firing.

    Usage::

        scheduler = Scheduler(shutdown_event)
        scheduler.schedule_fixed_rate("acquisition", acquire, initial_delay_s=0, period_s=60)
        scheduler.schedule_dynamic("yield-log", log_yield, trigger.next_delay_s)
        await scheduler.run()
    """

    def __init__(self, shutdown_event: asyncio.Event) -> None:
        self._shutdown_event = shutdown_event
        self._registrations: list[_Registration] = []

    @property
    def task_names(self) -> list[str]:
        """Names of successfully registered tasks, in registration order."""
        return [reg.name for reg in self._registrations]

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def schedule_fixed_rate(
        self,
        name: str,
        action: Action,
        *,
        initial_delay_s: float,
        period_s: float,
    ) -> bool:
        """Register *action* to fire after *initial_delay_s*, then every *period_s*.

        Returns:
            ``True`` if registered; ``False`` if registration failed (the
            failure is logged and the task never runs).
        """
        try:
            self._check_name(name)
            _check_action(action)
            if initial_delay_s < 0:
                raise SchedulingError(f"initial delay must be >= 0 (got {initial_delay_s})")
            if period_s <= 0:
                raise SchedulingError(f"period must be > 0 (got {period_s})")
        except SchedulingError as exc:
            logger.error("Failed to schedule task '%s': %s", name, exc)
            return False

        delays = _fixed_rate_delays(initial_delay_s, period_s)
        self._registrations.append(
            _Registration(name=name, action=action, next_delay=lambda: next(delays), fixed_rate=True)
        )
        logger.info(
            "Scheduled task '%s' (initial_delay=%ss, period=%ss)",
            name,
            initial_delay_s,
            period_s,
        )
        return True

    def schedule_dynamic(
        self,
        name: str,
        action: Action,
        next_delay: Callable[[], float],
    ) -> bool:
        """Register *action*, asking *next_delay* for the wait before every firing.

        Returns:
            ``True`` if registered; ``False`` if registration failed.
        """
        try:
            self._check_name(name)
            _check_action(action)
            if not callable(next_delay):
                raise SchedulingError("next_delay must be callable")
        except SchedulingError as exc:
            logger.error("Failed to schedule task '%s': %s", name, exc)
            return False

        self._registrations.append(
            _Registration(name=name, action=action, next_delay=next_delay, fixed_rate=False)
        )
        logger.info("Scheduled task '%s' (dynamic delay)", name)
        return True

    def _check_name(self, name: str) -> None:
        if not name:
            raise SchedulingError("task name must not be empty")
        if name in self.task_names:
            raise SchedulingError(f"task '{name}' is already scheduled")

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Run all registered tasks concurrently until shutdown."""
        if not self._registrations:
            logger.warning("No tasks scheduled; nothing to run")
            return
        logger.info("Starting %d scheduled tasks: %s", len(self._registrations), ", ".join(self.task_names))
        await asyncio.gather(*(self._task_loop(reg) for reg in self._registrations))
        logger.info("All scheduled tasks stopped")

    async def _task_loop(self, reg: _Registration) -> None:
        """Run one task until shutdown_event is set."""
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while not self._shutdown_event.is_set():
            try:
                delay = float(reg.next_delay())
            except Exception:
                logger.error("Task '%s': computing next delay failed, stopping task", reg.name, exc_info=True)
                return

            if reg.fixed_rate:
                # Fixed rate: aim at the planned time; if we are behind, fire now.
                deadline += delay
                wait_s = deadline - loop.time()
                if wait_s < 0:
                    deadline = loop.time()
                    wait_s = 0.0
            else:
                wait_s = max(delay, 0.0)

            if await self._wait_for_shutdown(wait_s):
                break
            await _fire(reg)
        logger.info("Task '%s' stopped", reg.name)

    async def _wait_for_shutdown(self, timeout_s: float) -> bool:
        """Sleep up to *timeout_s*; return ``True`` if shutdown was requested."""
        # Use wait with timeout so we can check shutdown between sleeps
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=timeout_s)
        return self._shutdown_event.is_set()


async def _fire(reg: _Registration) -> None:
    """Execute one firing, logging instead of propagating any error."""
    try:
        await reg.action()
    except Exception:
        logger.error("Task '%s' failed", reg.name, exc_info=True)


def _check_action(action: object) -> None:
    if not callable(action):
        raise SchedulingError("action must be callable")


def _fixed_rate_delays(initial_delay_s: float, period_s: float):
    """Yield the initial delay once, then the period forever."""
    yield initial_delay_s
    while True:
        yield period_s

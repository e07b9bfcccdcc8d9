"""
Standard-time clock arithmetic for the nightly yield log.

The sun does not observe daylight saving time, so day boundaries are taken
in the zone's *standard* offset all year round: in Europe/Berlin the nightly
trigger sits at 24:00+01:00 minus the lead time, in winter and in summer.

Operations:
- standard_offset(now): UTC offset of *now*'s zone with DST removed.
- now_in_standard_time(tz, now): *now* re-expressed in that fixed offset.
- before_standard_midnight(now, lead_minutes): next standard-time midnight
  minus the lead.
- delay_until_before_midnight(now, lead_minutes): forward delay to that
  instant, rolled over to the following night when already past.
- NightlyTrigger: recomputes the delay for every firing, so the trigger
  keeps its standard-time anchor across DST transitions.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone, tzinfo

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


def standard_offset(now: datetime) -> timedelta:
    """Return the UTC offset of *now*'s zone with any DST adjustment removed.

    Args:
        now: A timezone-aware datetime.

    Raises:
        ValueError: If *now* is naive.
    """
    offset = now.utcoffset()
    if offset is None:
        raise ValueError("standard_offset() requires a timezone-aware datetime")
    return offset - (now.dst() or timedelta(0))


def now_in_standard_time(tz: tzinfo, now: datetime | None = None) -> datetime:
    """Express *now* (default: the current instant) in *tz*'s standard offset.

    The result carries a fixed ``datetime.timezone`` offset, never a DST
    shifted one, e.g. ``14:46:35+02:00[Europe/Berlin]`` becomes
    ``13:46:35+01:00``.
    """
    local = datetime.now(tz) if now is None else now.astimezone(tz)
    return local.astimezone(timezone(standard_offset(local)))


def before_standard_midnight(now: datetime, lead_minutes: int) -> datetime:
    """Return the start of the next standard-time day minus *lead_minutes*."""
    now_std = now_in_standard_time(now.tzinfo, now)  # type: ignore[arg-type]
    next_midnight = datetime.combine(
        now_std.date() + _ONE_DAY,
        datetime.min.time(),
        tzinfo=now_std.tzinfo,
    )
    return next_midnight - timedelta(minutes=lead_minutes)


def delay_until_before_midnight(now: datetime, lead_minutes: int) -> timedelta:
    """Return the delay from *now* until shortly before standard-time midnight.

    When *now* already lies inside the lead window (between the target and
    midnight) the target of the following night is used, so the result is
    always in ``[0, 24h + lead)``.

    Args:
        now: Current instant, timezone-aware in the zone of interest.
        lead_minutes: Minutes before midnight to fire.
    """
    return _next_target(now, lead_minutes) - now


def _next_target(now: datetime, lead_minutes: int) -> datetime:
    """Next standard-time firing instant at or after *now*."""
    target = before_standard_midnight(now, lead_minutes)
    # Fixed-offset tzinfo, so adding a day is exactly 24 h.
    if target < now:
        target += _ONE_DAY
    return target


class NightlyTrigger:
    """Computes successive nightly firing times, one standard-time day apart.

    Every call to :meth:`next_delay_s` recomputes the target from the current
    clock instead of adding a fixed 24 h period, and never returns a target at
    or before the previously returned one.

    Args:
        tz: Zone whose standard offset defines midnight.
        lead_minutes: Minutes before midnight to fire.
        clock: Returns the current aware datetime; defaults to
            ``datetime.now(tz)``.
    """

    def __init__(
        self,
        tz: tzinfo,
        lead_minutes: int,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._tz = tz
        self._lead_minutes = lead_minutes
        self._clock = clock or (lambda: datetime.now(tz))
        self._last_target: datetime | None = None

    @property
    def last_target(self) -> datetime | None:
        """The most recently scheduled firing time, if any."""
        return self._last_target

    def preview(self, now: datetime | None = None) -> datetime:
        """Return the next firing time without committing to it."""
        if now is None:
            now = self._clock()
        target = _next_target(now.astimezone(self._tz), self._lead_minutes)
        while self._last_target is not None and target <= self._last_target:
            target += _ONE_DAY
        return target

    def next_fire_at(self, now: datetime | None = None) -> datetime:
        """Return (and remember) the next firing time in standard time."""
        target = self.preview(now)
        self._last_target = target
        return target

    def next_delay_s(self) -> float:
        """Return seconds until the next firing (never negative)."""
        now = self._clock()
        target = self.next_fire_at(now)
        delay = max((target - now).total_seconds(), 0.0)
        logger.debug(
            "Nightly trigger: now=%s, fire_at=%s, delay=%.1fs",
            now.isoformat(),
            target.isoformat(),
            delay,
        )
        return delay

"""
Pure text formatting for snapshot log lines.

Turns a Snapshot into the lines written to the power and yield-day channels.
Widths and precision are fixed (total with 3 decimals, day yield as whole
number, power with 1 decimal); the gateway's decimals hint is not consulted.

This module has no side effects, no I/O and no clock.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from solarlog.src.models import ModuleReadings, Snapshot

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def format_readings(readings: ModuleReadings) -> str:
    """Format total, day and power readings, e.g. ``'   157.011 kWh     1945 Wh      0.4 W'``."""
    return f"{format_readings_reduced(readings)} {readings.power.value:8.1f} {readings.power.unit}"


def format_readings_reduced(readings: ModuleReadings) -> str:
    """Format total and day readings only (no power segment)."""
    total = readings.yield_total
    day = readings.yield_day
    return f"{total.value:10.3f} {total.unit} {int(day.value):8d} {day.unit}"


def format_power_line(snapshot: Snapshot) -> str:
    """Build the per-minute power channel line."""
    return (
        f"{snapshot.captured_at.strftime(TIMESTAMP_FORMAT)}"
        f" | Total: {format_readings(snapshot.total)}"
        f" | DC-0: {format_readings(snapshot.module_a)}"
        f" | DC-1: {format_readings(snapshot.module_b)} |"
    )


def format_yield_day_line(snapshot: Snapshot) -> str:
    """Build the nightly yield-day channel line (date only, no power)."""
    return (
        f"{snapshot.captured_at.strftime(DATE_FORMAT)}"
        f" | Total: {format_readings_reduced(snapshot.total)}"
        f" | DC-0: {format_readings_reduced(snapshot.module_a)}"
        f" | DC-1: {format_readings_reduced(snapshot.module_b)} |"
    )

"""
Tests for the snapshot line formatter.

Tests verify:
- Reading triples format with fixed widths (10.3f / 8d / 8.1f) and units
  passed through verbatim.
- The reduced form drops the power segment.
- Power and yield-day lines carry timestamp/date and all three triples.
- The decimals hint does not influence formatting.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from solarlog.src.formatter import (
    format_power_line,
    format_readings,
    format_readings_reduced,
    format_yield_day_line,
)
from solarlog.src.models import ModuleReadings, Reading, Snapshot

_CET = timezone(timedelta(hours=1))


def _triple(
    total: float,
    day: float,
    power: float,
    *,
    units: tuple[str, str, str] = ("kWh", "Wh", "W"),
    decimals: tuple[int, int, int] = (3, 0, 1),
) -> ModuleReadings:
    return ModuleReadings(
        yield_total=Reading(value=total, unit=units[0], decimals=decimals[0]),
        yield_day=Reading(value=day, unit=units[1], decimals=decimals[1]),
        power=Reading(value=power, unit=units[2], decimals=decimals[2]),
    )


def _snapshot() -> Snapshot:
    return Snapshot(
        captured_at=datetime(2024, 4, 13, 13, 46, 35, 113359, tzinfo=_CET),
        total=_triple(288.400, 2062, 0.0),
        module_a=_triple(126.306, 1030, 0.4),
        module_b=_triple(162.094, 1032, 0.4),
    )


class TestFormatReadings:
    def test_full_form(self) -> None:
        assert format_readings(_triple(157.011, 1945, 0.4)) == "   157.011 kWh     1945 Wh      0.4 W"

    def test_reduced_form_drops_power(self) -> None:
        assert format_readings_reduced(_triple(157.011, 1945, 0.4)) == "   157.011 kWh     1945 Wh"

    def test_day_value_is_truncated_to_whole_number(self) -> None:
        assert format_readings_reduced(_triple(1.0, 1945.9, 0.0)) == "     1.000 kWh     1945 Wh"

    def test_units_passed_through_verbatim(self) -> None:
        line = format_readings(_triple(1.5, 2, 3.3, units=("MWh", "kWh", "kW")))
        assert line == "     1.500 MWh        2 kWh      3.3 kW"

    def test_decimals_hint_is_ignored(self) -> None:
        plain = format_readings(_triple(157.011, 1945, 0.4))
        hinted = format_readings(_triple(157.011, 1945, 0.4, decimals=(0, 5, 4)))
        assert plain == hinted


class TestFormatLines:
    def test_power_line(self) -> None:
        assert format_power_line(_snapshot()) == (
            "2024-04-13 13:46:35"
            " | Total:    288.400 kWh     2062 Wh      0.0 W"
            " | DC-0:    126.306 kWh     1030 Wh      0.4 W"
            " | DC-1:    162.094 kWh     1032 Wh      0.4 W |"
        )

    def test_yield_day_line(self) -> None:
        assert format_yield_day_line(_snapshot()) == (
            "2024-04-13"
            " | Total:    288.400 kWh     2062 Wh"
            " | DC-0:    126.306 kWh     1030 Wh"
            " | DC-1:    162.094 kWh     1032 Wh |"
        )

    def test_date_uses_calendar_year_at_year_end(self) -> None:
        """30 Dec 2024 belongs to ISO week 1 of 2025; the line must say 2024."""
        snapshot = _snapshot().model_copy(
            update={"captured_at": datetime(2024, 12, 30, 23, 50, tzinfo=_CET)}
        )
        assert format_yield_day_line(snapshot).startswith("2024-12-30 |")

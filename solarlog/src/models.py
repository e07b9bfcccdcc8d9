"""
Pydantic models for OpenDTU live telemetry.

Defines the immutable value types produced by one acquisition cycle:

- Reading: one measured quantity as the gateway reports it
  (``{"v": value, "u": unit, "d": decimals}``).
- ModuleReadings: the yield-total / yield-day / power triple reported for
  the inverter as a whole and for every DC input.
- Snapshot: one aggregate and two module triples plus the capture time.

All models are frozen, so a published Snapshot can be shared between tasks
without copying or locking. Presentation lives in ``formatter.py``.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Reject NaN and infinite reading values

TODO:
- None
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Reading(BaseModel):
    """A single value/unit/decimals triple from the gateway.

    Validation is strict: a string where a number is expected (or a number
    where the unit string is expected) is rejected instead of coerced. NaN and
    infinite values are rejected as well.

    Attributes:
        value: The measured value.
        unit: Display unit, passed through verbatim (e.g. ``kWh``).
        decimals: Precision hint declared by the gateway. Informational only.
    """

    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True, allow_inf_nan=False)

    value: float = Field(alias="v")
    unit: str = Field(alias="u")
    decimals: int = Field(alias="d")


class ModuleReadings(BaseModel):
    """Yield and power readings for the inverter total or one DC input.

    Decoded from objects carrying ``YieldTotal``, ``YieldDay`` and ``Power``
    keys; any other channel the gateway reports (voltage, current, ...) is
    ignored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    yield_total: Reading = Field(alias="YieldTotal")
    yield_day: Reading = Field(alias="YieldDay")
    power: Reading = Field(alias="Power")


class Snapshot(BaseModel):
    """One fully populated capture of aggregate and module readings.

    Attributes:
        captured_at: Capture time in the zone's standard (DST-free) offset.
        total: Readings for the inverter as a whole.
        module_a: Readings for DC input ``0``.
        module_b: Readings for DC input ``1``.
    """

    model_config = ConfigDict(frozen=True)

    captured_at: datetime
    total: ModuleReadings
    module_a: ModuleReadings
    module_b: ModuleReadings

    @field_validator("captured_at")
    @classmethod
    def captured_at_must_be_aware(cls, v: datetime) -> datetime:
        """Reject naive timestamps; day boundaries need a fixed offset."""
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("captured_at must be timezone-aware")
        return v

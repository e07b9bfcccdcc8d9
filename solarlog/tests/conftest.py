"""
Shared test fixtures for yield logger tests.

Provides environment variable fixtures for Settings configuration tests,
gateway JSON payloads mirroring OpenDTU's live-data API, and a fixture that
restores the logging configuration after tests which reconfigure it.
All daemon env vars are cleaned before each test to ensure isolation.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Expose gateway payloads as fixtures

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest

# All Settings environment variable names, used for cleanup.
_ALL_ENV_VARS = (
    "GATEWAY_HOST",
    "ACQUISITION_PERIOD_S",
    "POWER_LOG_OFFSET_S",
    "POWER_LOG_PERIOD_S",
    "YIELD_LOG_LEAD_MINUTES",
    "TIMEZONE",
    "HTTP_TIMEOUT_S",
    "LOG_DIR",
    "LOG_LEVEL",
    "POWER_TO_CONSOLE",
)

SERIAL = "114182512345"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all daemon env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env file is accidentally
    loaded by Pydantic BaseSettings.
    """
    for var in _ALL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_full(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set every Settings environment variable to a non-default value."""
    env = {
        "GATEWAY_HOST": "192.168.178.50",
        "ACQUISITION_PERIOD_S": "30",
        "POWER_LOG_OFFSET_S": "15",
        "POWER_LOG_PERIOD_S": "120",
        "YIELD_LOG_LEAD_MINUTES": "5",
        "TIMEZONE": "America/New_York",
        "HTTP_TIMEOUT_S": "4.5",
        "LOG_DIR": "/tmp/solarlog-test",
        "LOG_LEVEL": "debug",
        "POWER_TO_CONSOLE": "false",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def env_vars_required_only(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set only the required environment variables (no optional ones)."""
    env = {"GATEWAY_HOST": "opendtu.local"}
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def restore_logging() -> Iterator[None]:
    """Snapshot root and channel logger state and restore it afterwards.

    pytest's own capture handlers come and go per test phase and are left
    for pytest to manage.
    """
    names = ("", "solarlog.application", "solarlog.power", "solarlog.yield-day", "httpx", "httpcore")
    saved = {}
    for name in names:
        log = logging.getLogger(name)
        handlers = [h for h in log.handlers if not _is_pytest_handler(h)]
        saved[name] = (handlers, log.level, log.propagate)
    yield
    for name, (handlers, level, propagate) in saved.items():
        log = logging.getLogger(name)
        for handler in list(log.handlers):
            if handler not in handlers and not _is_pytest_handler(handler):
                log.removeHandler(handler)
                handler.close()
        for handler in handlers:
            if handler not in log.handlers:
                log.addHandler(handler)
        log.setLevel(level)
        log.propagate = propagate


def _is_pytest_handler(handler: logging.Handler) -> bool:
    return type(handler).__module__.startswith("_pytest")


# ---------------------------------------------------------------------------
# OpenDTU payloads
# ---------------------------------------------------------------------------


def _reading(v: Any, u: str, d: int) -> dict[str, Any]:
    return {"v": v, "u": u, "d": d}


def _readings(total: Any, day: Any, power: Any) -> dict[str, Any]:
    """Build a YieldTotal/YieldDay/Power block with typical OpenDTU units."""
    return {
        "Power": _reading(power, "W", 1),
        "Voltage": _reading(31.2, "V", 1),
        "Current": _reading(0.02, "A", 2),
        "YieldDay": _reading(day, "Wh", 0),
        "YieldTotal": _reading(total, "kWh", 3),
    }


_HINTS = {"time_sync": False, "radio_problem": False, "default_password": False}


@pytest.fixture()
def make_readings() -> Callable[[Any, Any, Any], dict[str, Any]]:
    """Factory for one gateway readings block: ``make_readings(total, day, power)``."""
    return _readings


@pytest.fixture()
def gateway_serial() -> str:
    """Serial number of the single inverter behind the mock gateway."""
    return SERIAL


@pytest.fixture()
def status_body() -> dict[str, Any]:
    """Body of ``GET /api/livedata/status``."""
    return {
        "inverters": [
            {
                "serial": SERIAL,
                "name": "HM-800",
                "order": 0,
                "data_age": 3,
                "reachable": True,
                "producing": True,
            }
        ],
        "total": _readings(288.4, 2062, 0.0),
        "hints": dict(_HINTS),
    }


@pytest.fixture()
def detail_body() -> dict[str, Any]:
    """Body of ``GET /api/livedata/status?inv={serial}``."""
    return {
        "inverters": [
            {
                "serial": SERIAL,
                "name": "HM-800",
                "AC": {"0": {"Power": _reading(0.8, "W", 1)}},
                "DC": {
                    "0": _readings(126.306, 1030, 0.4),
                    "1": _readings(162.094, 1032, 0.4),
                },
                "INV": {"0": {"Temperature": _reading(21.3, "°C", 1)}},
            }
        ],
        "total": _readings(288.4, 2062, 0.0),
        "hints": dict(_HINTS),
    }

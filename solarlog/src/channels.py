"""
Logging channels for the yield logger daemon.

Three logical channels, each a stdlib logger under ``solarlog.``:

- ``application``: status and error events. JSON lines on stderr plus a plain
  text file ``solar_application.log``. Module loggers propagate to the root,
  which carries the same handlers.
- ``power``: one line per minute with the current power trace, written to
  ``solar_power.log``. The file is rotated at midnight and the previous day
  kept as ``solar_power.YYYY-MM-DD.log``. Optionally echoed to stdout.
- ``yield-day``: one line per night with the daily yield, appended to
  ``solar_yieldday.log``.

The data channels write the message only (the line already carries its own
timestamp) and do not propagate to the root logger.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Name rotated power logs solar_power.YYYY-MM-DD.log

TODO:
- None
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from solarlog.src.config import Settings

APPLICATION = "application"
POWER = "power"
YIELD_DAY = "yield-day"

CHANNELS = (APPLICATION, POWER, YIELD_DAY)

APPLICATION_LOG_FILE = "solar_application.log"
POWER_LOG_FILE = "solar_power.log"
YIELD_DAY_LOG_FILE = "solar_yieldday.log"

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def get_channel(channel: str) -> logging.Logger:
    """Return the logger behind a logical channel name.

    Raises:
        ValueError: If *channel* is not one of :data:`CHANNELS`.
    """
    if channel not in CHANNELS:
        raise ValueError(f"Unknown log channel '{channel}' (expected one of {', '.join(CHANNELS)})")
    return logging.getLogger(f"solarlog.{channel}")


def configure_logging(settings: Settings) -> None:
    """Configure the application, power and yield-day channels.

    Creates ``settings.log_dir`` if needed. If it cannot be created the
    failure is reported on the application channel and only the console
    handlers are installed.

    Args:
        settings: Loaded daemon settings.
    """
    level = getattr(logging, settings.log_level, logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(level)
    # Quieten per-request chatter from the HTTP stack.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    log_dir = Path(settings.log_dir)
    dir_error: OSError | None = None
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        dir_error = exc

    power = _reset_data_channel(POWER)
    yield_day = _reset_data_channel(YIELD_DAY)

    if settings.power_to_console:
        echo = logging.StreamHandler(sys.stdout)
        echo.setFormatter(logging.Formatter("%(message)s"))
        power.addHandler(echo)

    if dir_error is None:
        app_file = logging.FileHandler(log_dir / APPLICATION_LOG_FILE, encoding="utf-8")
        app_file.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_TEXT_DATEFMT))
        root.addHandler(app_file)

        power_file = logging.handlers.TimedRotatingFileHandler(
            log_dir / POWER_LOG_FILE,
            when="midnight",
            encoding="utf-8",
        )
        power_file.namer = dated_log_name
        power_file.setFormatter(logging.Formatter("%(message)s"))
        power.addHandler(power_file)

        yield_file = logging.FileHandler(log_dir / YIELD_DAY_LOG_FILE, encoding="utf-8")
        yield_file.setFormatter(logging.Formatter("%(message)s"))
        yield_day.addHandler(yield_file)
    else:
        get_channel(APPLICATION).error(
            "Log directory %s could not be created (%s); logging to console only",
            log_dir,
            dir_error,
        )


def dated_log_name(default_name: str) -> str:
    """Move the rollover date in front of the extension.

    ``solar_power.log.2024-04-13`` becomes ``solar_power.2024-04-13.log``.
    """
    base, _, date = default_name.rpartition(".")
    stem, ext = os.path.splitext(base)
    return f"{stem}.{date}{ext}"


def _reset_data_channel(channel: str) -> logging.Logger:
    """Detach a data channel from the root and drop its old handlers."""
    log = get_channel(channel)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.setLevel(logging.INFO)
    log.propagate = False
    return log

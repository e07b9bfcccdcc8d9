"""
Daemon main loop for the OpenDTU solar yield logger.

Registers three independent recurring tasks with the Scheduler:
1. **Acquisition**: immediately at start-up and then every
   ACQUISITION_PERIOD_S, fetches telemetry via the TelemetryClient and
   publishes the Snapshot into the SnapshotHolder. On failure the holder is
   left untouched (last known good) and the cause is logged.
2. **Power log**: first after POWER_LOG_OFFSET_S, then every
   POWER_LOG_PERIOD_S, writes the current Snapshot to the power channel.
3. **Yield-day log**: once a night, YIELD_LOG_LEAD_MINUTES before midnight
   in the zone's standard time, writes the daily yield to the yield-day
   channel. The delay is recomputed every night.

Before the first successful acquisition both log tasks are no-ops. Graceful
shutdown on SIGTERM/SIGINT sets a shared asyncio.Event; every loop finishes
its current firing and exits.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from typing import TYPE_CHECKING

from pydantic import ValidationError

from solarlog.src import channels
from solarlog.src.formatter import format_power_line, format_yield_day_line
from solarlog.src.scheduler import Scheduler
from solarlog.src.telemetry import FetchError

if TYPE_CHECKING:
    from solarlog.src.config import Settings
    from solarlog.src.holder import SnapshotHolder
    from solarlog.src.telemetry import TelemetryClient
    from solarlog.src.timing import NightlyTrigger

logger = logging.getLogger(__name__)
app_log = channels.get_channel(channels.APPLICATION)


# ---------------------------------------------------------------------------
# Startup config logging
# ---------------------------------------------------------------------------


def log_config_summary(settings: object) -> None:
    """Log a config summary at startup.

    Args:
        settings: A Settings instance (or any object with the same attrs).
    """
    app_log.info(
        "Yield logger starting with config: "
        "gateway_host=%s, acquisition_period_s=%s, "
        "power_log_offset_s=%s, power_log_period_s=%s, "
        "yield_log_lead_minutes=%s, timezone=%s, "
        "http_timeout_s=%s, log_dir=%s",
        settings.gateway_host,  # type: ignore[attr-defined]
        settings.acquisition_period_s,  # type: ignore[attr-defined]
        settings.power_log_offset_s,  # type: ignore[attr-defined]
        settings.power_log_period_s,  # type: ignore[attr-defined]
        settings.yield_log_lead_minutes,  # type: ignore[attr-defined]
        settings.timezone,  # type: ignore[attr-defined]
        settings.http_timeout_s,  # type: ignore[attr-defined]
        settings.log_dir,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Single-firing task bodies (easily testable)
# ---------------------------------------------------------------------------


async def acquire_once(*, client: TelemetryClient, holder: SnapshotHolder) -> bool:
    """Fetch one Snapshot and publish it.

    A FetchError is logged and leaves the holder unchanged, so the previous
    Snapshot (if any) stays authoritative.

    Returns:
        True if a new Snapshot was published, False otherwise.
    """
    try:
        snapshot = await client.acquire()
    except FetchError as exc:
        app_log.warning("Acquisition failed, keeping last known snapshot: %s", exc)
        return False

    holder.publish(snapshot)
    logger.debug("Acquisition success: snapshot captured at %s", snapshot.captured_at.isoformat())
    return True


async def log_power_once(*, holder: SnapshotHolder, sink: logging.Logger) -> bool:
    """Write the current Snapshot's power line to *sink*.

    Returns:
        True if a line was written, False if there is nothing to log yet.
    """
    snapshot = holder.current()
    if snapshot is None:
        logger.debug("No snapshot yet, skipping power log")
        return False
    sink.info(format_power_line(snapshot))
    return True


async def log_yield_day_once(*, holder: SnapshotHolder, sink: logging.Logger) -> bool:
    """Write the current Snapshot's daily-yield line to *sink*.

    Returns:
        True if a line was written, False if there is nothing to log yet.
    """
    snapshot = holder.current()
    if snapshot is None:
        app_log.warning("No snapshot available at nightly yield log time, nothing written")
        return False
    sink.info(format_yield_day_line(snapshot))
    return True


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_scheduler(
    *,
    settings: Settings,
    client: TelemetryClient,
    holder: SnapshotHolder,
    trigger: NightlyTrigger,
    shutdown_event: asyncio.Event,
    power_sink: logging.Logger | None = None,
    yield_day_sink: logging.Logger | None = None,
) -> Scheduler:
    """Register the acquisition, power-log and yield-log tasks.

    Each task is a separate closure; none shares state with another except
    through the holder. A task whose registration fails is logged by the
    Scheduler and skipped.

    Returns:
        The configured Scheduler, ready to ``run()``.
    """
    power_sink = power_sink or channels.get_channel(channels.POWER)
    yield_day_sink = yield_day_sink or channels.get_channel(channels.YIELD_DAY)

    async def _acquire() -> None:
        await acquire_once(client=client, holder=holder)

    async def _log_power() -> None:
        await log_power_once(holder=holder, sink=power_sink)

    async def _log_yield_day() -> None:
        await log_yield_day_once(holder=holder, sink=yield_day_sink)

    scheduler = Scheduler(shutdown_event)
    scheduler.schedule_fixed_rate(
        "acquisition",
        _acquire,
        initial_delay_s=0,
        period_s=settings.acquisition_period_s,
    )
    scheduler.schedule_fixed_rate(
        "power-log",
        _log_power,
        initial_delay_s=settings.power_log_offset_s,
        period_s=settings.power_log_period_s,
    )
    if scheduler.schedule_dynamic("yield-log", _log_yield_day, trigger.next_delay_s):
        app_log.info(
            "Nightly yield log scheduled %d min before standard-time midnight, first at %s",
            settings.yield_log_lead_minutes,
            trigger.preview().isoformat(),
        )
    return scheduler


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="solarlog",
        description="Log OpenDTU solar power and daily yield.",
        epilog="Example: solarlog 192.168.1.1",
    )
    parser.add_argument(
        "address",
        nargs="?",
        help="OpenDTU address (host or host:port); overrides GATEWAY_HOST",
    )
    return parser


def load_settings(argv: list[str] | None = None) -> Settings:
    """Parse *argv* and load Settings, exiting with a usage error if invalid."""
    from solarlog.src.config import Settings

    parser = build_parser()
    args = parser.parse_args(argv)
    overrides = {"gateway_host": args.address} if args.address else {}
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        parser.error(f"invalid configuration:\n{exc}")
        raise  # pragma: no cover - parser.error() exits


async def async_main(settings: Settings) -> None:
    """Async entrypoint: build components and run the scheduled tasks.

    Sets up SIGTERM/SIGINT handlers to trigger graceful shutdown.
    """
    from solarlog.src.holder import SnapshotHolder
    from solarlog.src.telemetry import TelemetryClient
    from solarlog.src.timing import NightlyTrigger

    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: _handle_signal(shutdown_event),
        )

    zone = settings.zone
    client = TelemetryClient(settings.gateway_host, tz=zone, timeout_s=settings.http_timeout_s)
    app_log.info("Using OpenDTU server at %s", client.base_url)

    scheduler = build_scheduler(
        settings=settings,
        client=client,
        holder=SnapshotHolder(),
        trigger=NightlyTrigger(zone, settings.yield_log_lead_minutes),
        shutdown_event=shutdown_event,
    )
    await scheduler.run()
    app_log.info("Shutdown complete")


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    """Handle SIGTERM/SIGINT by setting the shutdown event.

    Args:
        shutdown_event: The event to set for graceful shutdown.
    """
    app_log.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


def main(argv: list[str] | None = None) -> None:
    """Synchronous entrypoint for the yield logger daemon."""
    settings = load_settings(argv)
    channels.configure_logging(settings)
    log_config_summary(settings)
    asyncio.run(async_main(settings))


if __name__ == "__main__":
    main()

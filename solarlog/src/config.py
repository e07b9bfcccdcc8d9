"""
Logger daemon configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
The gateway address may also be supplied on the command line, in which case
it is passed in as an init argument and takes precedence over the env var.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Reject gateway addresses httpx cannot parse (e.g. a non-numeric port)

TODO:
- None
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from pydantic import field_validator
from pydantic_settings import BaseSettings

from solarlog.src.telemetry import build_base_url

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Configuration for the OpenDTU yield logger.

    Attributes:
        gateway_host: OpenDTU address on the local LAN (``host`` or
            ``host:port``). ``http://`` is prepended when no scheme is given.
        acquisition_period_s: Seconds between telemetry acquisitions.
        power_log_offset_s: Delay of the first power-log firing, so that a
            reading is normally available when it fires.
        power_log_period_s: Seconds between power-log firings.
        yield_log_lead_minutes: Minutes before standard-time midnight at
            which the daily yield is logged.
        timezone: IANA zone whose standard offset anchors the nightly log.
        http_timeout_s: Timeout per HTTP request to the gateway.
        log_dir: Directory holding the application, power and yield logs.
        log_level: Level for the application channel.
        power_to_console: Echo power lines to stdout as well.
    """

    gateway_host: str
    acquisition_period_s: float = 60
    power_log_offset_s: float = 30
    power_log_period_s: float = 60
    yield_log_lead_minutes: int = 10
    timezone: str = "Europe/Berlin"
    http_timeout_s: float = 10.0
    log_dir: str = "log"
    log_level: str = "INFO"
    power_to_console: bool = True

    @field_validator("gateway_host")
    @classmethod
    def gateway_host_must_be_usable(cls, v: str) -> str:
        """Strip whitespace and reject an empty or unparsable gateway address."""
        v = v.strip()
        if not v:
            raise ValueError("GATEWAY_HOST must not be empty")
        try:
            url = httpx.URL(build_base_url(v))
        except (httpx.InvalidURL, ValueError) as exc:
            raise ValueError(f"GATEWAY_HOST '{v}' is not a valid address: {exc}") from exc
        if not url.host:
            raise ValueError(f"GATEWAY_HOST '{v}' has no host")
        return v

    @field_validator("acquisition_period_s", "power_log_period_s", "http_timeout_s")
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        """Periods and timeouts must be strictly positive."""
        if v <= 0:
            raise ValueError("value must be > 0")
        return v

    @field_validator("power_log_offset_s")
    @classmethod
    def offset_must_be_non_negative(cls, v: float) -> float:
        """Validate the power-log offset is non-negative."""
        if v < 0:
            raise ValueError("POWER_LOG_OFFSET_S must be >= 0")
        return v

    @field_validator("yield_log_lead_minutes")
    @classmethod
    def lead_must_fit_in_a_day(cls, v: int) -> int:
        """The lead time has to land on the same standard-time day."""
        if v < 0 or v >= 24 * 60:
            raise ValueError("YIELD_LOG_LEAD_MINUTES must be >= 0 and < 1440")
        return v

    @field_validator("timezone")
    @classmethod
    def timezone_must_exist(cls, v: str) -> str:
        """Validate the zone name against the tz database."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown TIMEZONE '{v}'") from exc
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Normalize and validate the application log level."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @property
    def zone(self) -> ZoneInfo:
        """The configured zone as a ``ZoneInfo`` instance."""
        return ZoneInfo(self.timezone)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

"""
Async HTTP client for the OpenDTU live-data API.

One acquisition is two sequential GET + JSON round trips:

1. ``GET {base}/api/livedata/status`` yields the inverter-level ``total``
   readings and the serial number of the first inverter.
2. ``GET {base}/api/livedata/status?inv={serial}`` yields the per-DC-input
   readings under ``inverters[0].DC["0"]`` and ``["1"]``.

Newer OpenDTU firmware no longer includes module data in the plain status
call, hence the second request.

An unparsable gateway address raises :class:`FetchError`, and so does any
network error, timeout, non-2xx status, non-JSON body or missing, mistyped
or non-finite field at either step. A partial Snapshot is never returned.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Map an unparsable gateway address to FetchError

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, tzinfo
from typing import Any

import httpx
from pydantic import ValidationError

from solarlog.src.models import ModuleReadings, Snapshot
from solarlog.src.timing import now_in_standard_time

logger = logging.getLogger(__name__)

LIVEDATA_STATUS_PATH = "/api/livedata/status"

_DEFAULT_TIMEOUT_S = 10.0


class FetchError(Exception):
    """An acquisition attempt failed; the message says why."""


def build_base_url(gateway_address: str) -> str:
    """Return the gateway base URL, prefixing ``http://`` when no scheme is given."""
    address = gateway_address.strip().rstrip("/")
    if "://" not in address:
        address = f"http://{address}"
    return address


class TelemetryClient:
    """Produces Snapshots from an OpenDTU gateway.

    Args:
        gateway_address: Gateway ``host`` or ``host:port`` (or a full URL).
        tz: Zone whose standard offset stamps ``Snapshot.captured_at``.
        timeout_s: Timeout per HTTP request in seconds.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
        clock: Returns the current aware datetime; defaults to
            ``datetime.now(tz)``.

    Usage::

        client = TelemetryClient("192.168.1.50", tz=ZoneInfo("Europe/Berlin"))
        try:
            snapshot = await client.acquire()
        except FetchError as exc:
            ...
    """

    def __init__(
        self,
        gateway_address: str,
        *,
        tz: tzinfo,
        timeout_s: float = _DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._base_url = build_base_url(gateway_address)
        self._tz = tz
        self._timeout_s = timeout_s
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(tz))

    @property
    def base_url(self) -> str:
        """Base URL requests are sent to."""
        return self._base_url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def acquire(self) -> Snapshot:
        """Run both round trips and assemble a Snapshot.

        Returns:
            A fully populated :class:`Snapshot`.

        Raises:
            FetchError: On any failure at either step.
        """
        try:
            client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_s,
                transport=self._transport,
            )
        except (httpx.InvalidURL, ValueError) as exc:
            raise FetchError(f"Invalid gateway address {self._base_url!r}: {exc}") from exc

        async with client:
            status = await self._get_json(client, LIVEDATA_STATUS_PATH)
            total = _decode_readings(_require(status, "total", dict), "total")
            serial = _first_inverter_serial(status)
            logger.debug("Inverter serial from status call: %s", serial)

            detail = await self._get_json(client, LIVEDATA_STATUS_PATH, params={"inv": serial})
            dc = _inverter_dc(detail)
            module_a = _decode_readings(_require(dc, "0", dict, "DC"), "DC.0")
            module_b = _decode_readings(_require(dc, "1", dict, "DC"), "DC.1")

        return Snapshot(
            captured_at=now_in_standard_time(self._tz, self._clock()),
            total=total,
            module_a=module_a,
            module_b=module_b,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        path: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET *path* and return the decoded JSON object."""
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(f"GET {path} returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {path} failed ({type(exc).__name__}): {exc}") from exc
        except httpx.InvalidURL as exc:
            raise FetchError(f"GET {path} has an invalid URL: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"GET {path} returned a non-JSON payload") from exc

        if not isinstance(payload, dict):
            raise FetchError(f"GET {path} returned {type(payload).__name__}, expected a JSON object")
        return payload


def _require(obj: dict[str, Any], key: str, kind: type, where: str = "response") -> Any:
    """Return ``obj[key]``, raising FetchError if absent or not of *kind*."""
    if key not in obj:
        raise FetchError(f"'{key}' missing from {where}")
    value = obj[key]
    if not isinstance(value, kind):
        raise FetchError(f"'{key}' in {where} is {type(value).__name__}, expected {kind.__name__}")
    return value


def _first_inverter(payload: dict[str, Any]) -> dict[str, Any]:
    inverters = _require(payload, "inverters", list)
    if not inverters:
        raise FetchError("'inverters' is empty")
    first = inverters[0]
    if not isinstance(first, dict):
        raise FetchError(f"'inverters[0]' is {type(first).__name__}, expected dict")
    return first


def _first_inverter_serial(payload: dict[str, Any]) -> str:
    serial = _require(_first_inverter(payload), "serial", str, "inverters[0]")
    if not serial:
        raise FetchError("'serial' in inverters[0] is empty")
    return serial


def _inverter_dc(payload: dict[str, Any]) -> dict[str, Any]:
    return _require(_first_inverter(payload), "DC", dict, "inverters[0]")


def _decode_readings(raw: dict[str, Any], where: str) -> ModuleReadings:
    """Validate a ``YieldTotal``/``YieldDay``/``Power`` object."""
    try:
        return ModuleReadings.model_validate(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise FetchError(f"Invalid readings in {where}: {problems}") from exc

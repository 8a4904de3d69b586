"""Client for the upstream road traffic offence lookup API."""

from __future__ import annotations

from typing import Optional

import httpx
import structlog

from .config import Settings
from .models import OffenceQueryResult

LOGGER = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class OffenceLookupError(RuntimeError):
    """Base class for failures while checking a vehicle."""


class RateLimitedError(OffenceLookupError):
    """Upstream answered 429; the vehicle should be checked again later."""

    def __init__(self) -> None:
        super().__init__("rate limited (429): too many requests, try again later")


class UpstreamStatusError(OffenceLookupError):
    """Upstream answered with a status other than 200 or 429."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"unexpected status code: {status_code}")
        self.status_code = status_code


class LookupTransportError(OffenceLookupError):
    """The request could not be completed (connection, timeout, ...)."""


class LookupDecodeError(OffenceLookupError):
    """The 200 response body could not be decoded."""


class OffenceLookupClient:
    """Issues single-attempt offence queries for one vehicle at a time."""

    def __init__(
        self,
        api_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "OffenceLookupClient":
        """Build a client for the configured endpoint and timeout."""
        return cls(settings.api_url, timeout=settings.timeout_seconds)

    async def check(self, vehicle: str) -> OffenceQueryResult:
        """Query the upstream API for ``vehicle``.

        Exactly one request is made. Raises ``RateLimitedError`` on 429,
        ``UpstreamStatusError`` on any other non-200 status and
        ``LookupTransportError``/``LookupDecodeError`` for lower level failures.
        """
        LOGGER.info("lookup.request.start", registration=vehicle)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._api_url, json={"vehicle": vehicle})
        except httpx.HTTPError as exc:
            LOGGER.warning("lookup.request.failed", registration=vehicle, error=str(exc))
            raise LookupTransportError(f"post request: {exc}") from exc

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            LOGGER.warning("lookup.rate_limited", registration=vehicle)
            raise RateLimitedError()
        if response.status_code != httpx.codes.OK:
            LOGGER.warning(
                "lookup.unexpected_status",
                registration=vehicle,
                status_code=response.status_code,
            )
            raise UpstreamStatusError(response.status_code)

        try:
            result = OffenceQueryResult.model_validate(response.json())
        except ValueError as exc:
            LOGGER.warning("lookup.decode_failed", registration=vehicle, error=str(exc))
            raise LookupDecodeError(f"decode response: {exc}") from exc

        LOGGER.info(
            "lookup.request.success",
            registration=vehicle,
            status=result.status,
            pending=len(result.pending_transactions),
            inspections=len(result.inspection_data),
        )
        return result

"""Helpers for fetching UV index data from the OpenUV API."""
from __future__ import annotations

import asyncio
from numbers import Real
from typing import Any, Dict

import requests
from pydantic import ValidationError

from uvguard.config import Settings
from uvguard.errors import InvalidArgument, ProviderError, RequestTimeout, TransportFailure
from uvguard.models import UVResponse
from uvguard.request_cache import RequestCache, cache_key
from uvguard.resilience import ResilientExecutor
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="uv_client")

OPENUV_URL = "https://api.openuv.io/api/v1/uv"
DEFAULT_ALTITUDE = 100
REQUEST_TIMEOUT_SECONDS = 10.0


def validate_coordinates(lat: Any, lng: Any) -> tuple[float, float]:
    """Return (lat, lng) as floats or raise InvalidArgument."""
    for value in (lat, lng):
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidArgument("Invalid coordinates provided")
    # range first: huge ints compare fine but overflow float(), NaN fails every comparison
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise InvalidArgument("Invalid coordinates provided")
    return float(lat), float(lng)


def _error_message(resp: requests.Response) -> str:
    """Best-effort provider error message, falling back to the status code."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return f"HTTP Error {resp.status_code}"


class UVClient:
    """Cached, retrying client for the OpenUV `uv` endpoint."""

    def __init__(
        self,
        executor: ResilientExecutor,
        cache: RequestCache | None = None,
        *,
        api_key: str | None = None,
        base_url: str = OPENUV_URL,
        altitude: int = DEFAULT_ALTITUDE,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.executor = executor
        self.cache = cache if cache is not None else RequestCache()
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.altitude = altitude
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        executor: ResilientExecutor,
        cache: RequestCache | None = None,
        session: requests.Session | None = None,
    ) -> "UVClient":
        """Build a client from environment-driven settings."""
        if not settings.openuv_api_key:
            logger.warning("No OpenUV API key configured; requests will be rejected by the provider")
        if cache is None:
            cache = RequestCache(
                ttl_seconds=settings.cache_duration_seconds,
                max_entries=settings.cache_max_entries,
            )
        return cls(
            executor,
            cache,
            api_key=settings.openuv_api_key,
            base_url=settings.openuv_base_url,
            altitude=settings.default_altitude,
            timeout_seconds=settings.request_timeout_seconds,
            session=session,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "x-access-token": self.api_key or "",
            "Content-Type": "application/json",
        }

    def _get(self, lat: float, lng: float) -> requests.Response:
        params = {"lat": lat, "lng": lng, "alt": self.altitude}
        return self.session.get(
            self.base_url,
            params=params,
            headers=self._headers(),
            timeout=self.timeout_seconds,
            allow_redirects=True,
        )

    async def fetch_uv(self, lat: float, lng: float) -> Dict[str, Any]:
        """Issue one GET against the provider and return the decoded JSON body."""
        try:
            resp = await asyncio.wait_for(
                asyncio.to_thread(self._get, lat, lng),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, requests.Timeout) as exc:
            raise RequestTimeout(f"OpenUV request timed out after {self.timeout_seconds:g}s") from exc
        except requests.RequestException as exc:
            raise TransportFailure(f"OpenUV request failed: {exc}") from exc

        if not resp.ok:
            raise ProviderError(_error_message(resp), status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError("OpenUV returned a non-JSON body", status_code=resp.status_code) from exc
        if not isinstance(data, dict):
            raise ProviderError("OpenUV returned an unexpected payload", status_code=resp.status_code)
        return data

    async def get_uv_data(self, lat: Any, lng: Any) -> UVResponse:
        """Return UV data for a coordinate, served from cache while fresh."""
        lat, lng = validate_coordinates(lat, lng)

        cached = self.cache.get(lat, lng)
        if cached is not None:
            logger.debug("UV cache hit", extra={"key": cache_key(lat, lng)})
            return cached

        logger.info("Fetching UV data", extra={"key": cache_key(lat, lng)})
        data = await self.executor.run(lambda: self.fetch_uv(lat, lng))
        try:
            response = UVResponse.model_validate({**data, "lat": lat, "lng": lng})
        except ValidationError as exc:
            raise ProviderError(f"OpenUV response is missing required fields: {exc.error_count()} error(s)") from exc

        self.cache.put(lat, lng, response)
        return response

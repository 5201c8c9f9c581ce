"""HTTP client for the public interest endpoints.

Every call returns a tagged result instead of raising: ApiSuccess when the
server answered 2xx, ApiFailure for transport errors, timeouts and non-2xx
responses. Callers decide what a failure means for them.
"""
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiSuccess:
    """A 2xx response. ``interested_count`` is set only when the body had one."""
    interested_count: int | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ApiFailure:
    """A failed call. ``status_code`` is None when no response was received."""
    error: Exception
    status_code: int | None = None


ApiResult = ApiSuccess | ApiFailure


async def log_request(request: httpx.Request) -> None:
    logger.debug(f"HTTP {request.method} {request.url}")


def make_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Build an AsyncClient configured from settings."""
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={"Content-Type": "application/json"},
        event_hooks={"request": [log_request]},
        transport=transport,
    )


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _count_from(data: dict[str, Any]) -> int | None:
    value = data.get("interested_count")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


class InterestApi:
    """Calls ``/public/events/{id}/interest`` and the related read endpoints."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_settings(cls, transport: httpx.AsyncBaseTransport | None = None) -> "InterestApi":
        return cls(make_client(transport))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "InterestApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> ApiResult:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"{method} {path} failed with HTTP {e.response.status_code}")
            return ApiFailure(error=e, status_code=e.response.status_code)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            return ApiFailure(error=e)

        data = _json_body(response)
        return ApiSuccess(interested_count=_count_from(data), data=data)

    async def register(self, event_id: int, device_id: str) -> ApiResult:
        """Register this device's interest in an event."""
        return await self._request(
            "POST", f"/public/events/{event_id}/interest", json={"device_id": device_id}
        )

    async def withdraw(self, event_id: int, device_id: str) -> ApiResult:
        """Withdraw this device's interest in an event."""
        return await self._request(
            "DELETE", f"/public/events/{event_id}/interest", params={"device_id": device_id}
        )

    async def interested_count(self, event_id: int) -> ApiResult:
        return await self._request("GET", f"/public/events/{event_id}/interested-count")

    async def is_interested(self, event_id: int, device_id: str) -> ApiResult:
        return await self._request(
            "GET", f"/public/events/{event_id}/is-interested", params={"device_id": device_id}
        )

    async def interested_events(self, device_id: str, limit: int = 50) -> ApiResult:
        return await self._request(
            "GET", "/public/events/interested", params={"device_id": device_id, "limit": limit}
        )

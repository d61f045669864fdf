"""HTTP transport for the Simpli.fi Report Center API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from adreports.reportcenter.errors import (
    AuthenticationError,
    ConnectivityError,
    NotFoundError,
    RateLimitedError,
    RemoteApiError,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://app.simpli.fi/api"


class ReportCenterTransport:
    """Authenticated JSON client. Does not retry; callers own retry policy."""

    def __init__(
        self,
        app_key: str,
        user_key: str,
        *,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        session: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "X-App-Key": app_key,
            "X-User-Key": user_key,
            "Content-Type": "application/json",
        }
        self.session = session or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self.session.aclose()

    async def __aenter__(self) -> "ReportCenterTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", path, body)

    async def request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        url = self.url_for(path)
        try:
            response = await self.session.request(method, url, json=body, headers=self.headers)
        except httpx.TransportError as exc:
            raise ConnectivityError(f"{method} {url} failed: {exc}") from exc
        _raise_for_status(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteApiError(response.status_code, "Response body is not JSON") from exc

    def url_for(self, path: str) -> str:
        if path.startswith(self.base_url):
            path = path[len(self.base_url):]
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if response.is_success:
        return
    message = _error_message(response)
    logger.debug("Report Center %s %s -> %s: %s", response.request.method, response.request.url, status, message)
    if status == 401:
        raise AuthenticationError(message)
    if status == 404:
        raise NotFoundError(message)
    if status == 429:
        raise RateLimitedError(message, retry_after=_retry_after(response))
    raise RemoteApiError(status, message)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict):
        for key in ("error", "message", "errors"):
            value = data.get(key)
            if value:
                return value if isinstance(value, str) else str(value)
    return str(data)[:200]


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from .errors import PreconditionError, RemoteError, TransportError
from .http import response_data

logger = logging.getLogger("ontology_mcp.http")

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


def timeout_from_ms(timeout_ms: Optional[float], default: httpx.Timeout | float = DEFAULT_TIMEOUT) -> httpx.Timeout:
    """Build an httpx timeout from a millisecond value as used by the tool schemas."""
    if timeout_ms is None:
        return default if isinstance(default, httpx.Timeout) else httpx.Timeout(default)
    return httpx.Timeout(float(timeout_ms) / 1000.0)


class HttpClient:
    """
    HTTP client for one backend.

    Every request opens its own httpx.AsyncClient and closes it again; there
    are no retries. Non-2xx answers raise RemoteError, requests that never get
    an answer raise TransportError. ``transport`` is handed to httpx as is,
    which is how tests plug in an httpx.MockTransport.
    """

    def __init__(
        self,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        follow_redirects: bool = True,
        base_url: Optional[str] = None,
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        service: str = "upstream",
    ) -> None:
        if not isinstance(timeout, httpx.Timeout):
            timeout = httpx.Timeout(timeout)
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.base_url = base_url.rstrip("/") + "/" if base_url else ""
        self.headers = headers or {}
        self.params = params or {}
        self.transport = transport
        self.service = service

    @asynccontextmanager
    async def _open(self) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
            base_url=self.base_url,
            headers=self.headers,
            params=self.params,
            transport=self.transport,
        ) as client:
            yield client

    async def _request(self, method: str, url: str, *, name: Optional[str] = None, **kwargs) -> httpx.Response:
        name = name or method.upper()
        if "timeout" not in kwargs:
            kwargs["timeout"] = self.timeout

        logger.debug("%s %s %s", self.service, name, url)
        try:
            async with self._open() as client:
                resp = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out: %s", self.service, name, url)
            raise TransportError(f"{self.service} request timed out") from exc
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", self.service, name, exc)
            raise TransportError(str(exc) or f"{self.service} is unreachable") from exc
        except httpx.InvalidURL as exc:
            raise PreconditionError(f"Invalid URL: {url}") from exc

        if resp.is_error:
            body = resp.text
            logger.info("%s %s returned HTTP %s", self.service, name, resp.status_code)
            raise RemoteError(
                f"HTTP {resp.status_code}: {body}",
                status_code=resp.status_code,
                body=body,
                data=response_data(resp),
                response=resp,
            )
        return resp

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        return await self._request(method.upper(), url, **kwargs)

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self._request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self._request("POST", url, **kwargs)

    async def download(self, url: str, **kwargs) -> bytes:
        """GET an absolute URL and return the raw body."""
        resp = await self._request("GET", url, name="DOWNLOAD", **kwargs)
        return resp.content


__all__ = ["HttpClient", "DEFAULT_TIMEOUT", "timeout_from_ms"]

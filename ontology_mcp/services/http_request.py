"""Generic outbound HTTP request, used by the ``mcp_http_request`` tool."""

import logging
from typing import Any, Dict, Optional, Union

import httpx

from ..config import HttpToolConfig
from ..utils.errors import PreconditionError, RemoteError, TransportError
from ..utils.http import format_body
from ..utils.http_client import HttpClient, timeout_from_ms

logger = logging.getLogger("ontology_mcp.services.http")

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


class HttpRequestClient:
    def __init__(self, config: HttpToolConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    async def request(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
        timeout_ms: Optional[float] = None,
    ) -> Union[Dict[str, Any], list, str]:
        """Send one request; JSON answers come back decoded, anything else as text."""
        method = (method or "GET").upper()
        if method not in ALLOWED_METHODS:
            raise PreconditionError(f"Unsupported HTTP method: {method}")

        kwargs: Dict[str, Any] = {"headers": headers or {}, "params": params or None}
        if data is not None:
            if isinstance(data, (dict, list)):
                kwargs["json"] = data
            elif isinstance(data, bytes):
                kwargs["content"] = data
            else:
                kwargs["content"] = str(data).encode("utf-8")

        client = HttpClient(
            timeout=timeout_from_ms(timeout_ms or self.config.timeout_ms),
            transport=self.transport,
            service="HTTP",
        )
        logger.info("HTTP %s %s", method, url)
        try:
            resp = await client.request(method, url, **kwargs)
        except RemoteError as exc:
            raise exc.with_message(
                f"HTTP request error ({exc.status_code}): {format_body(exc.body, exc.data)}"
            ) from exc
        except TransportError as exc:
            raise TransportError(f"HTTP request failed: {exc.message}") from exc

        try:
            return resp.json()
        except ValueError:
            return resp.text

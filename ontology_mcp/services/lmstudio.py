"""
LM Studio Service - OpenAI-compatible local server
==================================================

LM Studio only exposes inference and model listing over HTTP. Downloading
and removing models happens in the desktop application, so ``pull`` and
``remove`` answer with a fixed informational message instead of a request.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import LocalRuntimeConfig
from ..utils.errors import RemoteError, ToolError, TransportError
from ..utils.http import extract_http_error, json_object
from ..utils.http_client import HttpClient, timeout_from_ms

logger = logging.getLogger("ontology_mcp.services.lmstudio")

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2048

PULL_UNSUPPORTED = (
    "LM Studio does not support downloading models via API. "
    "Please use the LM Studio application to download models."
)
REMOVE_UNSUPPORTED = (
    "LM Studio does not support removing models via API. "
    "Please use the LM Studio application to manage models."
)


class LMStudioClient:
    """Client for the LM Studio local server (``/v1`` API)."""

    def __init__(self, config: LocalRuntimeConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.base_url = str(config.endpoint).rstrip("/")
        self.transport = transport

    def _http(self, timeout_ms: Optional[float] = None) -> HttpClient:
        return HttpClient(
            base_url=self.base_url,
            timeout=timeout_from_ms(timeout_ms or self.config.timeout_ms),
            transport=self.transport,
            service="LM Studio",
        )

    async def _call(self, method: str, path: str, *, timeout_ms: Optional[float] = None, **kwargs) -> httpx.Response:
        try:
            return await self._http(timeout_ms).request(method, path, **kwargs)
        except RemoteError as exc:
            message, _ = extract_http_error(exc.response, default_message=f"HTTP {exc.status_code}")
            raise exc.with_message(f"LM Studio API error: {message}") from exc
        except TransportError as exc:
            raise TransportError(f"LM Studio API error: {exc.message}") from exc

    async def list(self) -> Dict[str, Any]:
        resp = await self._call("GET", "models")
        return resp.json()

    async def show(self, name: str) -> Dict[str, Any]:
        resp = await self._call("GET", f"models/{name}")
        return resp.json()

    async def pull(self, name: str) -> Dict[str, Any]:
        return {"status": "info", "model": name, "message": PULL_UNSUPPORTED}

    async def remove(self, name: str) -> Dict[str, Any]:
        return {"status": "info", "model": name, "message": REMOVE_UNSUPPORTED}

    async def run(self, name: str, prompt: str, timeout_ms: Optional[float] = None) -> str:
        resp = await self._call(
            "POST",
            "completions",
            json={
                "model": name,
                "prompt": prompt,
                "temperature": DEFAULT_TEMPERATURE,
                "max_tokens": DEFAULT_MAX_TOKENS,
            },
            timeout_ms=timeout_ms,
        )
        choices = json_object(resp).get("choices")
        first = choices[0] if isinstance(choices, list) and choices and isinstance(choices[0], dict) else {}
        return first.get("text") or ""

    async def chat(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
        timeout_ms: Optional[float] = None,
    ) -> Dict[str, Any]:
        resp = await self._call(
            "POST",
            "chat/completions",
            json={
                "model": model,
                "messages": messages,
                "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
                "max_tokens": DEFAULT_MAX_TOKENS,
            },
            timeout_ms=timeout_ms,
        )
        return json_object(resp)

    async def status(self) -> Dict[str, Any]:
        """Liveness probe. Never raises."""
        try:
            data = await self.list()
        except (ToolError, ValueError) as e:
            error = e.message if isinstance(e, ToolError) else f"Invalid response from LM Studio: {e}"
            logger.warning(f"LM Studio status check failed: {error}")
            return {"status": "offline", "endpoint": self.base_url, "error": error}
        models = data.get("data") if isinstance(data, dict) else None
        return {"status": "online", "endpoint": self.base_url, "models": models or []}

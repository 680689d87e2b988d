"""
Ollama Service - local model runtime
====================================

Model management (list, show, pull, delete), single-turn generation and
chat against the Ollama REST API. Chat answers are reshaped into the
OpenAI ``chat.completion`` object.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from ..config import LocalRuntimeConfig
from ..utils.errors import RemoteError, ToolError, TransportError
from ..utils.http import extract_http_error, json_object
from ..utils.http_client import HttpClient, timeout_from_ms

logger = logging.getLogger("ontology_mcp.services.ollama")


class OllamaClient:
    """Client for the Ollama REST API."""

    def __init__(self, config: LocalRuntimeConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.base_url = str(config.endpoint).rstrip("/")
        self.transport = transport

    def _http(self, timeout_ms: Optional[float] = None) -> HttpClient:
        return HttpClient(
            base_url=self.base_url,
            timeout=timeout_from_ms(timeout_ms or self.config.timeout_ms),
            transport=self.transport,
            service="Ollama",
        )

    async def _call(self, method: str, path: str, *, timeout_ms: Optional[float] = None, **kwargs) -> httpx.Response:
        try:
            return await self._http(timeout_ms).request(method, path, **kwargs)
        except RemoteError as exc:
            message, _ = extract_http_error(exc.response, default_message=f"HTTP {exc.status_code}")
            raise exc.with_message(f"Ollama API error: {message}") from exc
        except TransportError as exc:
            raise TransportError(f"Ollama API error: {exc.message}") from exc

    # =========================================================================
    # Model Management
    # =========================================================================

    async def list(self) -> Dict[str, Any]:
        """List locally available models (``/api/tags``)."""
        resp = await self._call("GET", "/api/tags")
        return resp.json()

    async def show(self, name: str) -> Dict[str, Any]:
        resp = await self._call("POST", "/api/show", json={"name": name})
        return resp.json()

    async def pull(self, name: str) -> Dict[str, Any]:
        logger.info(f"Pulling model {name}")
        resp = await self._call("POST", "/api/pull", json={"name": name, "stream": False})
        try:
            return resp.json()
        except ValueError:
            return {"status": "success", "model": name}

    async def remove(self, name: str) -> Dict[str, Any]:
        logger.info(f"Removing model {name}")
        await self._call("DELETE", "/api/delete", json={"name": name})
        return {"status": "success", "model": name, "message": f"Model {name} removed"}

    # =========================================================================
    # Inference
    # =========================================================================

    async def run(self, name: str, prompt: str, timeout_ms: Optional[float] = None) -> str:
        """Single-turn completion; returns the generated text."""
        resp = await self._call(
            "POST",
            "/api/generate",
            json={"model": name, "prompt": prompt, "stream": False},
            timeout_ms=timeout_ms,
        )
        data = json_object(resp)
        return data.get("response") or ""

    async def chat(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
        timeout_ms: Optional[float] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": model, "messages": messages, "stream": False}
        if temperature is not None:
            payload["options"] = {"temperature": temperature}

        resp = await self._call("POST", "/api/chat", json=payload, timeout_ms=timeout_ms)
        data = json_object(resp)
        content = (data.get("message") or {}).get("content") or ""
        now_ms = int(time.time() * 1000)
        return {
            "id": f"chatcmpl-{now_ms}",
            "object": "chat.completion",
            "created": now_ms // 1000,
            "model": model,
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
        }

    async def status(self) -> Dict[str, Any]:
        """Liveness probe. Never raises."""
        try:
            data = await self.list()
        except (ToolError, ValueError) as e:
            error = e.message if isinstance(e, ToolError) else f"Invalid response from Ollama: {e}"
            logger.warning(f"Ollama status check failed: {error}")
            return {"status": "offline", "endpoint": self.base_url, "error": error}
        entries = (data.get("models") or []) if isinstance(data, dict) else []
        models = [m.get("name") for m in entries if isinstance(m, dict)]
        return {"status": "online", "endpoint": self.base_url, "models": models}

"""Ollama and LM Studio tools.

Both runtimes expose the same seven tools under their own prefix
(``mcp_ollama_*`` and ``mcp_lmstudio_*``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import httpx

from ...config import Settings
from ...services.lmstudio import LMStudioClient
from ...services.ollama import OllamaClient
from ..models import ToolDescriptor
from .common import bind, wrap

RuntimeClient = Union[OllamaClient, LMStudioClient]

_MESSAGES = {
    "type": "array",
    "description": "Chat messages (OpenAI format)",
    "items": {
        "type": "object",
        "properties": {
            "role": {"type": "string", "enum": ["system", "user", "assistant"]},
            "content": {"type": "string"},
        },
        "required": ["role", "content"],
    },
}


def runtime_tools(prefix: str, label: str) -> List[Dict[str, Any]]:
    """Schemas for one local runtime; ``prefix`` is e.g. ``mcp_ollama``."""
    model_name = {"type": "string", "description": f"{label} model name"}
    return [
        {
            "name": f"{prefix}_run",
            "description": f"Run a prompt on a {label} model and return the completion",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "name": model_name,
                    "prompt": {"type": "string", "description": "Prompt text"},
                    "timeout": {
                        "type": "number",
                        "description": "Timeout in milliseconds (default 180000)",
                        "minimum": 1000,
                    },
                },
                "required": ["name", "prompt"],
            },
        },
        {
            "name": f"{prefix}_show",
            "description": f"Show details of a {label} model",
            "inputSchema": {"type": "object", "properties": {"name": model_name}, "required": ["name"]},
        },
        {
            "name": f"{prefix}_pull",
            "description": f"Download a {label} model",
            "inputSchema": {"type": "object", "properties": {"name": model_name}, "required": ["name"]},
        },
        {
            "name": f"{prefix}_list",
            "description": f"List the models available in {label}",
            "inputSchema": {"type": "object", "properties": {}, "required": []},
        },
        {
            "name": f"{prefix}_rm",
            "description": f"Remove a {label} model",
            "inputSchema": {"type": "object", "properties": {"name": model_name}, "required": ["name"]},
        },
        {
            "name": f"{prefix}_chat_completion",
            "description": f"OpenAI-compatible chat completion on a {label} model",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "model": model_name,
                    "messages": _MESSAGES,
                    "temperature": {
                        "type": "number",
                        "description": "Sampling temperature (0-2)",
                        "minimum": 0,
                        "maximum": 2,
                    },
                    "timeout": {"type": "number", "description": "Timeout in milliseconds"},
                },
                "required": ["model", "messages"],
            },
        },
        {
            "name": f"{prefix}_status",
            "description": f"Check whether {label} is reachable",
            "inputSchema": {"type": "object", "properties": {}, "required": []},
        },
    ]


OLLAMA_TOOLS = runtime_tools("mcp_ollama", "Ollama")
LMSTUDIO_TOOLS = runtime_tools("mcp_lmstudio", "LM Studio")


def _runtime_handlers(prefix: str, client: RuntimeClient) -> Dict[str, Any]:
    async def run(args: Dict[str, Any]) -> Any:
        return await client.run(args["name"], args["prompt"], timeout_ms=args.get("timeout"))

    async def show(args: Dict[str, Any]) -> Any:
        return await client.show(args["name"])

    async def pull(args: Dict[str, Any]) -> Any:
        return await client.pull(args["name"])

    async def list_models(args: Dict[str, Any]) -> Any:
        return await client.list()

    async def remove(args: Dict[str, Any]) -> Any:
        return await client.remove(args["name"])

    async def chat(args: Dict[str, Any]) -> Any:
        return await client.chat(
            args["model"],
            args["messages"],
            temperature=args.get("temperature"),
            timeout_ms=args.get("timeout"),
        )

    async def status(args: Dict[str, Any]) -> Any:
        return await client.status()

    return {
        f"{prefix}_run": wrap(run),
        f"{prefix}_show": wrap(show),
        f"{prefix}_pull": wrap(pull),
        f"{prefix}_list": wrap(list_models),
        f"{prefix}_rm": wrap(remove),
        f"{prefix}_chat_completion": wrap(chat),
        f"{prefix}_status": wrap(status),
    }


def build_ollama_tools(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[ToolDescriptor]:
    client = OllamaClient(settings.ollama(), transport=transport)
    return bind(OLLAMA_TOOLS, _runtime_handlers("mcp_ollama", client))


def build_lmstudio_tools(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[ToolDescriptor]:
    client = LMStudioClient(settings.lmstudio(), transport=transport)
    return bind(LMSTUDIO_TOOLS, _runtime_handlers("mcp_lmstudio", client))

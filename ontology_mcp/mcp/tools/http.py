"""The generic ``mcp_http_request`` tool."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ...config import Settings
from ...services.http_request import ALLOWED_METHODS, HttpRequestClient
from ..models import ToolDescriptor
from .common import bind, wrap

HTTP_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "mcp_http_request",
        "description": "Send an HTTP request and return the response body",
        "inputSchema": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "Request URL"},
                "method": {
                    "type": "string",
                    "enum": list(ALLOWED_METHODS),
                    "description": "HTTP method",
                    "default": "GET",
                },
                "headers": {"type": "object", "description": "Request headers"},
                "data": {"description": "Request body; objects are sent as JSON"},
                "params": {"type": "object", "description": "Query string parameters"},
                "timeout": {
                    "type": "number",
                    "description": "Timeout in milliseconds",
                    "default": 30000,
                },
            },
            "required": ["url"],
        },
    },
]


def build_http_tools(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[ToolDescriptor]:
    client = HttpRequestClient(settings.http_tool(), transport=transport)

    async def http_request(args: Dict[str, Any]) -> Any:
        return await client.request(
            args["url"],
            method=args.get("method") or "GET",
            headers=args.get("headers"),
            data=args.get("data"),
            params=args.get("params"),
            timeout_ms=args.get("timeout"),
        )

    return bind(HTTP_TOOLS, {"mcp_http_request": wrap(http_request)})

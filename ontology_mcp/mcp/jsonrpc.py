"""
JSON-RPC 2.0 handling for the MCP methods
=========================================

Shared by the stdio loop and the HTTP route. ``handle`` takes one decoded
message and returns the response object, or None for notifications.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .. import SERVER_NAME, __version__
from .dispatcher import Dispatcher
from .models import ToolCallRequest

logger = logging.getLogger("ontology_mcp.mcp")

PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def error_response(code: int, message: str, req_id: Any = None, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "error": error, "id": req_id}


def result_response(result: Any, req_id: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "result": result, "id": req_id}


class McpServer:
    def __init__(self, dispatcher: Dispatcher, name: str = SERVER_NAME, version: str = __version__):
        self.dispatcher = dispatcher
        self.name = name
        self.version = version

    def initialize_result(self) -> Dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": self.name, "version": self.version},
            "capabilities": {"tools": {"listChanged": False}},
        }

    async def handle(self, body: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(body, dict):
            return error_response(INVALID_REQUEST, "Invalid Request", data="request must be a JSON object")

        req_id = body.get("id")
        method = body.get("method")
        params = body.get("params") or {}

        if body.get("jsonrpc") != "2.0":
            return error_response(INVALID_REQUEST, "Invalid Request", req_id, "jsonrpc must be '2.0'")
        if not method or not isinstance(method, str):
            return error_response(INVALID_REQUEST, "Invalid Request", req_id, "method is required")

        # Notifications (initialized, cancelled, ...) expect no answer
        if method.startswith("notifications/"):
            if req_id is None:
                return None
            return result_response({}, req_id)

        logger.debug(f"MCP_METHOD | {method} | id={req_id}")

        try:
            if method == "initialize":
                client = (params.get("clientInfo") or {}).get("name", "unknown") if isinstance(params, dict) else "unknown"
                logger.info(f"MCP initialize from {client}")
                return result_response(self.initialize_result(), req_id)

            if method == "ping":
                return result_response({}, req_id)

            if method == "tools/list":
                return result_response({"tools": self.dispatcher.list_tools()}, req_id)

            if method == "tools/call":
                try:
                    call = ToolCallRequest.model_validate(params)
                except ValidationError as exc:
                    return error_response(INVALID_PARAMS, "Invalid params", req_id, exc.errors(include_url=False, include_context=False))
                response = await self.dispatcher.call_tool(call)
                return result_response(response.to_wire(), req_id)
        except Exception as exc:
            logger.exception(f"MCP_ERROR | {method}: {exc}")
            return error_response(INTERNAL_ERROR, "Internal error", req_id, str(exc))

        return error_response(METHOD_NOT_FOUND, "Method not found", req_id, f"Method '{method}' not supported")

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from ..mcp.jsonrpc import PARSE_ERROR, McpServer, error_response
from ..mcp.tools import get_categories

router = APIRouter()

mcp_logger = logging.getLogger("ontology_mcp.mcp")


def get_mcp_server(request: Request) -> McpServer:
    return request.app.state.mcp_server


@router.post("/mcp", tags=["MCP"], summary="MCP JSON-RPC endpoint")
async def mcp_endpoint(request: Request, server: McpServer = Depends(get_mcp_server)):
    try:
        body = await request.json()
    except ValueError as exc:
        return JSONResponse(content=error_response(PARSE_ERROR, f"Parse error: {exc}"), status_code=400)

    client_ip = request.client.host if request.client else "unknown"
    mcp_logger.debug(f"MCP_MESSAGE | IP: {client_ip}")

    if isinstance(body, list):
        responses = [r for r in [await server.handle(item) for item in body] if r is not None]
        if not responses:
            return Response(status_code=202)
        return JSONResponse(content=responses)

    response = await server.handle(body)
    if response is None:
        return Response(status_code=202)
    return JSONResponse(content=response)


@router.get("/mcp/tools", tags=["MCP"], summary="List registered tools")
async def mcp_tools(server: McpServer = Depends(get_mcp_server)) -> Dict[str, Any]:
    tools = server.dispatcher.list_tools()
    return {"tools": tools, "count": len(tools)}


@router.get("/mcp/status", tags=["MCP"], summary="Health check for MCP subsystem")
async def mcp_status(server: McpServer = Depends(get_mcp_server)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "server": server.name,
        "version": server.version,
        "protocolVersion": server.initialize_result()["protocolVersion"],
        "tools": len(server.dispatcher.registry),
        "categories": get_categories(),
    }

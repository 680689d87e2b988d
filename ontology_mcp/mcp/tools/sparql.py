"""SPARQL tools: queries, updates, repository and graph listing."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ...config import Settings
from ...services.sparql import RESULT_FORMATS, SparqlClient
from ..models import ToolDescriptor
from .common import bind, wrap

_ENDPOINT = {
    "type": "string",
    "description": "SPARQL endpoint base URL (overrides SPARQL_ENDPOINT for this call)",
}
_REPOSITORY = {
    "type": "string",
    "description": "Repository ID (defaults to SPARQL_DEFAULT_REPOSITORY)",
}

SPARQL_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "mcp_sparql_execute_query",
        "description": "Execute a SPARQL query against the triple store",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "SPARQL query to execute"},
                "repository": _REPOSITORY,
                "endpoint": _ENDPOINT,
                "format": {
                    "type": "string",
                    "enum": list(RESULT_FORMATS),
                    "description": "Result format",
                    "default": "json",
                },
                "explain": {
                    "type": "boolean",
                    "description": "Return the query explanation instead of results",
                    "default": False,
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": "mcp_sparql_update",
        "description": "Execute a SPARQL update (INSERT/DELETE) against a repository",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "SPARQL update query"},
                "repository": _REPOSITORY,
                "endpoint": _ENDPOINT,
            },
            "required": ["query"],
        },
    },
    {
        "name": "mcp_sparql_list_repositories",
        "description": "List the repositories available on the SPARQL server",
        "inputSchema": {
            "type": "object",
            "properties": {"endpoint": _ENDPOINT},
            "required": [],
        },
    },
    {
        "name": "mcp_sparql_list_graphs",
        "description": "List the named graphs of a repository",
        "inputSchema": {
            "type": "object",
            "properties": {"repository": _REPOSITORY, "endpoint": _ENDPOINT},
            "required": [],
        },
    },
    {
        "name": "mcp_sparql_get_resource_info",
        "description": "Get every predicate/object pair of a resource URI",
        "inputSchema": {
            "type": "object",
            "properties": {
                "uri": {"type": "string", "description": "URI of the resource"},
                "repository": _REPOSITORY,
                "endpoint": _ENDPOINT,
            },
            "required": ["uri"],
        },
    },
]


def build_sparql_tools(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[ToolDescriptor]:
    client = SparqlClient(settings.sparql(), transport=transport)

    async def execute_query(args: Dict[str, Any]) -> Any:
        return await client.execute_query(
            args["query"],
            repository=args.get("repository"),
            endpoint=args.get("endpoint"),
            format=args.get("format") or "json",
            explain=bool(args.get("explain")),
        )

    async def update(args: Dict[str, Any]) -> Any:
        return await client.update(args["query"], repository=args.get("repository"), endpoint=args.get("endpoint"))

    async def list_repositories(args: Dict[str, Any]) -> Any:
        return await client.list_repositories(endpoint=args.get("endpoint"))

    async def list_graphs(args: Dict[str, Any]) -> Any:
        return await client.list_graphs(repository=args.get("repository"), endpoint=args.get("endpoint"))

    async def get_resource_info(args: Dict[str, Any]) -> Any:
        return await client.get_resource_info(args["uri"], repository=args.get("repository"), endpoint=args.get("endpoint"))

    return bind(
        SPARQL_TOOLS,
        {
            "mcp_sparql_execute_query": wrap(execute_query, prefix="Query execution error"),
            "mcp_sparql_update": wrap(update, prefix="Update query error"),
            "mcp_sparql_list_repositories": wrap(list_repositories, prefix="Repository listing error"),
            "mcp_sparql_list_graphs": wrap(list_graphs, prefix="Graph listing error"),
            "mcp_sparql_get_resource_info": wrap(get_resource_info, prefix="Resource info error"),
        },
    )

"""
SPARQL Service - GraphDB / RDF4J style triple store
===================================================

Read queries go to ``/repositories/{id}``, updates to
``/repositories/{id}/statements`` and the repository catalog is read from
``/rest/repositories``. Endpoint and repository can be overridden per call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import httpx

from ..config import SparqlConfig
from ..utils.errors import RemoteError, TransportError
from ..utils.http_client import HttpClient

logger = logging.getLogger("ontology_mcp.services.sparql")

RESULT_FORMATS = ("json", "xml", "csv", "tsv")

LIST_GRAPHS_QUERY = "SELECT DISTINCT ?graph WHERE { GRAPH ?graph { ?s ?p ?o } } ORDER BY ?graph"


def resource_info_query(uri: str) -> str:
    return f"SELECT ?p ?o WHERE {{ <{uri}> ?p ?o . }}"


def accept_header(result_format: str) -> str:
    return f"application/sparql-results+{result_format or 'json'}"


class SparqlClient:
    """Stateless client; every call resolves its effective config first."""

    def __init__(self, config: SparqlConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def _http(self, config: SparqlConfig) -> HttpClient:
        return HttpClient(timeout=config.timeout, transport=self.transport, service="SPARQL")

    async def _send(self, config: SparqlConfig, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._http(config).request(method, url, **kwargs)
        except RemoteError as exc:
            raise exc.with_message(f"SPARQL query error ({exc.status_code}): {exc.body}") from exc
        except TransportError as exc:
            raise TransportError(f"SPARQL endpoint unreachable ({config.endpoint}): {exc.message}") from exc

    # =========================================================================
    # Queries
    # =========================================================================

    async def execute_query(
        self,
        query: str,
        *,
        repository: Optional[str] = None,
        endpoint: Optional[str] = None,
        format: str = "json",
        explain: bool = False,
    ) -> Union[Dict[str, Any], str]:
        """Run a read query; JSON results come back parsed, other formats as text."""
        config = self.config.resolve(endpoint=endpoint, repository=repository)
        result_format = format or "json"
        url = config.repository_url()
        if explain:
            url = f"{url}/explain"

        logger.info("SPARQL query on %s (format=%s, explain=%s)", url, result_format, explain)
        resp = await self._send(
            config,
            "POST",
            url,
            content=query.encode("utf-8"),
            headers={
                "Content-Type": "application/sparql-query",
                "Accept": accept_header(result_format),
            },
        )
        if result_format == "json":
            try:
                return resp.json()
            except ValueError:
                return resp.text
        return resp.text

    async def update(
        self,
        query: str,
        *,
        repository: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> Dict[str, Any]:
        config = self.config.resolve(endpoint=endpoint, repository=repository)
        url = f"{config.repository_url()}/statements"

        logger.info("SPARQL update on %s", url)
        resp = await self._send(
            config,
            "POST",
            url,
            content=query.encode("utf-8"),
            headers={
                "Content-Type": "application/sparql-update",
                "Accept": "application/json",
            },
        )
        return {"success": True, "status": resp.status_code}

    async def list_repositories(self, *, endpoint: Optional[str] = None) -> Any:
        config = self.config.resolve(endpoint=endpoint)
        url = f"{config.endpoint.rstrip('/')}/rest/repositories"
        resp = await self._send(config, "GET", url, headers={"Accept": "application/json"})
        try:
            return resp.json()
        except ValueError:
            return resp.text

    async def list_graphs(self, *, repository: Optional[str] = None, endpoint: Optional[str] = None) -> Union[Dict[str, Any], str]:
        return await self.execute_query(LIST_GRAPHS_QUERY, repository=repository, endpoint=endpoint)

    async def get_resource_info(
        self,
        uri: str,
        *,
        repository: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> Union[Dict[str, Any], str]:
        return await self.execute_query(resource_info_query(uri), repository=repository, endpoint=endpoint)

"""Tests for the SPARQL client and the mcp_sparql_* tools."""

import json

import httpx
import pytest

from ontology_mcp.config import SparqlConfig, resolve_config
from ontology_mcp.mcp.dispatcher import Dispatcher
from ontology_mcp.mcp.tools import build_registry
from ontology_mcp.services.sparql import LIST_GRAPHS_QUERY, SparqlClient
from ontology_mcp.utils.errors import RemoteError, TransportError
from tests._helpers import StubBackend, refuse

RESULTS = {
    "head": {"vars": ["s"]},
    "results": {"bindings": [{"s": {"type": "uri", "value": "https://schema.org/Person"}}]},
}


def _client(backend, **config):
    defaults = {"endpoint": "http://graphdb.test:7200", "default_repository": "schemaorg-current-https"}
    defaults.update(config)
    return SparqlClient(SparqlConfig(**defaults), transport=backend.transport)


class TestSparqlClient:
    @pytest.mark.asyncio
    async def test_execute_query_json(self):
        """
        Test query execution against the repository endpoint.

        Happy path: the query is posted as application/sparql-query and JSON results are returned.
        """
        backend = StubBackend(lambda request: httpx.Response(200, json=RESULTS))
        client = _client(backend)

        result = await client.execute_query("SELECT ?s WHERE { ?s ?p ?o } LIMIT 1")

        assert result == RESULTS
        request = backend.last
        assert request.method == "POST"
        assert str(request.url) == "http://graphdb.test:7200/repositories/schemaorg-current-https"
        assert request.headers["content-type"] == "application/sparql-query"
        assert request.headers["accept"] == "application/sparql-results+json"
        assert request.content == b"SELECT ?s WHERE { ?s ?p ?o } LIMIT 1"

    @pytest.mark.asyncio
    async def test_execute_query_csv_returns_text(self):
        """Non-JSON result formats come back as text."""
        backend = StubBackend(lambda request: httpx.Response(200, text="s\r\nhttps://schema.org/Person\r\n"))
        client = _client(backend)

        result = await client.execute_query("SELECT ?s WHERE { ?s ?p ?o }", format="csv")

        assert result.startswith("s\r\n")
        assert backend.last.headers["accept"] == "application/sparql-results+csv"

    @pytest.mark.asyncio
    async def test_explain_path(self):
        """Explain posts to the explain path of the repository."""
        backend = StubBackend(lambda request: httpx.Response(200, json={}))

        await _client(backend).execute_query("SELECT * WHERE { ?s ?p ?o }", explain=True)

        assert backend.last.url.path == "/repositories/schemaorg-current-https/explain"

    @pytest.mark.asyncio
    async def test_endpoint_override_keeps_default_repository(self):
        """
        Edge case: an endpoint override without a repository keeps the default repository.
        """
        backend = StubBackend(lambda request: httpx.Response(200, json=RESULTS))

        await _client(backend).execute_query("ASK {}", endpoint="http://other.test:7200/")

        assert str(backend.last.url) == "http://other.test:7200/repositories/schemaorg-current-https"

    @pytest.mark.asyncio
    async def test_repository_override(self):
        """A repository override changes only the repository path."""
        backend = StubBackend(lambda request: httpx.Response(200, json=RESULTS))

        await _client(backend).execute_query("ASK {}", repository="wikidata")

        assert backend.last.url.path == "/repositories/wikidata"

    @pytest.mark.asyncio
    async def test_update_posts_to_statements(self):
        """
        Happy path: updates go to the statements path and report success.
        """
        backend = StubBackend(lambda request: httpx.Response(204))

        result = await _client(backend).update("INSERT DATA { <urn:a> <urn:b> <urn:c> }")

        assert result == {"success": True, "status": 204}
        assert backend.last.url.path == "/repositories/schemaorg-current-https/statements"
        assert backend.last.headers["content-type"] == "application/sparql-update"

    @pytest.mark.asyncio
    async def test_list_repositories(self):
        """Repositories are listed through the REST API."""
        repos = [{"id": "schemaorg-current-https", "title": "Schema.org"}]
        backend = StubBackend(lambda request: httpx.Response(200, json=repos))

        result = await _client(backend).list_repositories()

        assert result == repos
        assert backend.last.method == "GET"
        assert str(backend.last.url) == "http://graphdb.test:7200/rest/repositories"

    @pytest.mark.asyncio
    async def test_list_graphs_query(self):
        """Listing graphs sends the named graph query."""
        backend = StubBackend(lambda request: httpx.Response(200, json=RESULTS))

        await _client(backend).list_graphs()

        assert backend.last.content.decode() == LIST_GRAPHS_QUERY

    @pytest.mark.asyncio
    async def test_resource_info_query(self):
        """Resource info queries every predicate and object of the URI."""
        backend = StubBackend(lambda request: httpx.Response(200, json=RESULTS))

        await _client(backend).get_resource_info("https://schema.org/Person")

        assert backend.last.content.decode() == "SELECT ?p ?o WHERE { <https://schema.org/Person> ?p ?o . }"

    @pytest.mark.asyncio
    async def test_error_status_keeps_body(self):
        """
        Error condition: a 500 from the store is reported with its status and body.
        """
        backend = StubBackend(lambda request: httpx.Response(500, text="MALFORMED QUERY: Lexical error"))

        with pytest.raises(RemoteError) as exc_info:
            await _client(backend).execute_query("SELEC broken")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "SPARQL query error (500): MALFORMED QUERY: Lexical error"

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self):
        """
        Error condition: a refused connection names the unreachable endpoint.
        """
        backend = StubBackend(refuse)

        with pytest.raises(TransportError, match="SPARQL endpoint unreachable"):
            await _client(backend).execute_query("ASK {}")


class TestSparqlTools:
    @pytest.mark.asyncio
    async def test_execute_query_tool_renders_json(self, settings):
        """
        Happy path: the query tool renders results as JSON text.
        """
        backend = StubBackend(lambda request: httpx.Response(200, json=RESULTS))
        dispatcher = Dispatcher(build_registry(settings, transport=backend.transport))

        response = await dispatcher.call_tool({"name": "mcp_sparql_execute_query", "arguments": {"query": "SELECT * {}"}})

        assert json.loads(response.first_text) == RESULTS

    @pytest.mark.asyncio
    async def test_execute_query_tool_error_text(self, settings):
        """
        Error condition: a store failure is reported with status and body.
        """
        backend = StubBackend(lambda request: httpx.Response(500, text="Internal store failure"))
        dispatcher = Dispatcher(build_registry(settings, transport=backend.transport))

        response = await dispatcher.call_tool({"name": "mcp_sparql_execute_query", "arguments": {"query": "SELECT * {}"}})

        text = response.first_text
        assert text.startswith("Query execution error: ")
        assert "500" in text
        assert "Internal store failure" in text

    @pytest.mark.asyncio
    async def test_missing_query(self, settings):
        """
        Error condition: a missing query is reported and no request is made.
        """
        backend = StubBackend(lambda request: httpx.Response(200, json=RESULTS))
        dispatcher = Dispatcher(build_registry(settings, transport=backend.transport))

        response = await dispatcher.call_tool({"name": "mcp_sparql_update", "arguments": {}})

        assert response.first_text == "Missing required arguments: query"
        assert backend.requests == []


class TestResolveConfig:
    def test_empty_override_returns_default(self):
        """
        Edge case: empty overrides return the default config itself.
        """
        default = SparqlConfig()

        assert resolve_config(default, {}) is default
        assert resolve_config(default, {"endpoint": None, "default_repository": ""}) is default

    def test_override_is_applied_without_mutating_default(self):
        """Overrides produce a new config and leave the default untouched."""
        default = SparqlConfig(endpoint="http://a.test", default_repository="one")

        resolved = resolve_config(default, {"endpoint": "http://b.test", "unknown": 1})

        assert resolved.endpoint == "http://b.test"
        assert resolved.default_repository == "one"
        assert default.endpoint == "http://a.test"

    def test_settings_fallback_endpoint(self, make_settings):
        """
        Edge case: without SPARQL_ENDPOINT the local GraphDB address is used.
        """
        settings = make_settings(sparql_endpoint=None)

        assert settings.sparql().endpoint == "http://localhost:7200"
        assert settings.sparql().repository_url() == "http://localhost:7200/repositories/schemaorg-current-https"

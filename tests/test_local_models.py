"""Tests for the Ollama and LM Studio clients and their tools."""

import json

import httpx
import pytest

from ontology_mcp.config import LocalRuntimeConfig
from ontology_mcp.mcp.dispatcher import Dispatcher
from ontology_mcp.mcp.tools import build_registry
from ontology_mcp.services.lmstudio import PULL_UNSUPPORTED, LMStudioClient
from ontology_mcp.services.ollama import OllamaClient
from ontology_mcp.utils.errors import RemoteError
from tests._helpers import StubBackend, refuse, routes

OLLAMA = LocalRuntimeConfig(endpoint="http://ollama.test:11434")
LMSTUDIO = LocalRuntimeConfig(endpoint="http://lmstudio.test:1234/v1")


class TestOllamaClient:
    @pytest.mark.asyncio
    async def test_run_returns_response_text(self):
        """
        Happy path: a generate call returns the response text.
        """
        backend = StubBackend(routes({"POST /api/generate": httpx.Response(200, json={"response": "Paris", "done": True})}))
        client = OllamaClient(OLLAMA, transport=backend.transport)

        text = await client.run("llama3", "Capital of France?")

        assert text == "Paris"
        assert backend.json_body() == {"model": "llama3", "prompt": "Capital of France?", "stream": False}

    @pytest.mark.asyncio
    async def test_chat_is_reshaped(self):
        """
        Test the Ollama chat answer is reshaped.

        Happy path: the reply becomes a chat.completion object and temperature goes into options.
        """
        backend = StubBackend(
            routes({"POST /api/chat": httpx.Response(200, json={"message": {"role": "assistant", "content": "Hi!"}})})
        )
        client = OllamaClient(OLLAMA, transport=backend.transport)

        result = await client.chat("llama3", [{"role": "user", "content": "Hello"}], temperature=0.2)

        assert result["object"] == "chat.completion"
        assert result["model"] == "llama3"
        assert result["id"].startswith("chatcmpl-")
        assert result["choices"] == [
            {"index": 0, "message": {"role": "assistant", "content": "Hi!"}, "finish_reason": "stop"}
        ]
        assert backend.json_body()["options"] == {"temperature": 0.2}

    @pytest.mark.asyncio
    async def test_show_and_remove(self):
        """Show returns the model details and remove sends the model name."""
        backend = StubBackend(
            routes(
                {
                    "POST /api/show": httpx.Response(200, json={"modelfile": "FROM llama3"}),
                    "DELETE /api/delete": httpx.Response(200),
                }
            )
        )
        client = OllamaClient(OLLAMA, transport=backend.transport)

        assert await client.show("llama3") == {"modelfile": "FROM llama3"}
        removed = await client.remove("llama3")

        assert removed["status"] == "success"
        assert backend.json_body() == {"name": "llama3"}

    @pytest.mark.asyncio
    async def test_error_message_from_body(self):
        """
        Error condition: the error field of the body becomes the message.
        """
        backend = StubBackend(routes({"POST /api/generate": httpx.Response(404, json={"error": "model 'nope' not found"})}))
        client = OllamaClient(OLLAMA, transport=backend.transport)

        with pytest.raises(RemoteError) as exc_info:
            await client.run("nope", "hi")

        assert exc_info.value.message == "Ollama API error: model 'nope' not found"

    @pytest.mark.asyncio
    async def test_status_online(self):
        """
        Happy path: a reachable server lists its model names.
        """
        tags = {"models": [{"name": "llama3:latest"}, {"name": "mistral:7b"}]}
        backend = StubBackend(routes({"GET /api/tags": httpx.Response(200, json=tags)}))
        client = OllamaClient(OLLAMA, transport=backend.transport)

        status = await client.status()

        assert status == {
            "status": "online",
            "endpoint": "http://ollama.test:11434",
            "models": ["llama3:latest", "mistral:7b"],
        }

    @pytest.mark.asyncio
    async def test_status_offline_never_raises(self):
        """
        Error condition: connection refused yields an offline status instead of an error.
        """
        client = OllamaClient(OLLAMA, transport=StubBackend(refuse).transport)

        status = await client.status()

        assert status["status"] == "offline"
        assert status["endpoint"] == "http://ollama.test:11434"
        assert "Connection refused" in status["error"]

    @pytest.mark.asyncio
    async def test_status_null_models_is_empty(self):
        """
        Error condition: a tags body with ``"models": null`` still reports online with no models.
        """
        backend = StubBackend(routes({"GET /api/tags": httpx.Response(200, json={"models": None})}))
        client = OllamaClient(OLLAMA, transport=backend.transport)

        status = await client.status()

        assert status == {"status": "online", "endpoint": "http://ollama.test:11434", "models": []}

    @pytest.mark.asyncio
    async def test_status_tool_with_null_models(self, make_settings):
        """
        Error condition: the status tool answers with a status object, not an exception message.
        """
        backend = StubBackend(routes({"GET /api/tags": httpx.Response(200, json={"models": None})}))
        dispatcher = Dispatcher(build_registry(make_settings(), transport=backend.transport))

        response = await dispatcher.call_tool({"name": "mcp_ollama_status", "arguments": {}})

        assert json.loads(response.first_text)["models"] == []


class TestLMStudioClient:
    @pytest.mark.asyncio
    async def test_pull_makes_no_request(self):
        """
        Edge case: LM Studio cannot pull, so pull answers without a request.
        """
        backend = StubBackend(refuse)
        client = LMStudioClient(LMSTUDIO, transport=backend.transport)

        result = await client.pull("qwen2.5-7b")

        assert result == {"status": "info", "model": "qwen2.5-7b", "message": PULL_UNSUPPORTED}
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_run_uses_completions(self):
        """Run goes through the completions endpoint with default sampling values."""
        backend = StubBackend(
            routes({"POST /v1/completions": httpx.Response(200, json={"choices": [{"text": "42"}]})})
        )
        client = LMStudioClient(LMSTUDIO, transport=backend.transport)

        assert await client.run("qwen2.5-7b", "6*7=") == "42"
        body = backend.json_body()
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 2048

    @pytest.mark.asyncio
    async def test_chat_passes_through(self):
        """The OpenAI-compatible chat answer is returned unchanged."""
        completion = {"object": "chat.completion", "choices": [{"message": {"role": "assistant", "content": "ok"}}]}
        backend = StubBackend(routes({"POST /v1/chat/completions": httpx.Response(200, json=completion)}))
        client = LMStudioClient(LMSTUDIO, transport=backend.transport)

        assert await client.chat("qwen2.5-7b", [{"role": "user", "content": "hi"}]) == completion

    @pytest.mark.asyncio
    async def test_status(self):
        """
        Happy path: a reachable LM Studio reports its models.
        """
        backend = StubBackend(routes({"GET /v1/models": httpx.Response(200, json={"data": [{"id": "qwen2.5-7b"}]})}))
        client = LMStudioClient(LMSTUDIO, transport=backend.transport)

        status = await client.status()

        assert status["status"] == "online"
        assert status["models"] == [{"id": "qwen2.5-7b"}]

    @pytest.mark.asyncio
    async def test_status_offline(self):
        """
        Error condition: a refused connection reports offline.
        """
        client = LMStudioClient(LMSTUDIO, transport=StubBackend(refuse).transport)

        assert (await client.status())["status"] == "offline"


class TestLocalModelTools:
    @pytest.mark.asyncio
    async def test_ollama_run_tool(self, settings):
        """
        Happy path: the run tool answers with the model output.
        """
        backend = StubBackend(routes({"POST /api/generate": httpx.Response(200, json={"response": "pong"})}))
        dispatcher = Dispatcher(build_registry(settings, transport=backend.transport))

        response = await dispatcher.call_tool({"name": "mcp_ollama_run", "arguments": {"name": "llama3", "prompt": "ping"}})

        assert response.first_text == "pong"

    @pytest.mark.asyncio
    async def test_status_tool_offline(self, settings):
        """
        Error condition: the status tool reports offline as JSON.
        """
        dispatcher = Dispatcher(build_registry(settings, transport=StubBackend(refuse).transport))

        response = await dispatcher.call_tool({"name": "mcp_lmstudio_status", "arguments": {}})

        assert json.loads(response.first_text)["status"] == "offline"

    @pytest.mark.asyncio
    async def test_run_tool_error_text(self, settings):
        """
        Error condition: a failed run is reported as prefixed text.
        """
        backend = StubBackend(routes({"POST /api/generate": httpx.Response(500, json={"error": "out of memory"})}))
        dispatcher = Dispatcher(build_registry(settings, transport=backend.transport))

        response = await dispatcher.call_tool({"name": "mcp_ollama_run", "arguments": {"name": "llama3", "prompt": "x"}})

        assert response.first_text == "Ollama API error: out of memory"

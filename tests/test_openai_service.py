"""Tests for the OpenAI client and the mcp_openai_* tools."""

import json
from pathlib import Path

import httpx
import pytest

from ontology_mcp.config import OpenAIConfig
from ontology_mcp.mcp.dispatcher import Dispatcher
from ontology_mcp.mcp.tools import build_registry
from ontology_mcp.services.openai_service import OpenAIClient
from ontology_mcp.utils.errors import MissingCredentialError, PreconditionError, RemoteError
from tests._helpers import StubBackend, routes

PNG = b"\x89PNG\r\n\x1a\nfake"


def _config(tmp_path, api_key="sk-test-openai-key-0000"):
    return OpenAIConfig(api_key=api_key, base_url="https://openai.test/v1", save_dir=str(tmp_path))


def _images_route(count):
    def generations(request):
        return httpx.Response(
            200,
            json={"created": 1, "data": [{"url": f"https://cdn.test/img-{i}.png"} for i in range(count)]},
        )

    return routes(
        {"POST /v1/images/generations": generations},
        default=lambda request: httpx.Response(200, content=PNG),
    )


class TestOpenAIClient:
    @pytest.mark.asyncio
    async def test_chat_completion_payload(self, tmp_path):
        """
        Test the chat completion request.

        Happy path: defaults are filled in and the key is sent as a bearer token.
        """
        completion = {"choices": [{"message": {"role": "assistant", "content": "Hello"}}]}
        backend = StubBackend(routes({"POST /v1/chat/completions": httpx.Response(200, json=completion)}))
        client = OpenAIClient(_config(tmp_path), transport=backend.transport)

        result = await client.chat_completion([{"role": "user", "content": "Hi"}], model="gpt-4o", max_tokens=50)

        assert result == completion
        body = backend.json_body()
        assert body == {
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "Hi"}],
            "temperature": 0.7,
            "stream": False,
            "max_tokens": 50,
        }
        assert backend.last.headers["authorization"] == "Bearer sk-test-openai-key-0000"

    @pytest.mark.asyncio
    async def test_generate_image_saves_every_file(self, tmp_path):
        """
        Happy path: two returned URLs produce two files named after fileName.
        """
        backend = StubBackend(_images_route(2))
        client = OpenAIClient(_config(tmp_path), transport=backend.transport)

        result = await client.generate_image("a red fox", n=2, file_name="fox")

        paths = [Path(item["path"]) for item in result["generated_images"]]
        assert [p.name for p in paths] == ["fox_0.png", "fox_1.png"]
        assert sorted(tmp_path.glob("*.png")) == sorted(paths)
        assert all(p.read_bytes() == PNG for p in paths)
        assert result["generated_images"][1]["url"] == "https://cdn.test/img-1.png"
        # image downloads carry no credentials
        assert "authorization" not in backend.requests[1].headers

    @pytest.mark.asyncio
    async def test_text_to_speech_writes_mp3(self, tmp_path):
        """
        Happy path: speech audio is written to an mp3 named after fileName.
        """
        backend = StubBackend(routes({"POST /v1/audio/speech": httpx.Response(200, content=b"ID3audio")}))
        client = OpenAIClient(_config(tmp_path), transport=backend.transport)

        result = await client.text_to_speech("Guten Tag", file_name="greeting")

        assert result["audio_file"] == str(tmp_path / "greeting.mp3")
        assert result["size_bytes"] == 8
        assert (tmp_path / "greeting.mp3").read_bytes() == b"ID3audio"
        assert backend.json_body()["voice"] == "alloy"

    @pytest.mark.asyncio
    async def test_speech_to_text_uploads_file(self, tmp_path):
        """
        Happy path: the audio file and language are sent as multipart form data.
        """
        audio = tmp_path / "clip.mp3"
        audio.write_bytes(b"ID3clip")
        backend = StubBackend(routes({"POST /v1/audio/transcriptions": httpx.Response(200, json={"text": "hello"})}))
        client = OpenAIClient(_config(tmp_path), transport=backend.transport)

        result = await client.speech_to_text(str(audio), language="en")

        assert result == {"text": "hello"}
        request = backend.last
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b"ID3clip" in request.content
        assert b'name="language"' in request.content

    @pytest.mark.asyncio
    async def test_speech_to_text_missing_file(self, tmp_path):
        """
        Error condition: a missing audio file fails before any request.
        """
        backend = StubBackend(lambda request: httpx.Response(200, json={}))
        client = OpenAIClient(_config(tmp_path), transport=backend.transport)

        with pytest.raises(PreconditionError, match="Audio file not found"):
            await client.speech_to_text(str(tmp_path / "nope.wav"))
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self, tmp_path):
        """
        Error condition: no API key means no request is made.
        """
        backend = StubBackend(lambda request: httpx.Response(200, json={}))
        client = OpenAIClient(_config(tmp_path, api_key=None), transport=backend.transport)

        with pytest.raises(MissingCredentialError):
            await client.generate_embeddings("text")
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_error_body_is_formatted(self, tmp_path):
        """
        Error condition: the error message carries the status and the JSON body.
        """
        error = {"error": {"message": "Rate limit reached", "type": "requests"}}
        backend = StubBackend(routes({"POST /v1/embeddings": httpx.Response(429, json=error)}))
        client = OpenAIClient(_config(tmp_path), transport=backend.transport)

        with pytest.raises(RemoteError) as exc_info:
            await client.generate_embeddings(["a", "b"], dimensions=256)

        assert exc_info.value.message.startswith("OpenAI API error (429): {")
        assert "Rate limit reached" in exc_info.value.message


class TestOpenAITools:
    @pytest.mark.asyncio
    async def test_missing_key_reported_as_text(self, make_settings):
        """
        Error condition: the chat tool reports the missing key as text.
        """
        backend = StubBackend(lambda request: httpx.Response(200, json={}))
        settings = make_settings(openai_api_key=None)
        dispatcher = Dispatcher(build_registry(settings, transport=backend.transport))

        response = await dispatcher.call_tool(
            {"name": "mcp_openai_chat", "arguments": {"model": "gpt-4o", "messages": [{"role": "user", "content": "hi"}]}}
        )

        assert response.first_text == "OpenAI chat error: OPENAI_API_KEY is not set."
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_numeric_arguments_are_forwarded_unchanged(self, settings):
        """
        Edge case: tool arguments are not coerced; "0.3" stays a string and 2.7 is not truncated.
        """
        completion = {"choices": [{"message": {"role": "assistant", "content": "ok"}}]}
        backend = StubBackend(routes({"POST /v1/chat/completions": httpx.Response(200, json=completion)}))
        dispatcher = Dispatcher(build_registry(settings, transport=backend.transport))

        await dispatcher.call_tool(
            {
                "name": "mcp_openai_chat",
                "arguments": {
                    "model": "gpt-4o",
                    "messages": [{"role": "user", "content": "hi"}],
                    "temperature": "0.3",
                    "max_tokens": 2.7,
                },
            }
        )

        body = backend.json_body()
        assert body["temperature"] == "0.3"
        assert body["max_tokens"] == 2.7

    @pytest.mark.asyncio
    async def test_image_tool_reports_paths(self, settings):
        """The image tool reports where each file was saved."""
        backend = StubBackend(_images_route(1))
        dispatcher = Dispatcher(build_registry(settings, transport=backend.transport))

        response = await dispatcher.call_tool({"name": "mcp_openai_image", "arguments": {"prompt": "fox", "fileName": "f"}})

        result = json.loads(response.first_text)
        path = Path(result["generated_images"][0]["path"])
        assert path.name == "f_0.png"
        assert path.parent == Path(settings.openai_save_dir)

    @pytest.mark.asyncio
    async def test_transcribe_missing_file_text(self, settings, tmp_path):
        """
        Error condition: the transcribe tool reports a missing file as text.
        """
        dispatcher = Dispatcher(build_registry(settings))

        response = await dispatcher.call_tool(
            {"name": "mcp_openai_transcribe", "arguments": {"audioPath": str(tmp_path / "missing.mp3")}}
        )

        assert response.first_text.startswith("OpenAI Whisper error: Audio file not found")

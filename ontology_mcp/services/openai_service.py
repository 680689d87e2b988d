"""
OpenAI Service - chat, images, speech and embeddings
====================================================

Thin REST client for api.openai.com. Generated images and speech are written
to the configured save directory and reported by local path.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx

from ..config import OpenAIConfig
from ..utils import files
from ..utils.errors import MissingCredentialError, PreconditionError, RemoteError, TransportError
from ..utils.http import format_body, json_object
from ..utils.http_client import HttpClient

logger = logging.getLogger("ontology_mcp.services.openai")

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_IMAGE_MODEL = "dall-e-3"
DEFAULT_TTS_MODEL = "tts-1"
DEFAULT_STT_MODEL = "whisper-1"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


class OpenAIClient:
    """Client for the OpenAI REST API. Requires ``OPENAI_API_KEY``."""

    def __init__(self, config: OpenAIConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def _require_key(self) -> str:
        if not self.config.api_key:
            raise MissingCredentialError("OPENAI_API_KEY is not set.")
        return self.config.api_key

    def _http(self, *, json_body: bool = True) -> HttpClient:
        headers = {"Authorization": f"Bearer {self._require_key()}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return HttpClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers=headers,
            transport=self.transport,
            service="OpenAI",
        )

    async def _post(self, path: str, *, json_body: bool = True, **kwargs) -> httpx.Response:
        http = self._http(json_body=json_body)
        try:
            return await http.post(path, **kwargs)
        except RemoteError as exc:
            raise exc.with_message(f"OpenAI API error ({exc.status_code}): {format_body(exc.body, exc.data)}") from exc
        except TransportError as exc:
            raise TransportError(f"OpenAI API request failed: {exc.message}") from exc

    async def _download(self, url: str) -> bytes:
        # Image URLs are pre-signed; no Authorization header
        http = HttpClient(timeout=self.config.timeout, transport=self.transport, service="OpenAI")
        try:
            return await http.download(url)
        except RemoteError as exc:
            raise exc.with_message(f"OpenAI image download failed ({exc.status_code}): {url}") from exc
        except TransportError as exc:
            raise TransportError(f"OpenAI image download failed: {exc.message}") from exc

    # =========================================================================
    # Chat / Embeddings
    # =========================================================================

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model or DEFAULT_CHAT_MODEL,
            "messages": messages,
            "temperature": 0.7 if temperature is None else temperature,
            "stream": False,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        resp = await self._post("chat/completions", json=payload)
        return json_object(resp)

    async def generate_embeddings(
        self,
        text: Union[str, List[str]],
        model: Optional[str] = None,
        dimensions: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": model or DEFAULT_EMBEDDING_MODEL, "input": text}
        if dimensions is not None:
            payload["dimensions"] = dimensions
        resp = await self._post("embeddings", json=payload)
        return json_object(resp)

    # =========================================================================
    # Images / Audio
    # =========================================================================

    async def generate_image(
        self,
        prompt: str,
        model: Optional[str] = None,
        n: Optional[int] = None,
        size: Optional[str] = None,
        quality: Optional[str] = None,
        style: Optional[str] = None,
        save_dir: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Generate images, download every returned URL and save it as PNG."""
        payload = {
            "model": model or DEFAULT_IMAGE_MODEL,
            "prompt": prompt,
            "n": n or 1,
            "size": size or "1024x1024",
            "quality": quality or "standard",
            "style": style or "vivid",
            "response_format": "url",
        }
        resp = await self._post("images/generations", json=payload)
        data = json_object(resp)

        directory = await files.ensure_dir(save_dir or self.config.save_dir)
        base = files.default_file_name("dalle", file_name)
        generated = []
        for index, item in enumerate(data.get("data") or []):
            url = item.get("url") if isinstance(item, dict) else None
            if not url:
                continue
            path = await files.write_bytes(directory / f"{base}_{index}.png", await self._download(url))
            generated.append({"path": str(path), "url": url})

        logger.info(f"OpenAI image generation saved {len(generated)} file(s) to {directory}")
        return {"generated_images": generated, "original_response": data}

    async def text_to_speech(
        self,
        text: str,
        model: Optional[str] = None,
        voice: Optional[str] = None,
        speed: Optional[float] = None,
        save_dir: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            "model": model or DEFAULT_TTS_MODEL,
            "input": text,
            "voice": voice or "alloy",
            "speed": speed or 1.0,
            "response_format": "mp3",
        }
        resp = await self._post("audio/speech", json=payload)
        audio = resp.content

        directory = await files.ensure_dir(save_dir or self.config.save_dir)
        base = files.default_file_name("tts", file_name)
        path = await files.write_bytes(directory / f"{base}.mp3", audio)
        return {
            "audio_file": str(path),
            "size_bytes": len(audio),
            "message": f"Audio saved to {path}",
        }

    async def speech_to_text(
        self,
        audio_path: str,
        model: Optional[str] = None,
        language: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload a local audio file to the transcription endpoint."""
        self._require_key()
        if not await files.file_exists(audio_path):
            raise PreconditionError(f"Audio file not found: {audio_path}")

        audio = await files.read_bytes(audio_path)
        form: Dict[str, str] = {"model": model or DEFAULT_STT_MODEL}
        if language:
            form["language"] = language
        if prompt:
            form["prompt"] = prompt

        resp = await self._post(
            "audio/transcriptions",
            json_body=False,
            data=form,
            files={"file": (Path(audio_path).name, audio)},
        )
        data = json_object(resp)
        return data or {"text": resp.text}

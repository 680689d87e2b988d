"""
Gemini Service - Google Generative Language API
===============================================

Text, chat, model listing, Imagen images, Veo videos and mixed text/image
generation. The API key travels as the ``key`` query parameter.

Video generation is a long-running operation: the job is submitted, then
the operation resource is polled every ``poll_interval`` seconds until it
reports ``done``. Polling stops after ``max_polls`` checks (0 = no limit);
cancelling the awaiting task cancels the loop at the next sleep.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import GeminiConfig
from ..utils import files
from ..utils.errors import (
    MissingCredentialError,
    OperationTimeoutError,
    RemoteError,
    ToolError,
    TransportError,
)
from ..utils.http import describe_status, json_object, provider_message
from ..utils.http_client import HttpClient

logger = logging.getLogger("ontology_mcp.services.gemini")

DEFAULT_TEXT_MODEL = "gemini-1.5-pro"
DEFAULT_IMAGE_MODEL = "imagen-3.0-generate-002"
DEFAULT_VIDEO_MODEL = "veo-2.0-generate-001"
DEFAULT_MULTIMODAL_MODEL = "gemini-2.0-flash"

NETWORK_ERROR = "Network error: unable to reach the Gemini API."
MISSING_KEY = "Gemini API key is not configured."


# =============================================================================
# Payload helpers
# =============================================================================


def convert_messages(messages: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Turn OpenAI-style chat messages into Gemini ``contents`` blocks.

    A system message is emitted at once as a user block with a ``[system] ``
    prefix; it does not close the run in progress, so the messages around it
    still merge. Consecutive messages with the same raw role share one block;
    ``assistant`` maps to ``model``, every other role to ``user``.
    """
    contents: List[Dict[str, Any]] = []
    current_role: Optional[str] = None
    current_parts: List[Dict[str, Any]] = []

    def block(role: Optional[str], parts: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {"role": "model" if role == "assistant" else "user", "parts": parts}

    for message in messages:
        role = message.get("role")
        text = message.get("content") or ""

        if role == "system":
            contents.append({"role": "user", "parts": [{"text": f"[system] {text}"}]})
            continue

        if role != current_role and current_parts:
            contents.append(block(current_role, current_parts))
            current_parts = []
        current_role = role
        current_parts.append({"text": text})

    if current_parts:
        contents.append(block(current_role, current_parts))
    return contents


def usage_from(data: Dict[str, Any]) -> Dict[str, int]:
    meta = data.get("usageMetadata") or {}
    completion = int(meta.get("candidatesTokenCount") or 0)
    prompt = int(meta.get("promptTokenCount") or 0)
    return {"completion_tokens": completion, "prompt_tokens": prompt, "total_tokens": prompt + completion}


def candidate_parts(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Parts of the first candidate; [] when the response has none."""
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return []
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return [p for p in parts if isinstance(p, dict)]


def first_text(data: Dict[str, Any]) -> str:
    """Text of the first part of the first candidate; "" otherwise."""
    parts = candidate_parts(data)
    if not parts:
        return ""
    return parts[0].get("text") or ""


def map_model(entry: Dict[str, Any]) -> Dict[str, Any]:
    name = entry.get("name") or ""
    methods = entry.get("supportedGenerationMethods") or []
    return {
        "id": name.split("/")[-1],
        "name": entry.get("displayName") or name,
        "description": entry.get("description") or "",
        "created": entry.get("createTime") or "",
        "updated": entry.get("updateTime") or "",
        "supports": {
            "chat": "generateContent" in methods,
            "completion": "generateContent" in methods,
            "embeddings": "embedContent" in methods,
        },
    }


def normalize_contents(contents: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Accept either full ``{role, parts}`` blocks or a bare list of parts.

    A bare list (``[{"text": ...}, {"inlineData": ...}]``) becomes one user block.
    """
    items = [c for c in contents if isinstance(c, dict)]
    if items and all("parts" in c for c in items):
        return items
    return [{"role": "user", "parts": items}]


def modality(value: str) -> str:
    lowered = value.lower()
    if lowered == "text":
        return "TEXT"
    if lowered == "image":
        return "IMAGE"
    return value.upper()


def _decode(b64: str) -> bytes:
    try:
        return base64.b64decode(b64)
    except (binascii.Error, ValueError) as exc:
        raise ToolError(f"Invalid base64 data in Gemini response: {exc}") from exc


class GeminiClient:
    """Client for the Gemini REST API. Requires ``GEMINI_API_KEY``."""

    def __init__(self, config: GeminiConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.transport = transport

    def _require_key(self) -> str:
        if not self.config.api_key:
            raise MissingCredentialError(MISSING_KEY)
        return self.config.api_key

    def _http(self) -> HttpClient:
        return HttpClient(
            base_url=self.base_url,
            timeout=self.config.timeout,
            params={"key": self._require_key()},
            headers={"Content-Type": "application/json"},
            transport=self.transport,
            service="Gemini",
        )

    async def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        http = self._http()
        try:
            resp = await http.request(method, path, **kwargs)
        except RemoteError as exc:
            message = describe_status(exc.status_code or 0, exc.data, service="Gemini API")
            logger.warning(f"Gemini API error {exc.status_code} on {path}: {message}")
            raise exc.with_message(message) from exc
        except TransportError as exc:
            raise TransportError(NETWORK_ERROR) from exc
        return json_object(resp)

    async def _download(self, uri: str) -> bytes:
        key = self._require_key()
        http = HttpClient(timeout=self.config.timeout, transport=self.transport, service="Gemini")
        try:
            return await http.download(uri, params={"key": key})
        except RemoteError as exc:
            raise exc.with_message(describe_status(exc.status_code or 0, exc.data, service="Gemini API")) from exc
        except TransportError as exc:
            raise TransportError(NETWORK_ERROR) from exc

    # =========================================================================
    # Text
    # =========================================================================

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_k: Optional[int] = None,
        top_p: Optional[float] = None,
    ) -> Dict[str, Any]:
        model = model or DEFAULT_TEXT_MODEL
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": 0.7 if temperature is None else temperature,
                "maxOutputTokens": max_tokens or 1024,
                "topK": top_k or 40,
                "topP": 0.95 if top_p is None else top_p,
            },
        }
        data = await self._call("POST", f"models/{model}:generateContent", json=payload)
        return {"text": first_text(data), "model": model, "usage": usage_from(data)}

    async def chat_completion(
        self,
        messages: Sequence[Dict[str, Any]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        model = model or DEFAULT_TEXT_MODEL
        payload = {
            "contents": convert_messages(messages),
            "generationConfig": {
                "temperature": 0.7 if temperature is None else temperature,
                "maxOutputTokens": max_tokens or 1024,
                "topK": 40,
                "topP": 0.95,
            },
        }
        data = await self._call("POST", f"models/{model}:generateContent", json=payload)
        return {
            "message": {"role": "assistant", "content": first_text(data)},
            "model": model,
            "usage": usage_from(data),
        }

    async def list_models(self) -> List[Dict[str, Any]]:
        """Models whose name contains ``gemini``."""
        data = await self._call("GET", "models")
        entries = [m for m in data.get("models") or [] if isinstance(m, dict)]
        return [map_model(m) for m in entries if "gemini" in (m.get("name") or "")]

    # =========================================================================
    # Images
    # =========================================================================

    async def generate_images(
        self,
        prompt: str,
        model: Optional[str] = None,
        number_of_images: Optional[int] = None,
        size: Optional[str] = None,
        save_dir: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        model = model or DEFAULT_IMAGE_MODEL
        payload = {
            "prompt": {"text": prompt},
            "sampleCount": number_of_images or 1,
            "sampleImageSize": size or "1024x1024",
        }
        data = await self._call("POST", f"models/{model}:generateImages", json=payload)

        directory = await files.ensure_dir(save_dir or self.config.save_dir)
        base = files.default_file_name("imagen", file_name, sep="-")
        saved: List[str] = []
        for index, image in enumerate(data.get("images") or [], start=1):
            encoded = image.get("bytesBase64") if isinstance(image, dict) else None
            if not encoded:
                continue
            path = await files.write_bytes(directory / f"{base}-{index}.png", _decode(encoded))
            saved.append(str(path))

        return {"model": model, "prompt": prompt, "images": saved, "count": len(saved)}

    async def generate_multimodal_content(
        self,
        contents: List[Dict[str, Any]],
        model: Optional[str] = None,
        response_modalities: Optional[Sequence[str]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        save_dir: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Mixed text/image generation; inline images are saved as PNG files."""
        model = model or DEFAULT_MULTIMODAL_MODEL
        payload = {
            "contents": normalize_contents(contents),
            "generationConfig": {
                "temperature": 0.7 if temperature is None else temperature,
                "maxOutputTokens": max_tokens or 1024,
                "responseModalities": [modality(m) for m in (response_modalities or ["text"])],
            },
        }
        data = await self._call("POST", f"models/{model}:generateContent", json=payload)

        texts: List[str] = []
        images: List[str] = []
        base = files.default_file_name("gemini-multimodal", file_name, sep="-")
        directory = None
        for part in candidate_parts(data):
            if part.get("text"):
                texts.append(part["text"])
                continue
            inline = part.get("inlineData") or {}
            if inline.get("data"):
                if directory is None:
                    directory = await files.ensure_dir(save_dir or self.config.save_dir)
                path = await files.write_bytes(directory / f"{base}-{len(images) + 1}.png", _decode(inline["data"]))
                images.append(str(path))

        return {"model": model, "text": texts, "images": images}

    # =========================================================================
    # Video (long-running operation)
    # =========================================================================

    async def wait_for_operation(
        self,
        operation_name: str,
        poll_interval: Optional[float] = None,
        max_polls: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Poll ``{base}/{operation}`` until it is done.

        Raises:
            RemoteError: the operation finished with an error
            OperationTimeoutError: still running after ``max_polls`` checks
        """
        interval = self.config.poll_interval if poll_interval is None else poll_interval
        limit = self.config.max_polls if max_polls is None else max_polls

        polls = 0
        while True:
            await asyncio.sleep(interval)
            polls += 1
            operation = await self._call("GET", operation_name)

            if operation.get("done"):
                error = operation.get("error")
                if error:
                    message = provider_message({"error": error}) or "Video generation failed."
                    raise RemoteError(message, data=operation)
                logger.info(f"Operation {operation_name} done after {polls} poll(s)")
                return operation

            logger.debug(f"Operation {operation_name} still running (poll {polls})")
            if limit and polls >= limit:
                raise OperationTimeoutError(
                    f"Video generation did not complete after {polls} status checks (operation: {operation_name})"
                )

    async def generate_videos(
        self,
        prompt: str,
        model: Optional[str] = None,
        aspect_ratio: Optional[str] = None,
        number_of_videos: Optional[int] = None,
        duration_seconds: Optional[int] = None,
        person_generation: Optional[str] = None,
        image: Optional[Dict[str, Any]] = None,
        save_dir: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        model = model or DEFAULT_VIDEO_MODEL
        payload: Dict[str, Any] = {
            "prompt": {"text": prompt},
            "config": {
                "aspectRatio": aspect_ratio or "16:9",
                "numberOfVideos": number_of_videos or 1,
                "durationSeconds": duration_seconds or 5,
                "personGeneration": person_generation or "dont_allow",
            },
        }
        if image:
            payload["image"] = image

        started = await self._call("POST", f"models/{model}:generateVideos", json=payload)
        operation_name = started.get("name")
        if not operation_name:
            raise ToolError("Unable to start video generation operation")

        logger.info(f"Video generation started: {operation_name}")
        operation = started if started.get("done") else await self.wait_for_operation(operation_name)
        if operation.get("error"):
            raise RemoteError(provider_message(operation) or "Video generation failed.", data=operation)

        generated = (operation.get("response") or {}).get("generatedVideos") or []
        directory = await files.ensure_dir(save_dir or self.config.save_dir)
        base = files.default_file_name("veo", file_name, sep="-")
        saved: List[str] = []
        for index, entry in enumerate(generated, start=1):
            uri = ((entry or {}).get("video") or {}).get("uri") if isinstance(entry, dict) else None
            if not uri:
                continue
            path = await files.write_bytes(directory / f"{base}-{index}.mp4", await self._download(uri))
            saved.append(str(path))

        return {"model": model, "prompt": prompt, "videos": saved, "count": len(saved)}

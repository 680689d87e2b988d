"""OpenAI tools: chat, DALL-E images, TTS, Whisper and embeddings."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ...config import Settings
from ...services.openai_service import OpenAIClient
from ..models import ToolDescriptor
from .common import bind, wrap

_SAVE_DIR = {"type": "string", "description": "Directory to save the file(s) in (default OPENAI_SAVE_DIR)"}
_FILE_NAME = {"type": "string", "description": "File name without extension"}

OPENAI_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "mcp_openai_chat",
        "description": "Create a chat completion with the OpenAI API",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "description": "Model to use (e.g. gpt-4o, gpt-4o-mini)"},
                "messages": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "role": {"type": "string", "enum": ["system", "user", "assistant"]},
                            "content": {"type": "string"},
                        },
                        "required": ["role", "content"],
                    },
                    "description": "Conversation messages",
                },
                "temperature": {"type": "number", "description": "Sampling temperature (0-2)", "minimum": 0, "maximum": 2},
                "max_tokens": {"type": "number", "description": "Maximum tokens to generate"},
            },
            "required": ["model", "messages"],
        },
    },
    {
        "name": "mcp_openai_image",
        "description": "Generate images with DALL-E. Returns the saved file paths; tell the user where the files are.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "Image prompt"},
                "model": {"type": "string", "description": "Model (dall-e-3, dall-e-2)"},
                "n": {"type": "number", "description": "Number of images", "minimum": 1, "maximum": 10},
                "size": {"type": "string", "enum": ["256x256", "512x512", "1024x1024", "1792x1024", "1024x1792"]},
                "quality": {"type": "string", "enum": ["standard", "hd"], "description": "dall-e-3 only"},
                "style": {"type": "string", "enum": ["vivid", "natural"], "description": "dall-e-3 only"},
                "saveDir": _SAVE_DIR,
                "fileName": _FILE_NAME,
            },
            "required": ["prompt"],
        },
    },
    {
        "name": "mcp_openai_tts",
        "description": "Convert text to speech (mp3). Returns the saved audio file path.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "Text to speak"},
                "model": {"type": "string", "description": "Model (tts-1, tts-1-hd)"},
                "voice": {"type": "string", "enum": ["alloy", "echo", "fable", "onyx", "nova", "shimmer"]},
                "speed": {"type": "number", "description": "Speed (0.25-4.0)", "minimum": 0.25, "maximum": 4.0},
                "saveDir": _SAVE_DIR,
                "fileName": _FILE_NAME,
            },
            "required": ["text"],
        },
    },
    {
        "name": "mcp_openai_transcribe",
        "description": "Transcribe a local audio file with Whisper",
        "inputSchema": {
            "type": "object",
            "properties": {
                "audioPath": {"type": "string", "description": "Path of the audio file"},
                "model": {"type": "string", "description": "Model (whisper-1)"},
                "language": {"type": "string", "description": "Spoken language (e.g. en, de, ko)"},
                "prompt": {"type": "string", "description": "Hint text for the recognizer"},
            },
            "required": ["audioPath"],
        },
    },
    {
        "name": "mcp_openai_embedding",
        "description": "Create text embeddings",
        "inputSchema": {
            "type": "object",
            "properties": {
                "text": {
                    "oneOf": [{"type": "string"}, {"type": "array", "items": {"type": "string"}}],
                    "description": "Text or list of texts",
                },
                "model": {"type": "string", "description": "Model (text-embedding-3-small, text-embedding-3-large)"},
                "dimensions": {"type": "number", "description": "Embedding dimensions, if supported"},
            },
            "required": ["text"],
        },
    },
]


def build_openai_tools(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[ToolDescriptor]:
    client = OpenAIClient(settings.openai(), transport=transport)

    async def chat(args: Dict[str, Any]) -> Any:
        return await client.chat_completion(
            args["messages"],
            model=args.get("model"),
            temperature=args.get("temperature"),
            max_tokens=args.get("max_tokens"),
        )

    async def image(args: Dict[str, Any]) -> Any:
        return await client.generate_image(
            args["prompt"],
            model=args.get("model"),
            n=args.get("n"),
            size=args.get("size"),
            quality=args.get("quality"),
            style=args.get("style"),
            save_dir=args.get("saveDir"),
            file_name=args.get("fileName"),
        )

    async def tts(args: Dict[str, Any]) -> Any:
        return await client.text_to_speech(
            args["text"],
            model=args.get("model"),
            voice=args.get("voice"),
            speed=args.get("speed"),
            save_dir=args.get("saveDir"),
            file_name=args.get("fileName"),
        )

    async def transcribe(args: Dict[str, Any]) -> Any:
        return await client.speech_to_text(
            args["audioPath"],
            model=args.get("model"),
            language=args.get("language"),
            prompt=args.get("prompt"),
        )

    async def embedding(args: Dict[str, Any]) -> Any:
        return await client.generate_embeddings(
            args["text"],
            model=args.get("model"),
            dimensions=args.get("dimensions"),
        )

    return bind(
        OPENAI_TOOLS,
        {
            "mcp_openai_chat": wrap(chat, prefix="OpenAI chat error"),
            "mcp_openai_image": wrap(image, prefix="OpenAI image generation error"),
            "mcp_openai_tts": wrap(tts, prefix="OpenAI TTS error"),
            "mcp_openai_transcribe": wrap(transcribe, prefix="OpenAI Whisper error"),
            "mcp_openai_embedding": wrap(embedding, prefix="OpenAI embedding error"),
        },
    )

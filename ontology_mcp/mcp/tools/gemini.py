"""Gemini tools: text, chat, models, Imagen, Veo and multimodal generation."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx

from ...config import Settings
from ...services.gemini import DEFAULT_IMAGE_MODEL, DEFAULT_VIDEO_MODEL, GeminiClient
from ...utils.errors import PreconditionError
from ..models import ToolDescriptor
from .common import bind, wrap

DEFAULT_IMAGE_GENERATION_MODEL = "gemini-2.0-flash-exp-image-generation"

_SAVE_DIR = {"type": "string", "description": "Directory to save the file(s) in (default GEMINI_SAVE_DIR)"}
_FILE_NAME = {"type": "string", "description": "Base file name without extension"}
_SAMPLING = {
    "temperature": {"type": "number", "description": "Sampling temperature", "default": 0.7, "minimum": 0, "maximum": 1},
    "max_tokens": {"type": "number", "description": "Maximum output tokens", "default": 1024},
    "topK": {"type": "number", "description": "Top-k sampling", "default": 40},
    "topP": {"type": "number", "description": "Top-p sampling", "default": 0.95},
}

GEMINI_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "mcp_gemini_generate_text",
        "description": "Generate text with a Gemini model",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "description": "Model ID (e.g. gemini-1.5-pro, gemini-2.0-flash)"},
                "prompt": {"type": "string", "description": "Prompt text"},
                **_SAMPLING,
            },
            "required": ["model", "prompt"],
        },
    },
    {
        "name": "mcp_gemini_chat_completion",
        "description": "Chat completion with a Gemini model (OpenAI-style messages)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "description": "Model ID"},
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
                **_SAMPLING,
            },
            "required": ["model", "messages"],
        },
    },
    {
        "name": "mcp_gemini_list_models",
        "description": "List the available Gemini models",
        "inputSchema": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "mcp_gemini_generate_images",
        "description": "Generate images with Imagen. Returns the saved file paths.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "default": DEFAULT_IMAGE_MODEL},
                "prompt": {"type": "string", "description": "Image prompt"},
                "numberOfImages": {"type": "number", "default": 1, "minimum": 1, "maximum": 4},
                "size": {"type": "string", "default": "1024x1024"},
                "saveDir": _SAVE_DIR,
                "fileName": _FILE_NAME,
            },
            "required": ["prompt"],
        },
    },
    {
        "name": "mcp_gemini_generate_videos",
        "description": "Generate videos with Veo. Waits for the job and returns the saved file paths.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "default": DEFAULT_VIDEO_MODEL},
                "prompt": {"type": "string", "description": "Video prompt"},
                "image": {
                    "type": "object",
                    "description": "Optional start frame",
                    "properties": {
                        "imageBytes": {"type": "string", "description": "Base64 image data"},
                        "mimeType": {"type": "string", "description": "e.g. image/png"},
                    },
                },
                "numberOfVideos": {"type": "number", "default": 1, "minimum": 1, "maximum": 2},
                "aspectRatio": {"type": "string", "enum": ["16:9", "9:16"], "default": "16:9"},
                "personGeneration": {"type": "string", "enum": ["dont_allow", "allow_adult"], "default": "dont_allow"},
                "durationSeconds": {"type": "number", "default": 5, "minimum": 5, "maximum": 8},
                "saveDir": _SAVE_DIR,
                "fileName": _FILE_NAME,
            },
            "required": ["prompt"],
        },
    },
    {
        "name": "mcp_gemini_generate_multimodal_content",
        "description": "Generate mixed text and image output. Images are saved as PNG files.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "default": "gemini-2.0-flash"},
                "contents": {
                    "type": "array",
                    "description": "Input parts (text and/or inline images)",
                    "items": {
                        "type": "object",
                        "properties": {
                            "text": {"type": "string"},
                            "inlineData": {
                                "type": "object",
                                "properties": {
                                    "mimeType": {"type": "string"},
                                    "data": {"type": "string", "description": "Base64 data"},
                                },
                            },
                        },
                    },
                },
                "responseModalities": {
                    "type": "array",
                    "items": {"type": "string", "enum": ["text", "image"]},
                    "default": ["text", "image"],
                },
                "temperature": _SAMPLING["temperature"],
                "max_tokens": _SAMPLING["max_tokens"],
                "saveDir": _SAVE_DIR,
                "fileName": _FILE_NAME,
            },
            "required": ["contents"],
        },
    },
    {
        "name": "mcp_imagen_generate",
        "description": "Generate images with an Imagen model (model name must contain 'imagen')",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "default": DEFAULT_IMAGE_MODEL},
                "prompt": {"type": "string", "description": "Image prompt"},
                "numberOfImages": {"type": "number", "default": 1, "minimum": 1, "maximum": 4},
                "size": {"type": "string", "default": "1024x1024"},
                "saveDir": _SAVE_DIR,
                "fileName": _FILE_NAME,
            },
            "required": ["prompt"],
        },
    },
    {
        "name": "mcp_gemini_create_image",
        "description": "Create an image with a Gemini image-generation model",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "default": DEFAULT_IMAGE_GENERATION_MODEL},
                "prompt": {"type": "string", "description": "Image prompt"},
                "saveDir": _SAVE_DIR,
                "fileName": _FILE_NAME,
            },
            "required": ["prompt"],
        },
    },
    {
        "name": "mcp_gemini_edit_image",
        "description": "Edit an image with a Gemini image-generation model",
        "inputSchema": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "default": DEFAULT_IMAGE_GENERATION_MODEL},
                "prompt": {"type": "string", "description": "Edit instruction"},
                "imageData": {"type": "string", "description": "Base64 data of the source image"},
                "imageMimeType": {"type": "string", "default": "image/png"},
                "saveDir": _SAVE_DIR,
                "fileName": _FILE_NAME,
            },
            "required": ["prompt", "imageData"],
        },
    },
]


def multimodal_text(result: Dict[str, Any]) -> str:
    text = ""
    if result.get("text"):
        text += "Generated text:\n" + "\n\n".join(result["text"]) + "\n\n"
    images = result.get("images") or []
    if images:
        text += f"Generated image files: {json.dumps(images)}\nTotal {len(images)} images generated."
    return text or "The model returned no text or images."


def video_text(result: Dict[str, Any]) -> str:
    return (
        f"Video generated successfully. Files: {json.dumps(result.get('videos') or [])}\n"
        f"Total {result.get('count', 0)} videos generated."
    )


def build_gemini_tools(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[ToolDescriptor]:
    client = GeminiClient(settings.gemini(), transport=transport)

    async def generate_text(args: Dict[str, Any]) -> Any:
        return await client.generate_text(
            args["prompt"],
            model=args.get("model"),
            temperature=args.get("temperature"),
            max_tokens=args.get("max_tokens"),
            top_k=args.get("topK"),
            top_p=args.get("topP"),
        )

    async def chat(args: Dict[str, Any]) -> Any:
        return await client.chat_completion(
            args["messages"],
            model=args.get("model"),
            temperature=args.get("temperature"),
            max_tokens=args.get("max_tokens"),
        )

    async def list_models(args: Dict[str, Any]) -> Any:
        return await client.list_models()

    async def generate_images(args: Dict[str, Any]) -> Any:
        return await client.generate_images(
            args["prompt"],
            model=args.get("model"),
            number_of_images=args.get("numberOfImages"),
            size=args.get("size"),
            save_dir=args.get("saveDir"),
            file_name=args.get("fileName"),
        )

    async def imagen_generate(args: Dict[str, Any]) -> Any:
        model = args.get("model") or DEFAULT_IMAGE_MODEL
        if "imagen" not in model:
            raise PreconditionError(f"Model '{model}' is not an Imagen model (name must contain 'imagen').")
        return await generate_images({**args, "model": model})

    async def generate_videos(args: Dict[str, Any]) -> Any:
        return await client.generate_videos(
            args["prompt"],
            model=args.get("model"),
            aspect_ratio=args.get("aspectRatio"),
            number_of_videos=args.get("numberOfVideos"),
            duration_seconds=args.get("durationSeconds"),
            person_generation=args.get("personGeneration"),
            image=args.get("image"),
            save_dir=args.get("saveDir"),
            file_name=args.get("fileName"),
        )

    async def multimodal(args: Dict[str, Any]) -> Any:
        return await client.generate_multimodal_content(
            args["contents"],
            model=args.get("model"),
            response_modalities=args.get("responseModalities") or ["text", "image"],
            temperature=args.get("temperature"),
            max_tokens=args.get("max_tokens"),
            save_dir=args.get("saveDir"),
            file_name=args.get("fileName"),
        )

    def _image_model(args: Dict[str, Any]) -> str:
        model = args.get("model") or DEFAULT_IMAGE_GENERATION_MODEL
        if "gemini" not in model:
            raise PreconditionError(f"Model '{model}' is not a Gemini model (name must contain 'gemini').")
        return model

    async def create_image(args: Dict[str, Any]) -> Any:
        model = _image_model(args)
        return await client.generate_multimodal_content(
            [{"text": args["prompt"]}],
            model=model,
            response_modalities=["text", "image"],
            save_dir=args.get("saveDir"),
            file_name=args.get("fileName"),
        )

    async def edit_image(args: Dict[str, Any]) -> Any:
        model = _image_model(args)
        parts = [
            {"text": args["prompt"]},
            {"inlineData": {"mimeType": args.get("imageMimeType") or "image/png", "data": args["imageData"]}},
        ]
        return await client.generate_multimodal_content(
            parts,
            model=model,
            response_modalities=["text", "image"],
            save_dir=args.get("saveDir"),
            file_name=args.get("fileName"),
        )

    return bind(
        GEMINI_TOOLS,
        {
            "mcp_gemini_generate_text": wrap(
                generate_text, prefix="Gemini text generation error", to_text=lambda r: r["text"]
            ),
            "mcp_gemini_chat_completion": wrap(
                chat, prefix="Gemini chat completion error", to_text=lambda r: r["message"]["content"]
            ),
            "mcp_gemini_list_models": wrap(list_models, prefix="Gemini model listing error"),
            "mcp_gemini_generate_images": wrap(generate_images, prefix="Gemini image generation error"),
            "mcp_gemini_generate_videos": wrap(generate_videos, prefix="Gemini video generation error", to_text=video_text),
            "mcp_gemini_generate_multimodal_content": wrap(
                multimodal, prefix="Gemini multimodal generation error", to_text=multimodal_text
            ),
            "mcp_imagen_generate": wrap(imagen_generate, prefix="Imagen generation error"),
            "mcp_gemini_create_image": wrap(create_image, prefix="Image creation error", to_text=multimodal_text),
            "mcp_gemini_edit_image": wrap(edit_image, prefix="Image editing error", to_text=multimodal_text),
        },
    )

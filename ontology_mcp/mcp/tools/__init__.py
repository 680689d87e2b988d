"""
Tool catalog
============

Categories, in listing order:
- SPARQL (5), Ollama (7), LM Studio (7), HTTP (1), OpenAI (5), Gemini (9)
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ...config import Settings
from ..registry import ToolRegistry
from .gemini import GEMINI_TOOLS, build_gemini_tools
from .http import HTTP_TOOLS, build_http_tools
from .local_models import LMSTUDIO_TOOLS, OLLAMA_TOOLS, build_lmstudio_tools, build_ollama_tools
from .openai import OPENAI_TOOLS, build_openai_tools
from .sparql import SPARQL_TOOLS, build_sparql_tools

logger = logging.getLogger("ontology_mcp.mcp.tools")

BUILDERS = (
    build_sparql_tools,
    build_ollama_tools,
    build_lmstudio_tools,
    build_http_tools,
    build_openai_tools,
    build_gemini_tools,
)

CATEGORIES = {
    "sparql": SPARQL_TOOLS,
    "ollama": OLLAMA_TOOLS,
    "lmstudio": LMSTUDIO_TOOLS,
    "http": HTTP_TOOLS,
    "openai": OPENAI_TOOLS,
    "gemini": GEMINI_TOOLS,
}


def build_registry(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> ToolRegistry:
    """Assemble the full catalog. ``transport`` is passed to every backend client."""
    registry = ToolRegistry()
    for builder in BUILDERS:
        for descriptor in builder(settings, transport=transport):
            registry.register(descriptor)
    logger.info(f"Tool registry loaded: {len(registry)} tools")
    return registry


def get_categories() -> dict:
    return {name: len(tools) for name, tools in CATEGORIES.items()}


__all__ = ["build_registry", "get_categories", "CATEGORIES"]

"""Backend clients, one per external API."""

from .gemini import GeminiClient
from .http_request import HttpRequestClient
from .lmstudio import LMStudioClient
from .ollama import OllamaClient
from .openai_service import OpenAIClient
from .sparql import SparqlClient

__all__ = [
    "GeminiClient",
    "HttpRequestClient",
    "LMStudioClient",
    "OllamaClient",
    "OpenAIClient",
    "SparqlClient",
]

from contextlib import asynccontextmanager
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, get_settings
from .mcp.dispatcher import Dispatcher
from .mcp.jsonrpc import McpServer
from .mcp.tools import build_registry
from .routes.health import router as health_router
from .routes.mcp import router as mcp_router

logger = logging.getLogger("ontology_mcp.main")


def log_startup(settings: Settings) -> None:
    """Log the backend configuration. Credentials are reported as set/unset only."""
    if not settings.sparql_endpoint:
        logger.warning("SPARQL_ENDPOINT is not set; using %s", settings.sparql().endpoint)
    logger.info("SPARQL endpoint: %s (repository %s)", settings.sparql().endpoint, settings.sparql_default_repository)
    logger.info("Ollama endpoint: %s", settings.ollama_endpoint)
    logger.info("LM Studio endpoint: %s", settings.lmstudio_endpoint)
    if settings.openai_api_key:
        logger.info("OpenAI API key set; media saved to %s", settings.openai_save_dir)
    else:
        logger.info("OPENAI_API_KEY not set; OpenAI tools will report a missing credential")
    if settings.gemini_api_key:
        logger.info("Gemini API key set (base URL %s)", settings.gemini_base_url)
    else:
        logger.info("GEMINI_API_KEY not set; Gemini tools will report a missing credential")


def build_server(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> McpServer:
    return McpServer(Dispatcher(build_registry(settings, transport=transport)))


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_startup(app.state.settings)
    yield
    logger.info("Shutting down")


def create_app(settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Ontology MCP Server",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.mcp_server = build_server(settings, transport=transport)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal Server Error",
                "error": {
                    "code": "internal_error",
                    "message": "An unexpected error occurred.",
                },
            },
        )

    app.include_router(health_router)
    app.include_router(mcp_router, prefix="/v1")
    return app

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, TypeVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SPARQL_ENDPOINT = "http://localhost:7200"
DEFAULT_SPARQL_REPOSITORY = "schemaorg-current-https"

T = TypeVar("T")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # --- SPARQL / GraphDB ---
    sparql_endpoint: Optional[str] = Field(default=None, validation_alias="SPARQL_ENDPOINT")
    sparql_default_repository: str = Field(default=DEFAULT_SPARQL_REPOSITORY, validation_alias="SPARQL_DEFAULT_REPOSITORY")
    sparql_timeout: float = Field(default=60.0, validation_alias="SPARQL_TIMEOUT")

    # --- Local runtimes ---
    ollama_endpoint: str = Field(default="http://localhost:11434", validation_alias="OLLAMA_ENDPOINT")
    lmstudio_endpoint: str = Field(default="http://localhost:1234/v1", validation_alias="LMSTUDIO_ENDPOINT")
    local_model_timeout_ms: int = Field(default=180000, validation_alias="LOCAL_MODEL_TIMEOUT_MS")

    # --- Generic HTTP tool ---
    http_request_timeout_ms: int = Field(default=30000, validation_alias="HTTP_REQUEST_TIMEOUT_MS")

    # OpenAI
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
    openai_save_dir: str = Field(default="./output", validation_alias="OPENAI_SAVE_DIR")
    openai_timeout: float = Field(default=120.0, validation_alias="OPENAI_TIMEOUT")

    # Gemini
    gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    gemini_base_url: str = Field(default="https://generativelanguage.googleapis.com/v1", validation_alias="GEMINI_BASE_URL")
    gemini_save_dir: str = Field(default="./temp", validation_alias="GEMINI_SAVE_DIR")
    gemini_timeout: float = Field(default=120.0, validation_alias="GEMINI_TIMEOUT")
    gemini_video_poll_interval: float = Field(default=10.0, validation_alias="GEMINI_VIDEO_POLL_INTERVAL")
    gemini_video_max_polls: int = Field(default=90, validation_alias="GEMINI_VIDEO_MAX_POLLS")

    # --- Server / logging ---
    mcp_host: str = Field(default="127.0.0.1", validation_alias="MCP_HOST")
    mcp_port: int = Field(default=9100, validation_alias="MCP_PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_dir: Optional[str] = Field(default=None, validation_alias="LOG_DIR")

    def sparql(self) -> "SparqlConfig":
        return SparqlConfig(
            endpoint=self.sparql_endpoint or DEFAULT_SPARQL_ENDPOINT,
            default_repository=self.sparql_default_repository,
            timeout=self.sparql_timeout,
        )

    def ollama(self) -> "LocalRuntimeConfig":
        return LocalRuntimeConfig(endpoint=self.ollama_endpoint, timeout_ms=self.local_model_timeout_ms)

    def lmstudio(self) -> "LocalRuntimeConfig":
        return LocalRuntimeConfig(endpoint=self.lmstudio_endpoint, timeout_ms=self.local_model_timeout_ms)

    def http_tool(self) -> "HttpToolConfig":
        return HttpToolConfig(timeout_ms=self.http_request_timeout_ms)

    def openai(self) -> "OpenAIConfig":
        return OpenAIConfig(
            api_key=self.openai_api_key,
            base_url=self.openai_base_url,
            save_dir=self.openai_save_dir,
            timeout=self.openai_timeout,
        )

    def gemini(self) -> "GeminiConfig":
        return GeminiConfig(
            api_key=self.gemini_api_key,
            base_url=self.gemini_base_url,
            save_dir=self.gemini_save_dir,
            timeout=self.gemini_timeout,
            poll_interval=self.gemini_video_poll_interval,
            max_polls=self.gemini_video_max_polls,
        )


# =============================================================================
# Per-backend configuration values
# =============================================================================
#
# Built once from Settings and shared read-only. Per-call overrides produce a
# new value through resolve_config(); nothing here is mutated after startup.


@dataclass(frozen=True)
class SparqlConfig:
    endpoint: str = DEFAULT_SPARQL_ENDPOINT
    default_repository: str = DEFAULT_SPARQL_REPOSITORY
    timeout: float = 60.0

    def resolve(self, endpoint: Optional[str] = None, repository: Optional[str] = None) -> "SparqlConfig":
        """Return the effective config for one call.

        An endpoint override without a repository keeps the default repository.
        """
        return resolve_config(self, {"endpoint": endpoint, "default_repository": repository})

    def repository_url(self, repository: Optional[str] = None) -> str:
        repo = repository or self.default_repository
        return f"{self.endpoint.rstrip('/')}/repositories/{repo}"


@dataclass(frozen=True)
class LocalRuntimeConfig:
    endpoint: str
    timeout_ms: int = 180000


@dataclass(frozen=True)
class HttpToolConfig:
    timeout_ms: int = 30000


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    save_dir: str = "./output"
    timeout: float = 120.0


@dataclass(frozen=True)
class GeminiConfig:
    api_key: Optional[str] = None
    base_url: str = "https://generativelanguage.googleapis.com/v1"
    save_dir: str = "./temp"
    timeout: float = 120.0
    poll_interval: float = 10.0
    max_polls: int = 90


def resolve_config(default: T, override: Optional[dict[str, Any]] = None) -> T:
    """Return ``default`` with every non-None field of ``override`` applied.

    Unknown keys are ignored, empty strings count as "not given".
    """
    if not override:
        return default
    names = {f.name for f in dataclasses.fields(default)}  # type: ignore[arg-type]
    changes = {k: v for k, v in override.items() if k in names and v not in (None, "")}
    if not changes:
        return default
    return dataclasses.replace(default, **changes)  # type: ignore[type-var]


@lru_cache
def get_settings() -> Settings:
    return Settings()

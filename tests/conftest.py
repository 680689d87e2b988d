"""
Test configuration and fixtures for the ontology MCP server tests.
"""

from typing import Callable

import pytest

from ontology_mcp.config import Settings


@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    """Build Settings pointing every backend at a test host.

    Keyword arguments use field names (``openai_api_key=None``) and win over
    the defaults below; the process environment and .env are not consulted
    for any field set here.
    """

    def _make(**overrides) -> Settings:
        values = {
            "sparql_endpoint": "http://graphdb.test:7200",
            "sparql_default_repository": "schemaorg-current-https",
            "ollama_endpoint": "http://ollama.test:11434",
            "lmstudio_endpoint": "http://lmstudio.test:1234/v1",
            "openai_api_key": "sk-test-openai-key-0000",
            "openai_base_url": "https://openai.test/v1",
            "openai_save_dir": str(tmp_path / "openai"),
            "gemini_api_key": "gemini-test-key",
            "gemini_base_url": "https://gemini.test/v1",
            "gemini_save_dir": str(tmp_path / "gemini"),
            "gemini_video_poll_interval": 0.0,
            "gemini_video_max_polls": 3,
        }
        values.update(overrides)
        return Settings(_env_file=None).model_copy(update=values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()

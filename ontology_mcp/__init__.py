"""MCP tool server for SPARQL stores, local LLM runtimes, OpenAI and Gemini."""

__version__ = "1.0.0"
SERVER_NAME = "ontology-mcp"

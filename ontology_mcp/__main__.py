"""
Ontology MCP server

Usage: ontology-mcp [--transport stdio|http] [--host 127.0.0.1] [--port 9100]
"""

import argparse
import asyncio
import logging
from typing import List, Optional

from .config import get_settings
from .main import build_server, create_app, log_startup
from .stdio import StdioServer
from .utils.logging_setup import setup_logging

logger = logging.getLogger("ontology_mcp")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="ontology-mcp", description="Ontology MCP server")
    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio", help="How requests are received")
    parser.add_argument("--host", default=settings.mcp_host, help="HTTP bind address")
    parser.add_argument("--port", type=int, default=settings.mcp_port, help="HTTP port")
    parser.add_argument("--log-level", default=settings.log_level, help="Console log level")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level, log_dir=settings.log_dir)

    if args.transport == "http":
        import uvicorn

        uvicorn.run(create_app(settings), host=args.host, port=args.port, log_config=None)
        return

    log_startup(settings)
    try:
        asyncio.run(StdioServer(build_server(settings)).serve())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()

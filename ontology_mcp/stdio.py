"""
stdio transport
===============

Reads one JSON-RPC message per line from stdin and writes each response as
one line to stdout. Every request runs in its own task, so a long video job
does not hold up other calls; at EOF the loop waits for pending requests.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Optional, Set, TextIO

from .mcp.jsonrpc import PARSE_ERROR, McpServer, error_response

logger = logging.getLogger("ontology_mcp.stdio")


class StdioServer:
    def __init__(self, server: McpServer, reader: Optional[TextIO] = None, writer: Optional[TextIO] = None):
        self.server = server
        self.reader = reader or sys.stdin
        self.writer = writer or sys.stdout
        self._pending: Set[asyncio.Task] = set()

    def _write(self, message: Any) -> None:
        self.writer.write(json.dumps(message, ensure_ascii=False) + "\n")
        self.writer.flush()

    async def process_line(self, line: str) -> None:
        try:
            body = json.loads(line)
        except json.JSONDecodeError as e:
            self._write(error_response(PARSE_ERROR, f"Parse error: {e}"))
            return

        if isinstance(body, list):
            responses = await asyncio.gather(*(self.server.handle(item) for item in body))
            batch = [r for r in responses if r is not None]
            if batch:
                self._write(batch)
            return

        response = await self.server.handle(body)
        if response is not None:
            self._write(response)

    async def serve(self) -> None:
        """Main loop - read from stdin, write to stdout"""
        logger.info(f"{self.server.name} {self.server.version} listening on stdio")

        while True:
            line = await asyncio.to_thread(self.reader.readline)
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            task = asyncio.create_task(self.process_line(line))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        if self._pending:
            await asyncio.gather(*self._pending)
        logger.info("stdin closed, stdio server stopped")

"""
Tool dispatcher
===============

One ``tools/call`` end to end: look up the tool, check required arguments,
run the handler and turn whatever happens into a ToolResponse. Nothing that
derives from Exception leaves ``call_tool``.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Union

from pydantic import ValidationError

from ..utils.errors import MissingArgumentsError, ToolError, UnknownToolError, sanitize_message
from .models import GENERIC_FAILURE, ToolCallRequest, ToolOutcome, ToolResponse
from .registry import ToolRegistry

logger = logging.getLogger("ontology_mcp.mcp.dispatcher")

RequestLike = Union[ToolCallRequest, Mapping[str, Any]]


class Dispatcher:
    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def list_tools(self):
        return self.registry.list_tools()

    async def call_tool(self, request: RequestLike) -> ToolResponse:
        outcome = await self.call_tool_outcome(request)
        return outcome.to_response()

    async def call_tool_outcome(self, request: RequestLike) -> ToolOutcome:
        if not isinstance(request, ToolCallRequest):
            try:
                request = ToolCallRequest.model_validate(dict(request))
            except ValidationError as exc:
                detail = exc.errors()[0].get("msg", "invalid request") if exc.errors() else "invalid request"
                return ToolOutcome.failure(ToolError(f"Invalid tool call: {detail}"))

        outcome = await self._run(request)
        if request.meta is not None:
            outcome = outcome.with_meta(request.meta)
        return outcome

    async def _run(self, request: ToolCallRequest) -> ToolOutcome:
        descriptor = self.registry.find_tool(request.name)
        if descriptor is None:
            logger.warning(f"Unknown tool requested: {request.name}")
            return ToolOutcome.failure(UnknownToolError(request.name))

        arguments = request.arguments or {}
        missing = self.registry.validate_required(descriptor, arguments)
        if missing:
            logger.info(f"{request.name}: missing required arguments {missing}")
            return ToolOutcome.failure(MissingArgumentsError(missing))

        start = time.perf_counter()
        try:
            outcome = await descriptor.handler(arguments)
        except ToolError as exc:
            logger.warning(f"{request.name} failed [{exc.code}]: {sanitize_message(exc.message)}")
            return ToolOutcome.failure(exc)
        except Exception as exc:
            logger.exception(f"{request.name} raised {type(exc).__name__}")
            return ToolOutcome.failure(ToolError(str(exc) or GENERIC_FAILURE))

        elapsed_ms = (time.perf_counter() - start) * 1000
        if outcome.ok:
            logger.info(f"{request.name} ok ({elapsed_ms:.0f} ms)")
        else:
            logger.info(f"{request.name} reported failure ({elapsed_ms:.0f} ms): {sanitize_message(outcome.text)}")
        return outcome

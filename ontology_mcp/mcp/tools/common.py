"""Helpers shared by the per-backend tool modules."""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from ...utils.errors import ToolError
from ..models import Handler, ToolDescriptor, ToolOutcome

Call = Callable[[Dict[str, Any]], Awaitable[Any]]


def render(result: Any) -> str:
    """Strings pass through, everything else is pretty-printed JSON."""
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


def wrap(call: Call, *, prefix: Optional[str] = None, to_text: Callable[[Any], str] = render) -> Handler:
    """Adapt a plain async call into a handler returning a ToolOutcome.

    ToolError becomes a failure outcome (``"{prefix}: {message}"``); anything
    else propagates to the dispatcher.
    """

    async def handler(arguments: Dict[str, Any]) -> ToolOutcome:
        try:
            result = await call(arguments)
        except ToolError as exc:
            return ToolOutcome.failure(exc, prefix=prefix)
        return ToolOutcome.success(to_text(result))

    return handler


def bind(schemas: List[Dict[str, Any]], handlers: Mapping[str, Handler]) -> List[ToolDescriptor]:
    """Pair every schema with its handler, keeping the schema order."""
    missing = [s["name"] for s in schemas if s["name"] not in handlers]
    if missing:
        raise ValueError(f"No handler for tools: {', '.join(missing)}")
    return [
        ToolDescriptor(
            name=s["name"],
            description=s["description"],
            input_schema=s["inputSchema"],
            handler=handlers[s["name"]],
        )
        for s in schemas
    ]


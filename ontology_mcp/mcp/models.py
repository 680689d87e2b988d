"""Data shapes shared by the registry, the dispatcher and the transports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..utils.errors import ToolError, sanitize_message

GENERIC_FAILURE = "An unexpected error occurred"


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResponse(BaseModel):
    """The only shape ``tools/call`` ever returns, success or failure."""

    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent]
    meta: Optional[Dict[str, Any]] = Field(default=None, alias="_meta")

    @classmethod
    def text(cls, text: str, meta: Optional[Dict[str, Any]] = None) -> "ToolResponse":
        return cls(content=[TextContent(text=text)], meta=meta)

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ToolCallRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    arguments: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = Field(default=None, alias="_meta")


@dataclass(frozen=True)
class ToolOutcome:
    """Structured result of one tool call before it is flattened to text."""

    ok: bool
    text: str
    error: Optional[ToolError] = None
    meta: Optional[Dict[str, Any]] = None

    @classmethod
    def success(cls, text: str, meta: Optional[Dict[str, Any]] = None) -> "ToolOutcome":
        return cls(ok=True, text=text, meta=meta)

    @classmethod
    def failure(cls, error: ToolError, prefix: Optional[str] = None) -> "ToolOutcome":
        message = sanitize_message(error.message or GENERIC_FAILURE)
        return cls(ok=False, text=f"{prefix}: {message}" if prefix else message, error=error)

    def with_meta(self, meta: Optional[Dict[str, Any]]) -> "ToolOutcome":
        return ToolOutcome(ok=self.ok, text=self.text, error=self.error, meta=meta)

    def to_response(self) -> ToolResponse:
        return ToolResponse.text(self.text, meta=self.meta)


Handler = Callable[[Dict[str, Any]], Awaitable[ToolOutcome]]


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Handler = field(repr=False, compare=False)

    @property
    def required(self) -> List[str]:
        return list(self.input_schema.get("required") or [])

    def to_listing(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}

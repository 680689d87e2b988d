from __future__ import annotations

import re
from typing import Any, Optional

# Patterns that might leak credentials into responses or logs
SENSITIVE_PATTERNS = [
    r"(?<=[?&]key=)[^&\s\"']+",
    r"api[_-]?key[\"']?\s*[=:]\s*[\"']?[^\s\"',}]+",
    r"(?<=bearer )\S+",
    r"\bsk-[A-Za-z0-9_\-]{8,}",
    r"\bAIza[0-9A-Za-z_\-]{20,}",
]

MAX_MESSAGE_LENGTH = 2000


def sanitize_message(message: str, *, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Redact credentials from an error message and cap its length.

    Provider bodies are kept otherwise intact so status codes and upstream
    detail stay visible to the caller.
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "... [truncated]"

    return sanitized


class ToolError(Exception):
    """Base class for every failure a tool call can report.

    The message is what ends up in the response text.
    """

    code = "tool_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownToolError(ToolError):
    code = "unknown_tool"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class MissingArgumentsError(ToolError):
    code = "missing_arguments"

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing required arguments: {', '.join(missing)}")
        self.missing = list(missing)


class MissingCredentialError(ToolError):
    code = "missing_credential"


class PreconditionError(ToolError):
    code = "precondition_failed"


class RemoteError(ToolError):
    """Non-2xx answer from a backend."""

    code = "upstream_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: str = "",
        data: Any = None,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.data = data
        self.response = response

    def with_message(self, message: str) -> "RemoteError":
        return RemoteError(
            message,
            status_code=self.status_code,
            body=self.body,
            data=self.data,
            response=self.response,
        )


class TransportError(ToolError):
    """No response received (DNS, connect, timeout)."""

    code = "upstream_unreachable"


class OperationTimeoutError(ToolError):
    """A long-running remote operation did not finish within its poll budget."""

    code = "operation_timeout"


__all__ = [
    "MissingArgumentsError",
    "MissingCredentialError",
    "OperationTimeoutError",
    "PreconditionError",
    "RemoteError",
    "ToolError",
    "TransportError",
    "UnknownToolError",
    "sanitize_message",
]

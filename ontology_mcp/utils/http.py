from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple

from httpx import Response

# Canned messages for statuses where the provider detail is rarely useful
STATUS_MESSAGES = {
    401: "API key is invalid or missing.",
    403: "Access to the requested resource is forbidden.",
    404: "Requested resource not found.",
    429: "API request quota exceeded.",
}


def response_data(response: Response | None) -> Any:
    """Return the decoded JSON body, or None when the body is not JSON."""
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def extract_http_error(response: Response | None, *, default_message: str = "Upstream request failed", default_code: str = "upstream_error") -> Tuple[str, str]:
    """Return a tuple of (message, code) derived from an HTTPX response."""
    message = default_message
    code = default_code

    if response is None:
        return message, code

    try:
        data = response.json()
    except ValueError:
        text = (response.text or "").strip()
        if text:
            message = text
        return message, code

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            message = str(error.get("message") or message)
            code = str(error.get("code") or error.get("status") or code)
            return message, code

        if isinstance(error, str) and error:
            return error, code

        detail = data.get("detail")
        if isinstance(detail, dict):
            message = str(detail.get("message") or message)
            detail_code = detail.get("code")
            if detail_code:
                code = str(detail_code)
            return message, code

        if isinstance(detail, str):
            message = detail
            return message, code

    text = str(data)
    if text:
        message = text
    return message, code


def provider_message(data: Any) -> Optional[str]:
    """Pull ``error.message`` out of a decoded error body, if present."""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return None


def describe_status(status_code: int, data: Any = None, *, service: str = "API") -> str:
    """Map an HTTP error status to a short human-readable message."""
    detail = provider_message(data)
    if status_code == 400:
        return detail or "Bad request."
    if status_code in STATUS_MESSAGES:
        return STATUS_MESSAGES[status_code]
    if status_code >= 500:
        return f"{service} server error."
    return detail or f"{service} error: {status_code}"


def format_body(body: str, data: Any = None) -> str:
    """Pretty-print a JSON error body, falling back to the raw text."""
    if data is not None:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return body


def json_object(response: Response | None) -> Dict[str, Any]:
    """Decoded JSON object body; anything else (text, list, empty) becomes {}."""
    data = response_data(response)
    return data if isinstance(data, dict) else {}

"""Shared HTTP response helpers for feature service interactions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type

import requests

from ..errors import RouteSourceError

RequestsJSONDecodeError: Type[Exception]
if hasattr(requests.exceptions, "JSONDecodeError"):
    RequestsJSONDecodeError = requests.exceptions.JSONDecodeError
else:  # pragma: no cover - fallback for old requests versions
    RequestsJSONDecodeError = ValueError

LOGGER = logging.getLogger(__name__)

__all__ = [
    "decode_payload",
    "extract_error",
]


def decode_payload(response: requests.Response, context: str) -> Dict[str, Any]:
    """Return the JSON body of a successful response or raise RouteSourceError.

    The service reports query errors with HTTP 200 and an ``error`` object,
    so the body is checked as well as the status code.
    """

    status = response.status_code
    if status != 200:
        detail = extract_error(response)
        message = f"{context} failed with HTTP {status}"
        if detail:
            message = f"{message} | {detail}"
        LOGGER.error(message)
        raise RouteSourceError(message)

    try:
        data = response.json()
    except (ValueError, RequestsJSONDecodeError) as exc:
        snippet = _extract_error_text(response) or ""
        raise RouteSourceError(
            f"{context} returned invalid JSON: {exc}. Raw response: {snippet}"
        ) from exc

    if not isinstance(data, dict):
        raise RouteSourceError(
            f"{context} returned unexpected payload type {type(data).__name__}"
        )
    if "error" in data:
        parts = _collect_error_parts(data)
        raise RouteSourceError(f"{context} API error: {' | '.join(parts) or data}")
    return data


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return compact string with service error info (message + details) if present."""

    if resp is None:
        return None
    data = _safe_json(resp)
    if data is None:
        return _extract_error_text(resp)
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def _safe_json(resp: requests.Response) -> Optional[Any]:
    """Safely parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except (
        ValueError,
        RequestsJSONDecodeError,
    ) as exc:  # pragma: no cover - logging path
        LOGGER.debug(
            "Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc
        )
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:497] + "...") if len(trimmed) > 500 else trimmed


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    """Build error snippets from the standard ArcGIS error response."""

    error = data.get("error")
    if not isinstance(error, dict):
        return []
    parts: List[str] = []
    code = error.get("code")
    message = error.get("message")
    if message:
        parts.append(f"{message} (code {code})" if code else str(message))
    details = error.get("details")
    if isinstance(details, list):
        parts.extend(str(detail) for detail in details if detail)
    return parts

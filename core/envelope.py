"""Response envelopes for the generic relay."""

from datetime import UTC, datetime
from typing import Any

import httpx

# Upstream response headers exposed to the caller
EXPOSED_HEADERS = ("content-type", "content-length")


def decode_body(response: httpx.Response) -> Any:
    """Decode an upstream body as JSON, falling back to text."""
    if not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text


def reduce_headers(response: httpx.Response) -> dict[str, str]:
    return {name: response.headers[name] for name in EXPOSED_HEADERS if name in response.headers}


def success_envelope(response: httpx.Response) -> dict[str, Any]:
    return {
        "success": True,
        "status": response.status_code,
        "data": decode_body(response),
        "headers": reduce_headers(response),
    }


def upstream_error_envelope(status: int, body: Any = None) -> dict[str, Any]:
    envelope: dict[str, Any] = {
        "success": False,
        "error": "External API Error",
        "status": status,
        "message": f"Upstream responded with status {status}",
    }
    if body not in (None, ""):
        envelope["data"] = body
    return envelope


def error_envelope(error: str, message: str) -> dict[str, Any]:
    """Envelope for locally generated failures (400, 500, 503)."""
    return {"success": False, "error": error, "message": message}


def health_payload() -> dict[str, str]:
    return {
        "status": "OK",
        "message": "Proxy server is running",
        "timestamp": datetime.now(UTC).isoformat(),
    }


def not_found_payload(method: str, path: str, endpoints: list[str]) -> dict[str, Any]:
    return {
        "error": "Route Not Found",
        "message": f"Route {method} {path} not found",
        "availableEndpoints": endpoints,
    }

"""Target URL validation."""

from typing import Any

import httpx

from core.exceptions import InvalidTargetURL

ALLOWED_SCHEMES = ("http", "https")


def validate_target_url(value: Any) -> str:
    """Return the target URL if it is an absolute http(s) URL, else raise."""
    if value is None or value == "":
        raise InvalidTargetURL("Missing required 'url' parameter")
    if not isinstance(value, str):
        raise InvalidTargetURL("Invalid URL: 'url' must be a string")

    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise InvalidTargetURL(f"Invalid URL: {e}") from e

    if url.scheme not in ALLOWED_SCHEMES:
        raise InvalidTargetURL(f"Invalid URL: scheme must be http or https, got {value!r}")
    if not url.host:
        raise InvalidTargetURL(f"Invalid URL: {value!r} is not an absolute URL")
    return value

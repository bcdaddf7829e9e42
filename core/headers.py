"""Header construction for upstream requests."""

import re
from collections.abc import Mapping
from typing import Any

from core.config import FixedRouteSettings, RelaySettings
from core.exceptions import InvalidRequestBody

# Caller headers copied verbatim onto the outbound request
GET_FORWARDED_HEADERS = ("authorization", "x-api-key", "content-type")
POST_FORWARDED_HEADERS = ("authorization", "x-api-key")

HEADER_NAME_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
FORBIDDEN_VALUE_CHARS = ("\r", "\n", "\0")


def validate_custom_headers(headers: Mapping[str, Any]) -> None:
    """Reject header names and values that cannot be sent over HTTP/1.1."""
    for key, value in headers.items():
        if not HEADER_NAME_RE.fullmatch(key):
            raise InvalidRequestBody(f"Invalid header name: {key!r}")
        if any(c in str(value) for c in FORBIDDEN_VALUE_CHARS):
            raise InvalidRequestBody(f"Invalid value for header {key!r}")


def merge_headers(base: dict[str, str], overlay: Mapping[str, Any]) -> dict[str, str]:
    """Overlay headers onto base, replacing same-named keys in any letter case."""
    merged = dict(base)
    for key, value in overlay.items():
        key_lower = key.lower()
        for existing in [k for k in merged if k.lower() == key_lower]:
            del merged[existing]
        merged[key] = str(value)
    return merged


class HeaderBuilder:
    """Build upstream headers for caller-supplied and fixed targets."""

    def __init__(self, settings: RelaySettings) -> None:
        self._settings = settings

    def build_get_headers(self, caller_headers: Mapping[str, str]) -> dict[str, str]:
        """Default User-Agent plus allowlisted caller headers."""
        upstream = {"User-Agent": self._settings.user_agent}
        return merge_headers(upstream, self._forwarded(caller_headers, GET_FORWARDED_HEADERS))

    def build_post_headers(
        self,
        caller_headers: Mapping[str, str],
        custom_headers: Mapping[str, Any] | None = None,
    ) -> dict[str, str]:
        """Defaults, then body-supplied headers, then allowlisted caller headers."""
        upstream = {
            "User-Agent": self._settings.user_agent,
            "Content-Type": "application/json",
        }
        if custom_headers:
            upstream = merge_headers(upstream, custom_headers)
        return merge_headers(upstream, self._forwarded(caller_headers, POST_FORWARDED_HEADERS))

    def build_fixed_headers(
        self,
        route: FixedRouteSettings,
        secret: str | None = None,
    ) -> dict[str, str]:
        """Static route headers plus the secret header, if configured."""
        user_agent = (
            self._settings.browser_user_agent if route.spoof_browser else self._settings.user_agent
        )
        upstream = merge_headers({"User-Agent": user_agent}, route.headers)
        if route.secret_header and secret is not None:
            upstream = merge_headers(upstream, {route.secret_header: secret})
        return upstream

    @staticmethod
    def _forwarded(headers: Mapping[str, str], allowed: tuple[str, ...]) -> dict[str, str]:
        forwarded: dict[str, str] = {}
        for key, value in headers.items():
            key_lower = key.lower()
            if key_lower in allowed:
                forwarded[key_lower] = value
        return forwarded

"""Target resolution strategies: caller-supplied URL or fixed URL."""

from collections.abc import Callable, Mapping
from typing import Any

from core.config import Config, FixedRouteSettings
from core.exceptions import ConfigurationError, InvalidRequestBody
from core.headers import HeaderBuilder, validate_custom_headers
from core.request_types import PreparedRequest
from core.urls import validate_target_url

TARGET_PARAM = "url"


class CallerTarget:
    """Relay to whatever URL the caller names."""

    route_name = "proxy"

    def __init__(self, config: Config, header_builder: HeaderBuilder) -> None:
        self._config = config
        self._headers = header_builder

    def prepare_get(
        self,
        query_params: list[tuple[str, str]],
        headers: Mapping[str, str],
    ) -> PreparedRequest:
        """Prepare GET /api/proxy?url=... for forwarding."""
        target = next((v for k, v in query_params if k == TARGET_PARAM), None)
        target_url = validate_target_url(target)
        params = [(k, v) for k, v in query_params if k != TARGET_PARAM]
        return PreparedRequest(
            route_name=self.route_name,
            method="GET",
            target_url=target_url,
            headers=self._headers.build_get_headers(headers),
            timeout=self._config.relay.timeout,
            params=params,
        )

    def prepare_post(
        self,
        body: dict[str, Any],
        headers: Mapping[str, str],
    ) -> PreparedRequest:
        """Prepare POST /api/proxy {url, data, headers} for forwarding."""
        target_url = validate_target_url(body.get("url"))
        custom_headers = body.get("headers")
        if custom_headers is not None and not isinstance(custom_headers, dict):
            raise InvalidRequestBody("'headers' must be an object")
        if custom_headers:
            validate_custom_headers(custom_headers)
        return PreparedRequest(
            route_name=self.route_name,
            method="POST",
            target_url=target_url,
            headers=self._headers.build_post_headers(headers, custom_headers),
            timeout=self._config.relay.timeout,
            body=body.get("data"),
        )


class FixedTarget:
    """Relay to the one URL bound to a configured route."""

    def __init__(
        self,
        route: FixedRouteSettings,
        header_builder: HeaderBuilder,
        secret_loader: Callable[[str], str | None],
    ) -> None:
        self.route = route
        self._headers = header_builder
        self._load_secret = secret_loader

    @property
    def route_name(self) -> str:
        return self.route.path

    def prepare_get(self) -> PreparedRequest:
        """Prepare the fixed upstream GET with injected headers."""
        secret = None
        if self.route.secret_name:
            secret = self._load_secret(self.route.secret_name)
            if secret is None:
                raise ConfigurationError(
                    f"Secret {self.route.secret_name!r} for {self.route.path} not found"
                )
        return PreparedRequest(
            route_name=self.route_name,
            method="GET",
            target_url=validate_target_url(self.route.url),
            headers=self._headers.build_fixed_headers(self.route, secret),
            timeout=self.route.timeout,
        )

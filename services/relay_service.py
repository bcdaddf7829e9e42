"""Relay orchestration: pick a target strategy and header policy."""

from collections.abc import Callable, Mapping
from typing import Any

from core.config import Config
from core.headers import HeaderBuilder
from core.request_types import PreparedRequest
from services.targets import CallerTarget, FixedTarget


class RelayService:
    """Prepare requests for the generic relay and the fixed-target routes."""

    def __init__(
        self,
        config: Config,
        header_builder: HeaderBuilder,
        secret_loader: Callable[[str], str | None],
    ) -> None:
        self._caller = CallerTarget(config, header_builder)
        self._fixed = {
            route.path: FixedTarget(route, header_builder, secret_loader)
            for route in config.fixed_routes
        }

    def fixed_target(self, path: str) -> FixedTarget:
        return self._fixed[path]

    def prepare_get(
        self,
        query_params: list[tuple[str, str]],
        headers: Mapping[str, str],
    ) -> PreparedRequest:
        """Prepare GET /api/proxy request."""
        return self._caller.prepare_get(query_params, headers)

    def prepare_post(
        self,
        body: dict[str, Any],
        headers: Mapping[str, str],
    ) -> PreparedRequest:
        """Prepare POST /api/proxy request."""
        return self._caller.prepare_post(body, headers)

    def prepare_fixed(self, path: str) -> PreparedRequest:
        """Prepare the upstream request for a fixed-target route."""
        return self.fixed_target(path).prepare_get()

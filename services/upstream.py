"""HTTP relaying utilities for upstream requests."""

from typing import Any

import httpx
from fastapi import Response
from fastapi.responses import JSONResponse

from core.config import FixedRouteSettings
from core.envelope import decode_body, error_envelope, success_envelope, upstream_error_envelope
from core.exceptions import (
    ProxyError,
    RelaySetupError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from core.protocols import RequestLogger
from core.request_types import PreparedRequest

# Statuses whose responses must not carry a body
NO_BODY_STATUSES = (204, 304)


class UpstreamClient:
    """Send one request per relay call and translate the outcome."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, prepared: PreparedRequest, logger: RequestLogger) -> httpx.Response:
        """Issue the outbound call, raising on any non-2xx outcome."""
        logger.log_request(
            prepared.method,
            prepared.target_url,
            route=prepared.route_name,
            request_id=prepared.request_id,
        )
        try:
            request = self._client.build_request(
                prepared.method,
                prepared.target_url,
                params=prepared.params or None,
                headers=prepared.headers,
                json=prepared.body,
                timeout=prepared.timeout,
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise RelaySetupError(f"Could not build upstream request: {e}") from e

        try:
            response = await self._client.send(request)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(
                f"Upstream timed out after {prepared.timeout:g}s"
            ) from e
        except httpx.LocalProtocolError as e:
            # Rejected before sending (illegal header name or value)
            raise RelaySetupError(f"Could not send upstream request: {e}") from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}") from e

        if not response.is_success:
            raise UpstreamError(
                f"Upstream responded with status {response.status_code}",
                status_code=response.status_code,
                body=decode_body(response),
            )
        return response

    async def relay_enveloped(self, prepared: PreparedRequest, logger: RequestLogger) -> Response:
        """Relay and wrap the outcome in the success/error envelope."""
        route = prepared.route_name
        request_id = prepared.request_id
        try:
            response = await self.fetch(prepared, logger)
        except UpstreamUnavailableError as e:
            logger.log_error(route, 503, str(e), request_id=request_id)
            return JSONResponse(
                error_envelope("Service Unavailable", f"Unable to reach target URL. {e}"),
                status_code=503,
            )
        except UpstreamError as e:
            logger.log_error(route, e.status_code, str(e), request_id=request_id)
            return _envelope_response(upstream_error_envelope(e.status_code, e.body), e.status_code)
        except RelaySetupError as e:
            logger.log_error(route, 500, str(e), request_id=request_id)
            return JSONResponse(
                error_envelope("Internal Server Error", str(e)),
                status_code=500,
            )

        logger.log_response(route, response.status_code, request_id=request_id)
        return _envelope_response(success_envelope(response), response.status_code)

    async def relay_raw(
        self,
        prepared: PreparedRequest,
        route: FixedRouteSettings,
        logger: RequestLogger,
    ) -> Response:
        """Relay the upstream body verbatim, collapsing failures to 500."""
        request_id = prepared.request_id
        try:
            response = await self.fetch(prepared, logger)
        except ProxyError as e:
            logger.log_error(route.path, 500, str(e), request_id=request_id)
            return JSONResponse({"error": route.error_message}, status_code=500)

        try:
            data = response.json()
        except ValueError:
            if route.require_json:
                logger.log_error(
                    route.path,
                    502,
                    "Upstream returned a non-JSON response",
                    request_id=request_id,
                )
                return JSONResponse(
                    {"error": "Upstream returned a non-JSON response"},
                    status_code=502,
                )
            logger.log_response(route.path, 200, request_id=request_id)
            return Response(
                content=response.content,
                media_type=response.headers.get("content-type", "text/plain"),
            )

        logger.log_response(route.path, 200, request_id=request_id)
        return JSONResponse(data)


def _envelope_response(payload: dict[str, Any], status: int) -> Response:
    """JSON envelope, or an empty response when the status forbids a body."""
    if status < 200 or status in NO_BODY_STATUSES:
        return Response(status_code=status)
    return JSONResponse(payload, status_code=status)

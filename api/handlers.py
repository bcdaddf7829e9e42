"""FastAPI route handlers."""

import json
from json import JSONDecodeError
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from core.config import Config
from core.envelope import error_envelope, health_payload, not_found_payload
from core.exceptions import InvalidRequestBody, InvalidTargetURL, ProxyError, RequestTooLarge
from core.protocols import RequestLogger


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(error_envelope("Bad Request", message), status_code=400)


async def _parse_json_body(request: Request, max_size: int) -> dict[str, Any]:
    """Parse request body as a JSON object."""
    raw_body = await request.body()
    if len(raw_body) > max_size:
        raise RequestTooLarge("Request body too large")

    text_body = raw_body.decode("utf-8", errors="replace")
    try:
        body = json.loads(text_body)
    except (JSONDecodeError, ValueError) as e:
        raise InvalidRequestBody(f"Invalid JSON: {e}") from e
    if not isinstance(body, dict):
        raise InvalidRequestBody("Request body must be a JSON object")
    return body


async def handle_health(_request: Request) -> JSONResponse:
    return JSONResponse(health_payload())


async def handle_liveness(_request: Request, config: Config) -> PlainTextResponse:
    return PlainTextResponse(config.proxy.liveness_message)


async def handle_proxy_get(request: Request, logger: RequestLogger) -> Response:
    """Handle GET /api/proxy?url=<target>."""
    relay_service = request.app.state.relay_service
    try:
        prepared = relay_service.prepare_get(
            request.query_params.multi_items(),
            request.headers,
        )
    except InvalidTargetURL as e:
        return _bad_request(str(e))

    upstream = request.app.state.upstream_client
    return await upstream.relay_enveloped(prepared, logger)


async def handle_proxy_post(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Handle POST /api/proxy {url, data, headers}."""
    try:
        body = await _parse_json_body(request, config.relay.max_body_size)
    except RequestTooLarge as e:
        return JSONResponse(error_envelope("Payload Too Large", str(e)), status_code=413)
    except InvalidRequestBody as e:
        return _bad_request(str(e))

    relay_service = request.app.state.relay_service
    try:
        prepared = relay_service.prepare_post(body, request.headers)
    except (InvalidTargetURL, InvalidRequestBody) as e:
        return _bad_request(str(e))

    upstream = request.app.state.upstream_client
    return await upstream.relay_enveloped(prepared, logger)


async def handle_fixed(request: Request, path: str, logger: RequestLogger) -> Response:
    """Handle a fixed-target route such as GET /getLeaderboard."""
    relay_service = request.app.state.relay_service
    route = relay_service.fixed_target(path).route
    try:
        prepared = relay_service.prepare_fixed(path)
    except ProxyError as e:
        logger.log_error(path, 500, str(e))
        return JSONResponse({"error": route.error_message}, status_code=500)

    upstream = request.app.state.upstream_client
    return await upstream.relay_raw(prepared, route, logger)


def available_endpoints(config: Config) -> list[str]:
    """Endpoints advertised on 404 responses."""
    endpoints = ["GET /", "GET /health"]
    if config.proxy.enable_generic:
        endpoints += ["GET /api/proxy?url=<target_url>", "POST /api/proxy"]
    endpoints += [f"GET {route.path}" for route in config.fixed_routes]
    return endpoints


def handle_not_found(request: Request, config: Config) -> JSONResponse:
    return JSONResponse(
        not_found_payload(request.method, request.url.path, available_endpoints(config)),
        status_code=404,
    )


def handle_internal_error(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        error_envelope("Internal Server Error", str(exc) or exc.__class__.__name__),
        status_code=500,
    )

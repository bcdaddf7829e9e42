"""FastAPI application factory."""

from collections.abc import Callable
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.handlers import (
    handle_fixed,
    handle_health,
    handle_internal_error,
    handle_liveness,
    handle_not_found,
    handle_proxy_get,
    handle_proxy_post,
)
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from credentials import load_secret
from services.relay_service import RelayService
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    secret_loader: Callable[[str], str | None] = load_secret,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = httpx.AsyncClient(
            timeout=config.relay.timeout,
            follow_redirects=True,
            transport=transport,
        )
        app.state.upstream_client = UpstreamClient(client)
        app.state.relay_service = RelayService(
            config=config,
            header_builder=HeaderBuilder(config.relay),
            secret_loader=secret_loader,
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Relay Proxy", version="0.1.0", lifespan=lifespan)

    allow_all = "*" in config.cors.allow_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown path and unsupported method are both "route not found"
        if exc.status_code in (404, 405):
            return handle_not_found(request, config)
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception):
        return handle_internal_error(request, exc)

    @app.get("/")
    async def liveness(request: Request):
        return await handle_liveness(request, config)

    @app.get("/health")
    async def health(request: Request):
        return await handle_health(request)

    if config.proxy.enable_generic:
        @app.get("/api/proxy")
        async def proxy_get(request: Request):
            return await handle_proxy_get(request, logger)

        @app.post("/api/proxy")
        async def proxy_post(request: Request):
            return await handle_proxy_post(request, config, logger)

    for route in config.fixed_routes:
        app.add_api_route(route.path, _fixed_endpoint(route.path, logger), methods=["GET"])

    return app


def _fixed_endpoint(path: str, logger: RequestLogger):
    async def fixed(request: Request):
        return await handle_fixed(request, path, logger)

    fixed.__name__ = f"fixed_{path.strip('/').replace('/', '_') or 'root'}"
    return fixed

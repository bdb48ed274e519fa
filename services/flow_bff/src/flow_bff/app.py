from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI

from core_config import Settings, get_settings
from core_http.client import close_http_client, get_http_client
from core_http.errors import attach_standard_error_handlers
from core_logging import get_logger, log_stage
from core_utils.fastapi_bootstrap import setup_service
from core_utils.health import attach_health_routes

from flow_bff.context import BffContext
from flow_bff.identity import IdentityResolver
from flow_bff.payloads import Clock, system_clock
from flow_bff.routes import ROUTERS
from flow_bff.service_urls import ServiceLocator
from flow_bff.upstream import UpstreamProxy
from flow_bff.users import SqlUserDirectory, UserDirectory

SERVICE_NAME = "flow_bff"

logger = get_logger(SERVICE_NAME)


def build_context(
    settings: Settings,
    *,
    directory: Optional[UserDirectory] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    clock: Optional[Clock] = None,
) -> BffContext:
    locator = ServiceLocator(settings.flow_manager_service_url)
    proxy = UpstreamProxy((lambda: http_client) if http_client is not None else get_http_client)
    directory = directory or SqlUserDirectory(settings.users_database_url)
    return BffContext(
        settings=settings,
        locator=locator,
        proxy=proxy,
        identity=IdentityResolver(locator, proxy, directory),
        directory=directory,
        clock=clock or system_clock,
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    directory: Optional[UserDirectory] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Build the BFF application.

    Collaborators default to the production ones (shared httpx client, SQL
    user directory, wall clock); tests pass fakes for any of them.
    """
    settings = settings or get_settings()
    ctx = build_context(settings, directory=directory, http_client=http_client, clock=clock)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if isinstance(ctx.directory, SqlUserDirectory):
            await ctx.directory.create_schema()
        log_stage(
            logger, "init", "config",
            request_id="startup",
            environment=settings.environment,
            api_prefix=settings.api_prefix,
            upstream_configured=ctx.locator.configured,
            graph_fanout_workers=settings.graph_fanout_workers,
        )
        try:
            yield
        finally:
            await ctx.directory.close()
            if http_client is None:
                await close_http_client()

    app = FastAPI(title="Flow BFF", version="0.1.0", lifespan=lifespan)
    app.state.bff = ctx

    setup_service(app, SERVICE_NAME, default_rate_limit=settings.api_rate_limit_default)
    attach_standard_error_handlers(app, service=SERVICE_NAME)

    def _readiness() -> dict:
        ready = ctx.locator.configured
        return {"status": "ready" if ready else "degraded", "ready": ready}

    attach_health_routes(app, checks={"liveness": (lambda: True), "readiness": _readiness})

    for router in ROUTERS:
        app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()

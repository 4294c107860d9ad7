"""FastAPI HTTP server for the command gateway.

Every configured path is served by one catch-all route that runs the
request through the gateway pipeline:

    method check -> route lookup -> body parse -> authorize -> merge
        -> execute and respond            (sync mode)
        -> acknowledge, then dispatch     (callback mode)

Failures anywhere before execution are raised as ``GatewayError`` and
rendered by a single exception handler.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from cmdgate.config.routes import RouteTable
from cmdgate.domain.models import CommandSpec, RequestContext
from cmdgate.gateway.authorizer import authorize, parse_request_param
from cmdgate.gateway.dispatcher import DEFAULT_CALLBACK_TIMEOUT, DEFAULT_USER_AGENT, CallbackDispatcher
from cmdgate.gateway.errors import GatewayError, InternalConfigMissing, MethodNotAllowed, RouteNotFound
from cmdgate.gateway.executor import CommandExecutor
from cmdgate.gateway.merger import merge
from cmdgate.gateway.reporter import (
    ack_response,
    build_result,
    error_response,
    result_response,
)

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def new_request_id() -> str:
    return uuid.uuid4().hex


def create_app(
    routes: RouteTable | Mapping[str, CommandSpec] | None,
    executor: CommandExecutor | None = None,
    dispatcher: CallbackDispatcher | None = None,
    callback_client: httpx.AsyncClient | None = None,
    callback_timeout: float | None = DEFAULT_CALLBACK_TIMEOUT,
    callback_user_agent: str = DEFAULT_USER_AGENT,
) -> FastAPI:
    """Create and configure the gateway application.

    Args:
        routes: The route table. Plain mappings are wrapped in a RouteTable.
        executor: Optional pre-configured CommandExecutor (for testing).
        dispatcher: Optional pre-configured CallbackDispatcher (for testing).
        callback_client: HTTP client used for callback POSTs when no
            dispatcher is given. Created lazily if omitted.
        callback_timeout: Seconds to wait on a callback POST.
        callback_user_agent: User-Agent header for callback POSTs.
    """
    if routes is not None and not isinstance(routes, RouteTable):
        routes = RouteTable(routes)
    if executor is None:
        executor = CommandExecutor()
    if dispatcher is None:
        dispatcher = CallbackDispatcher(
            executor,
            client=callback_client,
            timeout=callback_timeout,
            user_agent=callback_user_agent,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        table = app.state.routes
        logger.info("Gateway started with %d route(s)", len(table) if table is not None else 0)
        yield
        await app.state.dispatcher.close()
        logger.info("Gateway stopped")

    # Docs routes would shadow gateway paths, so they are disabled
    app = FastAPI(
        title="cmdgate",
        description="HTTP-triggered command execution gateway",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.routes = routes
    app.state.executor = executor
    app.state.dispatcher = dispatcher

    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request.state.ctx = RequestContext(
            request_id=new_request_id(),
            method=request.method,
            path=request.url.path,
            remote_addr=request.client.host if request.client else "",
            user_agent=request.headers.get("user-agent", ""),
        )
        return await call_next(request)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> Response:
        return error_response(request.state.ctx, exc)

    # The router answers methods outside ALL_METHODS itself
    @app.exception_handler(StarletteHTTPException)
    async def router_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code != 405:
            return await http_exception_handler(request, exc)
        ctx: RequestContext = request.state.ctx
        if app.state.routes is None:
            return error_response(ctx, InternalConfigMissing("config not found"))
        return error_response(ctx, MethodNotAllowed(request.method))

    @app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def handle(request: Request) -> Response:
        ctx: RequestContext = request.state.ctx

        table: RouteTable | None = app.state.routes
        if table is None:
            raise InternalConfigMissing("config not found")

        if request.method != "POST":
            raise MethodNotAllowed(request.method)

        spec = table.get(ctx.path)
        if spec is None:
            raise RouteNotFound(ctx.path)

        param = parse_request_param(await request.body())
        authorize(spec, param)
        command = merge(spec, param)

        if param.callback:
            d: CallbackDispatcher = app.state.dispatcher
            return ack_response(
                ctx,
                param.callback,
                background=BackgroundTask(d.dispatch, ctx, command, param.callback),
            )

        e: CommandExecutor = app.state.executor
        outcome = await e.run(command)
        return result_response(ctx, build_result(ctx, outcome))

    return app


"""Result construction, JSON responses and the per-request log record."""

from __future__ import annotations

import logging

from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.background import BackgroundTask

from cmdgate.domain.models import CallbackAck, ExecutionOutcome, RequestContext, Result
from cmdgate.gateway.errors import GatewayError, MethodNotAllowed

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "Request-Id"


def build_result(ctx: RequestContext, outcome: ExecutionOutcome) -> Result:
    """Result for a command the gateway handled.

    Always status 200: a failed command is reported via ``error``.
    """
    return Result(
        request_id=ctx.request_id,
        output=outcome.output,
        error=outcome.error,
        status=200,
    )


def error_result(ctx: RequestContext, exc: GatewayError) -> Result:
    return Result(request_id=ctx.request_id, error=exc.message, status=exc.status_code)


def log_result(ctx: RequestContext, result: Result) -> None:
    """Emit the record for a completed request or background execution."""
    logger.info(
        "request_id=%s method=%s path=%s status=%d output=%r error=%r",
        result.request_id, ctx.method, ctx.path, result.status, result.output, result.error,
        extra={
            "request_id": result.request_id,
            "status": result.status,
            "output": result.output,
            "error": result.error,
            "ip": ctx.remote_addr,
            "user_agent": ctx.user_agent,
        },
    )


def json_response(
    ctx: RequestContext,
    body: BaseModel,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
    background: BackgroundTask | None = None,
) -> JSONResponse:
    all_headers = {REQUEST_ID_HEADER: ctx.request_id}
    if headers:
        all_headers.update(headers)
    return JSONResponse(
        content=body.model_dump(mode="json"),
        status_code=status_code,
        headers=all_headers,
        background=background,
    )


def result_response(ctx: RequestContext, result: Result) -> JSONResponse:
    """Respond with ``result`` as the body and its status as the HTTP status."""
    log_result(ctx, result)
    return json_response(ctx, result, status_code=result.status)


def error_response(ctx: RequestContext, exc: GatewayError) -> JSONResponse:
    result = error_result(ctx, exc)
    log_result(ctx, result)
    headers = {"Allow": "POST"} if isinstance(exc, MethodNotAllowed) else None
    return json_response(ctx, result, status_code=result.status, headers=headers)


def ack_response(ctx: RequestContext, url: str, background: BackgroundTask) -> JSONResponse:
    """Acknowledge a callback request.

    ``background`` runs only after the acknowledgement has been sent.
    """
    ack = CallbackAck(request_id=ctx.request_id, url=url)
    logger.info(
        "request_id=%s method=%s path=%s status=200 callback_url=%s",
        ctx.request_id, ctx.method, ctx.path, url,
        extra={"request_id": ctx.request_id, "status": 200, "callback_url": url},
    )
    return json_response(ctx, ack, background=background)

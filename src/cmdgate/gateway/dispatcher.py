"""Detached execution and webhook delivery for callback-mode requests.

A callback request is acknowledged immediately; the command runs later
in a background task that POSTs the Result to the caller's URL.

Semantics of a dispatched task:

* it starts only after the acknowledgement has been written;
* it is never cancelled, joined or retried, and nothing waits for it;
* delivery is attempted once, and failures are only logged;
* there is no cap on how many run at the same time.

Shutting the server down abandons whatever is still in flight.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from cmdgate.domain.models import EffectiveCommand, RequestContext, Result
from cmdgate.gateway.executor import CommandExecutor
from cmdgate.gateway.reporter import build_result, log_result

logger = logging.getLogger(__name__)

DEFAULT_CALLBACK_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "cmdgate-callback"


class CallbackDispatcher:
    """Runs commands in the background and delivers their results."""

    def __init__(
        self,
        executor: CommandExecutor,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = DEFAULT_CALLBACK_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._executor = executor
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._user_agent = user_agent
        # Strong references only; the event loop keeps weak ones to tasks
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        """Number of background executions not yet finished."""
        return len(self._tasks)

    async def dispatch(self, ctx: RequestContext, command: EffectiveCommand, url: str) -> None:
        """Start a detached execution of ``command`` reporting to ``url``.

        Returns as soon as the task is scheduled, without waiting for it.
        """
        task = asyncio.create_task(
            self._run(ctx, command, url),
            name=f"callback-{ctx.request_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def close(self) -> None:
        """Close the HTTP client if this dispatcher created it.

        Does not wait for in-flight executions.
        """
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        if self._tasks:
            logger.info("Abandoning %d in-flight callback execution(s)", len(self._tasks))

    async def _run(self, ctx: RequestContext, command: EffectiveCommand, url: str) -> None:
        try:
            outcome = await self._executor.run(command)
            result = build_result(ctx, outcome)
            log_result(ctx, result)
            await self._deliver(ctx, result, url)
        except Exception:
            logger.exception("Callback execution %s failed unexpectedly", ctx.request_id)

    async def _deliver(self, ctx: RequestContext, result: Result, url: str) -> None:
        client = self._get_client()
        try:
            resp = await client.post(
                url,
                content=result.model_dump_json(),
                headers={"Content-Type": "application/json", "Request-Id": ctx.request_id},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(
                "request_id=%s callback_url=%s callback delivery failed: %s",
                ctx.request_id, url, e,
                extra={"request_id": ctx.request_id, "callback_url": url},
            )
            return
        logger.info(
            "request_id=%s callback_url=%s callback_resp_status=%s",
            ctx.request_id, url, f"{resp.status_code} {resp.reason_phrase}".strip(),
            extra={
                "request_id": ctx.request_id,
                "callback_url": url,
                "callback_resp_status": resp.status_code,
            },
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
            )
        return self._client

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Generator, Mapping, Optional

import httpx

from media_providers.core.errors import (
    OperationInProgressError,
    RequestCancelledError,
    RequestTimeoutError,
    UnavailableError,
)
from media_providers.core.scheduler import Scheduler

logger = logging.getLogger(__name__)

_PROGRESS_LOG_EVERY_S = 3.0


@dataclass(frozen=True)
class HttpRequest:
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Optional[Mapping[str, str]] = None
    content: Optional[bytes] = None
    json: Any = None
    data: Optional[Mapping[str, str]] = None

    def describe(self) -> str:
        return f"{self.method} {self.url}"


@dataclass(frozen=True)
class RawResponse:
    status: int
    headers: Mapping[str, str]
    body: bytes

    def header(self, name: str, default: str = "") -> str:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class PendingOperation:
    """
    Handle to one in-flight network exchange.

    Await it to get the RawResponse. Settled exactly once: with the response,
    or with a typed error on failure, timeout or cancellation.
    """

    def __init__(self, label: str, started_at: float, future: "asyncio.Future[RawResponse]") -> None:
        self.label = label
        self.started_at = started_at
        self.cancel_requested = False
        self._future = future
        self.transport: Optional["asyncio.Task[RawResponse]"] = None
        self.poller: Optional["asyncio.Task[None]"] = None

    @property
    def future(self) -> "asyncio.Future[RawResponse]":
        return self._future

    @property
    def active(self) -> bool:
        return not self._future.done()

    def cancel(self) -> None:
        self.cancel_requested = True

    def resolve(self, response: RawResponse) -> None:
        if not self._future.done():
            self._future.set_result(response)

    def reject(self, error: BaseException) -> None:
        if not self._future.done():
            self._future.set_exception(error)

    def __await__(self) -> Generator[Any, None, RawResponse]:
        return self._future.__await__()


class RequestBridge:
    """
    Runs one non-blocking HTTP exchange at a time and exposes it as a
    cancellable, awaitable PendingOperation.

    A poll loop driven by the scheduler checks, every tick, whether the
    transport finished, whether cancellation was requested and whether the
    timeout (wall clock from dispatch) has elapsed.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        timeout_s: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._scheduler = scheduler
        self._timeout_s = timeout_s
        self._client = client
        self._owns_client = client is None
        self._pending: Optional[PendingOperation] = None

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    @property
    def pending(self) -> Optional[PendingOperation]:
        if self._pending is not None and self._pending.active:
            return self._pending
        return None

    def dispatch(self, request: HttpRequest) -> PendingOperation:
        if self.pending is not None:
            raise OperationInProgressError(
                f"Request already in flight ({self._pending.label}); "
                "serialize calls or use a separate adapter instance."
            )

        loop = asyncio.get_running_loop()
        op = PendingOperation(request.describe(), self._scheduler.now(), loop.create_future())
        self._pending = op

        op.transport = self._scheduler.spawn(self._transmit(request))
        op.poller = self._scheduler.spawn(self._poll(op, op.transport))
        logger.debug(f"Dispatched {op.label}")
        return op

    async def send(self, request: HttpRequest) -> RawResponse:
        return await self.dispatch(request)

    def cancel(self) -> None:
        op = self.pending
        if op is not None:
            op.cancel()
            logger.info(f"Cancellation requested for {op.label}")

    async def aclose(self) -> None:
        self.cancel()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # The bridge enforces the timeout itself.
            self._client = httpx.AsyncClient(timeout=None, follow_redirects=True)
        return self._client

    async def _transmit(self, request: HttpRequest) -> RawResponse:
        resp = await self._get_client().request(
            request.method,
            request.url,
            headers=dict(request.headers),
            params=request.params,
            content=request.content,
            json=request.json,
            data=request.data,
        )
        return RawResponse(status=resp.status_code, headers=dict(resp.headers), body=resp.content)

    async def _poll(self, op: PendingOperation, transport: "asyncio.Task[RawResponse]") -> None:
        next_progress_log = _PROGRESS_LOG_EVERY_S
        try:
            while True:
                if transport.done():
                    self._complete(op, transport)
                    return

                if op.cancel_requested or op.future.cancelled():
                    transport.cancel()
                    op.reject(RequestCancelledError(f"Request was cancelled: {op.label}"))
                    logger.info(f"Cancelled {op.label}")
                    return

                elapsed = self._scheduler.now() - op.started_at
                if elapsed > self._timeout_s:
                    transport.cancel()
                    logger.error(f"Request timed out after {elapsed:.1f}s: {op.label}")
                    op.reject(RequestTimeoutError(f"Request timed out after {elapsed:.1f}s: {op.label}"))
                    return

                if elapsed >= next_progress_log:
                    logger.info(f"Waiting on {op.label}... {elapsed:.1f}s elapsed")
                    next_progress_log += _PROGRESS_LOG_EVERY_S

                await self._scheduler.tick()
        finally:
            if self._pending is op:
                self._pending = None

    def _complete(self, op: PendingOperation, transport: "asyncio.Task[RawResponse]") -> None:
        if transport.cancelled():
            op.reject(RequestCancelledError(f"Request was cancelled: {op.label}"))
            return

        error = transport.exception()
        if error is None:
            response = transport.result()
            elapsed = self._scheduler.now() - op.started_at
            logger.debug(f"{op.label} -> {response.status} in {elapsed:.2f}s")
            op.resolve(response)
        elif isinstance(error, httpx.TimeoutException):
            op.reject(RequestTimeoutError(f"Transport timed out: {op.label} ({error})"))
        elif isinstance(error, httpx.RequestError):
            op.reject(UnavailableError(f"Failed to reach {op.label}: {error}"))
        else:
            op.reject(error)

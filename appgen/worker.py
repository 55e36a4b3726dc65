"""Single-worker request queue.

Every driver mode submits its requests here.  One background task drains the
queue, so at most one request is in flight and requests complete in the order
they were submitted.

Usage::

    async with RequestWorker(generator.create_app) as worker:
        outcome = await worker.submit("create a timer app")
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

_STOP = None


class RequestWorker(Generic[T]):
    """Runs submitted requests one at a time through *handler*."""

    def __init__(self, handler: Callable[[str], Awaitable[T]]) -> None:
        self.handler = handler
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None
        self.processed = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Let queued requests finish, then end the worker task."""
        if self._task is None or self._queue is None:
            return
        await self._queue.put(_STOP)
        await self._task
        self._task = None
        self._queue = None

    async def submit(self, request: str) -> T:
        """Queue *request* and wait for the handler's result."""
        if not self.running or self._queue is None:
            raise RuntimeError("RequestWorker is not running; call start() first")
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        await self._queue.put((request, future))
        return await future

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            item = await self._queue.get()
            try:
                if item is _STOP:
                    return
                request, future = item
                try:
                    result = await self.handler(request)
                except Exception as exc:
                    if not future.done():
                        future.set_exception(exc)
                else:
                    if not future.done():
                        future.set_result(result)
                self.processed += 1
            finally:
                self._queue.task_done()

    async def __aenter__(self) -> "RequestWorker[T]":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

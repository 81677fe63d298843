"""Debounced, cancellable request slot for the table controller."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class CancellableTask:
    """At most one pending timer and one in-flight run at any time.

    ``schedule`` (re)starts the debounce timer, ``run_now`` skips it, and
    both cancel whatever was in flight before starting something new.
    Must be used from a running event loop.
    """

    def __init__(self, run: Callable[[Any], Awaitable[None]], delay: float):
        self._run = run
        self._delay = delay
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, arg: Any) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._fire, arg)

    def run_now(self, arg: Any) -> asyncio.Task:
        self._cancel_timer()
        return self._start(arg)

    def cancel(self) -> None:
        self._cancel_timer()
        self._cancel_task()

    async def wait(self) -> None:
        """Wait for the current in-flight run, if any, ignoring cancellation."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def _fire(self, arg: Any) -> None:
        self._timer = None
        self._start(arg)

    def _start(self, arg: Any) -> asyncio.Task:
        self._cancel_task()
        task = asyncio.get_running_loop().create_task(self._run(arg))
        task.add_done_callback(self._finished)
        self._task = task
        return task

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _finished(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Table request failed: %s", exc, exc_info=exc)

"""Cancel-and-reschedule debouncing on the running asyncio loop."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Set

logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``action`` once input has been quiet for ``delay`` seconds.

    Every :meth:`schedule` call cancels the previously pending timer, so only
    the last call inside a quiescence window fires. Once the timer fires the
    action runs as its own task; a later reschedule never interrupts it.
    """

    def __init__(self, delay: float, action: Callable[..., Awaitable[Any]], *, name: str = "debounce") -> None:
        self.delay = delay
        self._action = action
        self._name = name
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple) -> None:
        self._handle = None
        task = asyncio.ensure_future(self._action(*args))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced action failed", exc_info=exc, extra={"debouncer": self._name})

    async def drain(self) -> None:
        """Wait for actions that already fired to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

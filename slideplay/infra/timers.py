"""
Cancellable one-shot timers on the running event loop.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Optional

from slideplay.infra.config.logging_config import get_logger

log = get_logger("infra.timers")


class CancellableTimer:
    """One-shot timer owned and disposed by whoever creates it.

    The callback may be a plain function or a coroutine function. A coroutine
    started by the timer is kept on ``task`` and is not cancelled by
    ``cancel()`` once it has fired.
    """

    def __init__(
        self, delay_s: float, callback: Callable[..., Any], *args: Any, name: str = "timer"
    ) -> None:
        self.delay_s = delay_s
        self.name = name
        self._callback = callback
        self._args = args
        self._handle: Optional[asyncio.TimerHandle] = None
        self._fired = False
        self.task: Optional[asyncio.Task] = None

    def start(self) -> "CancellableTimer":
        if self._handle is not None:
            raise RuntimeError(f"Timer {self.name} already started")
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_s, self._fire)
        return self

    @property
    def active(self) -> bool:
        return self._handle is not None and not self._fired and not self._handle.cancelled()

    @property
    def fired(self) -> bool:
        return self._fired

    def cancel(self) -> bool:
        """Cancel if still pending. Returns True when a pending call was dropped."""
        if self._handle is None or self._fired or self._handle.cancelled():
            return False
        self._handle.cancel()
        return True

    def _fire(self) -> None:
        self._fired = True
        result = self._callback(*self._args)
        if inspect.isawaitable(result):
            self.task = asyncio.ensure_future(result)
            self.task.add_done_callback(self._report)

    def _report(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("timer.callback.failed", timer=self.name, error=str(exc))

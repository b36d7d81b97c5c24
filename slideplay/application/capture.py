"""
Capture requests to the out-of-process renderer.
"""

from __future__ import annotations

import asyncio
import itertools
import time
from typing import Any, Optional, Set

from slideplay.api.schemas.messages import (
    CaptureErrorMessage,
    CaptureRequestMessage,
    CaptureResultMessage,
)
from slideplay.application.ports import HostChannelPort
from slideplay.domain.entities.export_job import CaptureRequest
from slideplay.domain.exceptions import CaptureFailedError, CaptureTimeoutError
from slideplay.domain.value_objects.quality import CaptureOptions
from slideplay.infra.config.logging_config import get_logger
from slideplay.infra.config.settings import Settings, get_settings
from slideplay.infra.timers import CancellableTimer


class CaptureClient:
    """Sends ``capture-request`` messages and awaits the matching reply.

    Each request resolves or rejects exactly once: with the returned data URI,
    with ``CaptureFailedError`` on a ``capture-error``, or with
    ``CaptureTimeoutError`` once the timeout elapses. Its listener is removed
    in every case.
    """

    def __init__(self, channel: HostChannelPort, settings: Optional[Settings] = None) -> None:
        self._channel = channel
        self._settings = settings or get_settings()
        self._counter = itertools.count(1)
        self._pending: Set[str] = set()
        self._log = get_logger("application.capture")

    def is_pending(self, request_id: str) -> bool:
        return request_id in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def new_request(
        self, markup: str, options: Optional[CaptureOptions] = None
    ) -> CaptureRequest:
        request_id = f"capture-{int(time.time() * 1000)}-{next(self._counter)}"
        return CaptureRequest(request_id=request_id, markup=markup, options=options)

    async def capture_slide(
        self, markup: str, options: Optional[CaptureOptions] = None
    ) -> str:
        return await self.capture(self.new_request(markup, options))

    async def capture(self, request: CaptureRequest) -> str:
        timeout_s = self._settings.capture_timeout_s
        request_id = request.request_id
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()

        def on_message(message: Any) -> None:
            if future.done():
                return
            if isinstance(message, CaptureResultMessage) and message.request_id == request_id:
                future.set_result(message.data_uri)
            elif isinstance(message, CaptureErrorMessage) and message.request_id == request_id:
                future.set_exception(CaptureFailedError(request_id, message.error))

        def on_timeout() -> None:
            if not future.done():
                future.set_exception(CaptureTimeoutError(request_id, timeout_s))

        unsubscribe = self._channel.subscribe(on_message)
        timer = CancellableTimer(timeout_s, on_timeout, name=f"capture:{request_id}")
        self._pending.add(request_id)
        try:
            timer.start()
            await self._channel.send(
                CaptureRequestMessage(
                    request_id=request_id, markup=request.markup, options=request.options
                )
            )
            self._log.debug("export.capture.requested", request_id=request_id)
            return await future
        except CaptureTimeoutError:
            self._log.warning(
                "export.capture.timeout", request_id=request_id, timeout_s=timeout_s
            )
            raise
        finally:
            timer.cancel()
            unsubscribe()
            self._pending.discard(request_id)
